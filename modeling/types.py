"""Value types passed between the aggregator, the model and the scanner."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

LINE_TYPES = ("spread", "total", "moneyline_home", "moneyline_away")


@dataclass
class TeamStats:
    """Rolling per-team snapshot built from completed games."""
    team_name: str
    gp: int
    points_per_game: float
    points_allowed: float
    pace: float
    efficiency: float       # Net rating: points for minus points against
    recent_trend: float     # Mean margin over the last few games
    injury_impact: float    # Expected points lost to absences, 0 when healthy
    days_rest: int          # 0 = back-to-back
    avg_margin: float
    last_game_date: Optional[datetime] = None


@dataclass
class BettingLine:
    source: str
    line: float   # Spread points for the home side, total points, or 0 for moneylines
    odds: int     # American odds
    type: str     # one of LINE_TYPES


@dataclass
class MatchupAnalysis:
    home: TeamStats
    away: TeamStats
    lines: List[BettingLine] = field(default_factory=list)
    win_probability: float = 0.5   # Home win probability
    spread: float = 0.0            # Conventional home spread (negative = home favored)
    total: float = 0.0
    edge: float = 0.0
    confidence: int = 50
    recommendation: str = "PASS"   # 'BET' or 'PASS'

    @property
    def matchup(self) -> str:
        return f"{self.away.team_name} @ {self.home.team_name}"
