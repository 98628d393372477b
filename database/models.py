"""Data models for the NBA pick engine."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class PickType(str, Enum):
    SPREAD = "SPREAD"
    TOTAL = "TOTAL"
    MONEYLINE = "MONEYLINE"


class PickStatus(str, Enum):
    PENDING = "PENDING"
    WIN = "WIN"
    LOSS = "LOSS"
    PUSH = "PUSH"


@dataclass
class Game:
    id: int
    date: datetime
    home_team: str
    away_team: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: str = "SCHEDULED"  # SCHEDULED, LIVE, FINAL
    home_team_id: Optional[int] = None
    away_team_id: Optional[int] = None

    @property
    def has_scores(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    @property
    def is_final(self) -> bool:
        return self.status == "FINAL" and self.has_scores


@dataclass
class Pick:
    """
    A persisted recommendation.

    ``side`` and ``line`` are the source of truth for grading; ``details``
    is only a rendered label.
    """
    profile: str
    sport: str
    match_date: datetime
    home_team: str
    away_team: str
    pick_type: PickType
    side: str  # 'home', 'away', 'over', 'under'
    line: float
    odds: int
    edge: float
    status: PickStatus = PickStatus.PENDING
    profit: Optional[float] = None
    result_score: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def matchup(self) -> str:
        return f"{self.away_team} @ {self.home_team}"

    @property
    def team(self) -> Optional[str]:
        if self.side == "home":
            return self.home_team
        if self.side == "away":
            return self.away_team
        return None

    @property
    def details(self) -> str:
        if self.pick_type is PickType.SPREAD:
            return f"{self.team} {self.line:+g}"
        if self.pick_type is PickType.TOTAL:
            return f"{self.side.upper()} {self.line:g}"
        return f"{self.team} ML"


@dataclass
class TeamStatsRow:
    """Cached team snapshot as stored by the stats refresh job."""
    team_name: str
    season: str
    gp: int
    points_per_game: float
    points_allowed: float
    pace: float
    efficiency: float
    recent_trend: float
    avg_margin: float
    last_game_date: Optional[datetime] = None
    updated_at: Optional[datetime] = field(default=None)
