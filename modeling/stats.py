"""Season history -> per-team rolling statistics."""
import logging
import math
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from config import DEFAULT_PACE, RECENT_GAMES_WINDOW
from database.models import Game
from errors import UpstreamUnavailable
from modeling.types import TeamStats

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class _Totals:
    __slots__ = ("points", "allowed", "games", "margins", "last_game_date")

    def __init__(self):
        self.points = 0
        self.allowed = 0
        self.games = 0
        self.margins: List[int] = []
        self.last_game_date: Optional[datetime] = None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days of rest, rounded up. Never negative."""
    seconds = (_as_utc(later) - _as_utc(earlier)).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))


class StatsAggregator:
    """
    Reduce completed games to a TeamStats snapshot per team.

    Games are replayed in ascending date order so the recent-form window and
    days of rest refer to the latest games. Teams without a completed game
    are absent from the result.
    """

    def __init__(self, recent_window: int = RECENT_GAMES_WINDOW,
                 default_pace: float = DEFAULT_PACE):
        self.recent_window = recent_window
        self.default_pace = default_pace

    def aggregate(self, games: Iterable[Game],
                  now: Optional[datetime] = None) -> Dict[str, TeamStats]:
        """
        Args:
            games: Any mix of played and unplayed games, in any order
            now: Reference time for days of rest (defaults to current UTC time)

        Returns:
            Mapping of team name to TeamStats
        """
        now = now or datetime.now(timezone.utc)
        totals: Dict[str, _Totals] = {}

        played = sorted((g for g in games if g.has_scores), key=lambda g: _as_utc(g.date))
        for game in played:
            self._update_team(totals, game.home_team, game.home_score, game.away_score, game.date)
            self._update_team(totals, game.away_team, game.away_score, game.home_score, game.date)

        return {name: self._snapshot(name, t, now) for name, t in totals.items()}

    def _update_team(self, totals: Dict[str, _Totals], team: str,
                     scored: int, allowed: int, game_date: datetime):
        record = totals.setdefault(team, _Totals())
        record.points += scored
        record.allowed += allowed
        record.games += 1
        record.margins.append(scored - allowed)
        # Games arrive in ascending order
        record.last_game_date = game_date

    def _snapshot(self, name: str, t: _Totals, now: datetime) -> TeamStats:
        avg_points = t.points / t.games
        avg_allowed = t.allowed / t.games
        recent = t.margins[-self.recent_window:]

        return TeamStats(
            team_name=name,
            gp=t.games,
            points_per_game=avg_points,
            points_allowed=avg_allowed,
            pace=self.default_pace,
            efficiency=avg_points - avg_allowed,
            recent_trend=sum(recent) / len(recent),
            injury_impact=0.0,
            days_rest=days_between(t.last_game_date, now),
            avg_margin=(t.points - t.allowed) / t.games,
            last_game_date=t.last_game_date,
        )


def refresh_team_stats(source, cache, season: str) -> int:
    """
    Rebuild the team stats cache from a full season of games.

    Returns number of teams written.
    """
    try:
        games = source.get_games(season)
    except UpstreamUnavailable as e:
        logger.warning("Stats refresh skipped: %s", e)
        return 0

    if not games:
        logger.warning("No games returned for season %s.", season)
        return 0

    stats = StatsAggregator().aggregate(games)
    logger.info("Calculated stats for %d teams.", len(stats))

    for team_name, snapshot in stats.items():
        cache.upsert(team_name, snapshot, season)

    logger.info("Team stats cache updated.")
    return len(stats)
