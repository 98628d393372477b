"""Team stats cache written by the periodic refresh job."""
from datetime import datetime, timezone
from typing import List, Optional

from database.db import DB_ERRORS
from database.models import TeamStatsRow
from errors import PersistenceFailure
from modeling.types import TeamStats


class TeamStatsCache:
    def __init__(self, conn):
        self.conn = conn

    def upsert(self, team_name: str, stats: TeamStats, season: str):
        last_game = stats.last_game_date.isoformat() if stats.last_game_date else None
        try:
            cursor = self.conn.cursor()
            cursor.execute("""
                INSERT OR REPLACE INTO team_stats
                (team_name, season, gp, points_per_game, points_allowed, pace,
                 efficiency, recent_trend, avg_margin, last_game_date, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                team_name, season, stats.gp, stats.points_per_game,
                stats.points_allowed, stats.pace, stats.efficiency,
                stats.recent_trend, stats.avg_margin, last_game,
                datetime.now(timezone.utc).isoformat(),
            ))
            self.conn.commit()
        except DB_ERRORS as e:
            raise PersistenceFailure(f"Could not cache stats for {team_name}: {e}") from e

    @staticmethod
    def _row(row) -> TeamStatsRow:
        return TeamStatsRow(
            team_name=row["team_name"],
            season=row["season"],
            gp=row["gp"],
            points_per_game=row["points_per_game"],
            points_allowed=row["points_allowed"],
            pace=row["pace"],
            efficiency=row["efficiency"],
            recent_trend=row["recent_trend"],
            avg_margin=row["avg_margin"],
            last_game_date=datetime.fromisoformat(row["last_game_date"]) if row["last_game_date"] else None,
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def get(self, team_name: str) -> Optional[TeamStatsRow]:
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM team_stats WHERE team_name = ?", (team_name,))
        row = cursor.fetchone()
        return self._row(row) if row else None

    def all(self) -> List[TeamStatsRow]:
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM team_stats ORDER BY efficiency DESC")
        return [self._row(row) for row in cursor.fetchall()]
