"""Pick persistence."""
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from database.db import DB_ERRORS, get_connection, init_db
from database.models import Pick, PickStatus, PickType
from errors import InvalidTransition, PersistenceFailure

logger = logging.getLogger(__name__)

# Columns a pending pick may change between scans or at settlement
UPDATABLE_FIELDS = {
    "side", "line", "odds", "edge", "pick_type", "status", "profit", "result_score",
}


def _iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _parse(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class PickStore:
    """
    Pick repository over a DB-API connection.

    Open it at the start of a run and close it at the end; use it as a
    context manager to commit on success and roll back on error.
    """

    def __init__(self, conn):
        self.conn = conn

    @classmethod
    def open(cls, db_path=None) -> "PickStore":
        try:
            conn = get_connection(db_path)
            init_db(conn)
        except DB_ERRORS as e:
            raise PersistenceFailure(f"Could not open pick store: {e}") from e
        return cls(conn)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is None:
                self.conn.commit()
            else:
                self.conn.rollback()
        finally:
            self.conn.close()

    def _execute(self, query: str, params: Iterable = ()):
        try:
            cursor = self.conn.cursor()
            cursor.execute(query, tuple(params))
            return cursor
        except DB_ERRORS as e:
            logger.error("Pick store query failed: %s", e)
            raise PersistenceFailure(str(e)) from e

    def _commit(self):
        try:
            self.conn.commit()
        except DB_ERRORS as e:
            raise PersistenceFailure(str(e)) from e

    @staticmethod
    def _row_to_pick(row) -> Pick:
        return Pick(
            id=row["id"],
            profile=row["profile"],
            sport=row["sport"],
            match_date=_parse(row["match_date"]),
            home_team=row["home_team"],
            away_team=row["away_team"],
            pick_type=PickType(row["pick_type"]),
            side=row["side"],
            line=row["line"],
            odds=row["odds"],
            edge=row["edge"],
            status=PickStatus(row["status"]),
            profit=row["profit"],
            result_score=row["result_score"],
            created_at=_parse(row["created_at"]),
            updated_at=_parse(row["updated_at"]),
        )

    def find_pending(self, profile: str, matchup: str, match_date: datetime) -> Optional[Pick]:
        """The PENDING pick for (profile, matchup, match date), if any."""
        cursor = self._execute("""
            SELECT * FROM picks
            WHERE profile = ? AND matchup = ? AND match_date = ? AND status = 'PENDING'
            ORDER BY id DESC
            LIMIT 1
        """, (profile, matchup, _iso(match_date)))
        row = cursor.fetchone()
        return self._row_to_pick(row) if row else None

    def create(self, pick: Pick) -> Pick:
        now = datetime.now(timezone.utc)
        cursor = self._execute("""
            INSERT INTO picks
            (profile, sport, match_date, matchup, home_team, away_team, pick_type,
             side, line, odds, edge, status, profit, result_score, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            pick.profile, pick.sport, _iso(pick.match_date), pick.matchup,
            pick.home_team, pick.away_team, pick.pick_type.value, pick.side,
            pick.line, pick.odds, pick.edge, pick.status.value, pick.profit,
            pick.result_score, _iso(now), _iso(now),
        ))
        self._commit()

        pick.id = cursor.lastrowid
        pick.created_at = now
        pick.updated_at = now
        return pick

    def update(self, pick_id: int, **fields) -> None:
        """
        Change fields on a PENDING pick.

        Raises:
            InvalidTransition: the pick is missing or already graded
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update pick fields: {sorted(unknown)}")

        values: Dict[str, object] = {}
        for key, value in fields.items():
            values[key] = value.value if isinstance(value, (PickStatus, PickType)) else value
        values["updated_at"] = _iso(datetime.now(timezone.utc))

        assignments = ", ".join(f"{key} = ?" for key in values)
        cursor = self._execute(
            f"UPDATE picks SET {assignments} WHERE id = ? AND status = 'PENDING'",
            list(values.values()) + [pick_id],
        )
        self._commit()

        if cursor.rowcount == 0:
            raise InvalidTransition(f"Pick {pick_id} is not PENDING")

    def find_all(self, status: Optional[PickStatus] = None,
                 profile: Optional[str] = None,
                 since: Optional[datetime] = None,
                 limit: Optional[int] = None) -> List[Pick]:
        query = "SELECT * FROM picks WHERE 1 = 1"
        params: List[object] = []
        if status is not None:
            query += " AND status = ?"
            params.append(PickStatus(status).value)
        if profile is not None:
            query += " AND profile = ?"
            params.append(profile)
        if since is not None:
            query += " AND match_date >= ?"
            params.append(_iso(since))
        query += " ORDER BY match_date DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor = self._execute(query, params)
        return [self._row_to_pick(row) for row in cursor.fetchall()]

    def delete(self, pick_ids: Iterable[int]) -> int:
        deleted = 0
        for pick_id in pick_ids:
            cursor = self._execute("DELETE FROM picks WHERE id = ?", (pick_id,))
            deleted += cursor.rowcount
        self._commit()
        return deleted
