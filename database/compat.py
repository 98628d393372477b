"""Postgres adapter that accepts the SQLite-flavoured SQL used by the stores."""
import logging

import psycopg2
import psycopg2.extras

from config import DB_URL

logger = logging.getLogger(__name__)


class SQLiteCompatibleCursor:
    def __init__(self, cursor):
        self._cursor = cursor
        self.rowcount = -1
        self.lastrowid = None

    def execute(self, query, params=None):
        # Convert SQLite ? placeholders to Postgres %s
        pg_query = query.replace('?', '%s')
        pg_query = pg_query.replace("INTEGER PRIMARY KEY AUTOINCREMENT", "SERIAL PRIMARY KEY")

        # SQLite's INSERT OR REPLACE on a primary key becomes an upsert
        has_conflict = False
        if "INSERT OR REPLACE INTO TEAM_STATS" in " ".join(pg_query.upper().split()):
            pg_query = pg_query.replace("INSERT OR REPLACE", "INSERT")
            columns = pg_query[pg_query.index("(") + 1:pg_query.index(")")]
            updates = ", ".join(
                f"{c.strip()} = EXCLUDED.{c.strip()}"
                for c in columns.split(",") if c.strip() != "team_name"
            )
            pg_query += f" ON CONFLICT (team_name) DO UPDATE SET {updates}"
            has_conflict = True

        # SQLite sets cursor.lastrowid after INSERT. Postgres needs RETURNING id.
        is_insert = pg_query.strip().upper().startswith("INSERT")
        needs_returning = is_insert and "RETURNING" not in pg_query.upper() and not has_conflict

        if needs_returning:
            pg_query += " RETURNING id"

        try:
            self._cursor.execute(pg_query, params)
        except psycopg2.Error:
            logger.error("Postgres error in query: %s | params: %s", pg_query, params)
            raise

        self.rowcount = self._cursor.rowcount
        if needs_returning:
            res = self._cursor.fetchone()
            if res:
                self.lastrowid = res[0]

    def fetchone(self):
        return self._cursor.fetchone()

    def fetchall(self):
        return self._cursor.fetchall()

    def close(self):
        self._cursor.close()


class PostgresConnection:
    def __init__(self, conn):
        self._conn = conn
        self.row_factory = None

    def cursor(self):
        # DictCursor rows behave like sqlite3.Row
        return SQLiteCompatibleCursor(self._conn.cursor(cursor_factory=psycopg2.extras.DictCursor))

    def commit(self):
        self._conn.commit()

    def rollback(self):
        self._conn.rollback()

    def close(self):
        self._conn.close()


def get_postgres_connection():
    try:
        conn = psycopg2.connect(DB_URL)
    except psycopg2.Error as e:
        logger.error("Failed to connect to Postgres: %s", e)
        raise
    return PostgresConnection(conn)
