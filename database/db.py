"""Database connection and initialization."""
import logging
import sqlite3
from contextlib import contextmanager

import psycopg2

from config import DB_PATH, DB_URL

logger = logging.getLogger(__name__)

# Driver errors the stores translate into PersistenceFailure
DB_ERRORS = (sqlite3.Error, psycopg2.Error)


def get_connection(db_path=None):
    """Get a database connection with row factory."""
    # Use Postgres if DB_URL is configured
    if DB_URL and "postgres" in DB_URL:
        from database.compat import get_postgres_connection
        return get_postgres_connection()

    conn = sqlite3.connect(str(db_path or DB_PATH))
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db(db_path=None):
    """Context manager for database connections."""
    conn = get_connection(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(conn=None):
    """Create the picks and team_stats tables if they are missing."""
    from database.schema import create_tables

    if conn is not None:
        create_tables(conn)
        return

    with get_db() as conn:
        create_tables(conn)
    logger.info("Database initialized.")


def reset_db():
    """Reset the database by deleting and reinitializing."""
    if DB_URL and "postgres" in DB_URL:
        from database.schema import drop_tables
        with get_db() as conn:
            drop_tables(conn)
    elif DB_PATH.exists():
        DB_PATH.unlink()
    init_db()
