"""SQL schema for picks and the team stats cache."""

TABLES = ("picks", "team_stats")


def create_tables(conn):
    """Create all tables and indexes (idempotent)."""
    cursor = conn.cursor()

    # Picks table - the only long-lived ledger
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS picks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            profile TEXT NOT NULL,
            sport TEXT NOT NULL,
            match_date TEXT NOT NULL,
            matchup TEXT NOT NULL,
            home_team TEXT NOT NULL,
            away_team TEXT NOT NULL,
            pick_type TEXT NOT NULL,
            side TEXT NOT NULL,
            line REAL NOT NULL,
            odds INTEGER NOT NULL,
            edge REAL NOT NULL,
            status TEXT NOT NULL DEFAULT 'PENDING',
            profit REAL,
            result_score TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """)

    # Team stats cache - overwritten by every refresh
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS team_stats (
            team_name TEXT PRIMARY KEY,
            season TEXT NOT NULL,
            gp INTEGER NOT NULL,
            points_per_game REAL NOT NULL,
            points_allowed REAL NOT NULL,
            pace REAL NOT NULL,
            efficiency REAL NOT NULL,
            recent_trend REAL NOT NULL,
            avg_margin REAL NOT NULL,
            last_game_date TEXT,
            updated_at TEXT NOT NULL
        )
    """)

    cursor.execute("""
        CREATE INDEX IF NOT EXISTS idx_picks_key
        ON picks(profile, matchup, match_date, status)
    """)
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_picks_status ON picks(status)")

    conn.commit()


def drop_tables(conn):
    """Drop every table owned by the engine."""
    cursor = conn.cursor()
    for table in TABLES:
        cursor.execute(f"DROP TABLE IF EXISTS {table}")
    conn.commit()
