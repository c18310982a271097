"""Database connection factory for SQLite (local) and PostgreSQL (cloud)."""

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg2
from psycopg2.extras import RealDictCursor

from jobhackr.config import DATA_DIR, DATABASE_URL, DB_PATH


class DatabaseConnection:
    """Wrapper for database connections that provides a consistent interface."""

    def __init__(self, conn: Any, is_postgres: bool = False):
        self.conn = conn
        self.is_postgres = is_postgres
        self._cursor = None

    def cursor(self, dictionary: bool = False) -> Any:
        """Get a cursor for executing database operations.

        Args:
            dictionary: If True, rows are returned as dict-like objects
                (RealDictCursor on PostgreSQL, sqlite3.Row on SQLite).

        Returns:
            Database cursor object for executing queries and fetching results.
        """
        if self.is_postgres:
            self._cursor = self.conn.cursor(cursor_factory=RealDictCursor if dictionary else None)
        else:
            self._cursor = self.conn.cursor()
            if dictionary:
                self.conn.row_factory = sqlite3.Row
        return self._cursor

    def commit(self) -> None:
        """Commit the transaction."""
        self.conn.commit()

    def rollback(self) -> None:
        """Roll back the current transaction."""
        self.conn.rollback()

    def close(self) -> None:
        """Close the connection."""
        if self._cursor:
            self._cursor.close()
        self.conn.close()

    @property
    def placeholder(self) -> str:
        """Return the parameter placeholder for this database."""
        return "%s" if self.is_postgres else "?"

    @property
    def for_update(self) -> str:
        """Row-lock suffix for SELECTs inside a write transaction."""
        return " FOR UPDATE" if self.is_postgres else ""


@contextmanager
def get_connection() -> Generator[DatabaseConnection, None, None]:
    """Get a database connection.

    Uses PostgreSQL if DATABASE_URL is set, otherwise falls back to SQLite.

    Yields:
        DatabaseConnection wrapper with consistent interface.
    """
    if DATABASE_URL:
        conn = psycopg2.connect(DATABASE_URL)
        db = DatabaseConnection(conn, is_postgres=True)
    else:
        DATA_DIR.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(DB_PATH, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA busy_timeout=5000")
        conn.row_factory = sqlite3.Row
        db = DatabaseConnection(conn, is_postgres=False)

    try:
        yield db
    finally:
        db.close()


@contextmanager
def write_transaction() -> Generator[DatabaseConnection, None, None]:
    """Open a connection holding the write lock for a read-check-update.

    SQLite takes the database write lock up front with BEGIN IMMEDIATE, so a
    concurrent writer waits (up to busy_timeout) instead of reading stale
    counters. On PostgreSQL the transaction opens implicitly and callers lock
    the rows they read with `db.for_update`.

    Commits on success, rolls back and re-raises on error.
    """
    with get_connection() as db:
        if not db.is_postgres:
            db.conn.execute("BEGIN IMMEDIATE")
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise


# Column types that differ between the two backends
_DIALECT_TYPES = {
    "postgres": {
        "json": "JSONB",
        "timestamp": "TIMESTAMPTZ",
        "local_timestamp": "TIMESTAMP",
        "serial": "SERIAL PRIMARY KEY",
        "now": "NOW()",
    },
    "sqlite": {
        "json": "TEXT",
        "timestamp": "TEXT",
        "local_timestamp": "TEXT",
        "serial": "INTEGER PRIMARY KEY AUTOINCREMENT",
        "now": "CURRENT_TIMESTAMP",
    },
}

_SCHEMA = (
    # CV analyses, cached per CV text
    """
    CREATE TABLE IF NOT EXISTS cv_analyses (
        cv_hash TEXT PRIMARY KEY,
        analysis_json {json} NOT NULL,
        raw_text TEXT NOT NULL,
        created_at {timestamp} NOT NULL
    )
    """,
    # Which user uploaded which CV, and when
    """
    CREATE TABLE IF NOT EXISTS user_cvs (
        id {serial},
        user_id INTEGER NOT NULL,
        cv_hash TEXT NOT NULL,
        uploaded_at {timestamp} NOT NULL,
        UNIQUE (user_id, cv_hash)
    )
    """,
    # Per-user application counters and the periods they belong to
    """
    CREATE TABLE IF NOT EXISTS quota_counters (
        user_id INTEGER PRIMARY KEY,
        subscription_tier TEXT NOT NULL DEFAULT 'free',
        used_today INTEGER NOT NULL DEFAULT 0,
        used_this_week INTEGER NOT NULL DEFAULT 0,
        daily_period_start {local_timestamp},
        weekly_period_start {local_timestamp},
        updated_at {timestamp}
    )
    """,
    # Submitted applications; one per user and company+title
    """
    CREATE TABLE IF NOT EXISTS applications (
        id {serial},
        user_id INTEGER NOT NULL,
        dedup_key TEXT NOT NULL,
        job_hash TEXT NOT NULL,
        company TEXT,
        title TEXT,
        location TEXT,
        source TEXT,
        match_score INTEGER,
        created_at {timestamp} DEFAULT {now},
        UNIQUE (user_id, dedup_key)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_applications_user_id ON applications(user_id)",
)


def init_tables() -> None:
    """Create the cv_analyses, user_cvs, quota_counters and applications tables if missing."""
    with get_connection() as db:
        types = _DIALECT_TYPES["postgres" if db.is_postgres else "sqlite"]
        cursor = db.cursor()
        for statement in _SCHEMA:
            cursor.execute(statement.format(**types))
        db.commit()
