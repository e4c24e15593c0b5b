"""Database initialization and connection management."""
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from practice_review.errors import RepositoryUnavailable

DEFAULT_DB_PATH = str(Path.home() / ".practice_review" / "review.db")
DB_PATH_ENV = "PRACTICE_REVIEW_DB"
DB_TIMEOUT_SECONDS = 5.0

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    daily_goal INTEGER NOT NULL DEFAULT 5,
    max_new_per_day INTEGER NOT NULL DEFAULT 2,
    default_interval INTEGER NOT NULL DEFAULT 7,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS problems (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    slug TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL,
    difficulty TEXT NOT NULL DEFAULT 'Unknown',
    tags TEXT NOT NULL DEFAULT '[]',
    solved_at TEXT
);

CREATE TABLE IF NOT EXISTS review_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id),
    problem_id INTEGER NOT NULL REFERENCES problems(id),
    last_reviewed TEXT,
    interval_days INTEGER NOT NULL DEFAULT 0,
    next_review_at TEXT,
    UNIQUE(user_id, problem_id)
);

CREATE INDEX IF NOT EXISTS idx_review_records_due
    ON review_records (user_id, next_review_at);

CREATE TABLE IF NOT EXISTS app_state (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_db_path() -> str:
    """Database path, honouring the PRACTICE_REVIEW_DB override."""
    return os.environ.get(DB_PATH_ENV) or DEFAULT_DB_PATH


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path, timeout=DB_TIMEOUT_SECONDS)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def connection(db_path: str):
    """Yield a connection; storage faults surface as RepositoryUnavailable.

    The connection is always closed. Uncommitted work is rolled back.
    """
    try:
        conn = get_connection(db_path)
    except sqlite3.Error as e:
        raise RepositoryUnavailable(f"cannot open database: {e}") from e
    try:
        yield conn
    except sqlite3.Error as e:
        conn.rollback()
        raise RepositoryUnavailable(str(e)) from e
    finally:
        conn.close()


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
