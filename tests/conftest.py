from datetime import datetime, timedelta

import pytest

from practice_review.catalog import find_by_slug, upsert_problem
from practice_review.db import connection, init_db
from practice_review.models import Settings
from practice_review.progress import write_record
from practice_review.users import create_user

# A fixed clock so day boundaries are deterministic.
NOW = datetime(2026, 3, 15, 9, 30)
TODAY = NOW.date()


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_review.db")
    return db_path


@pytest.fixture
def db(tmp_db):
    init_db(tmp_db)
    return tmp_db


@pytest.fixture
def user(db):
    return create_user(db, "alice", Settings(daily_goal=5, max_new_per_day=2, default_interval=7))


@pytest.fixture
def make_problem(db):
    """Insert a catalog problem; ``solved_days_ago`` is relative to NOW."""
    def _make(slug, solved_days_ago=None, difficulty="Medium", tags=None, title=None):
        solved_at = NOW - timedelta(days=solved_days_ago) if solved_days_ago is not None else None
        with connection(db) as conn:
            upsert_problem(
                conn, slug, title or slug.replace("-", " ").title(),
                difficulty, ["Array"] if tags is None else tags, solved_at,
            )
            conn.commit()
        return find_by_slug(db, slug)
    return _make


@pytest.fixture
def make_record(db, make_problem):
    """Put a problem into the user's review cycle with explicit state."""
    def _make(user_id, slug, interval_days=1, next_review_at=TODAY, last_reviewed=None):
        problem = find_by_slug(db, slug) or make_problem(slug)
        if last_reviewed is None:
            last_reviewed = datetime.combine(next_review_at - timedelta(days=interval_days), NOW.time())
        with connection(db) as conn:
            write_record(conn, user_id, problem.id, last_reviewed, interval_days, next_review_at)
            conn.commit()
        return problem
    return _make
