# tests/test_dashboard.py
from datetime import timedelta

from conftest import NOW, TODAY
from practice_review.dashboard import get_difficulty_counts, get_review_stats, list_with_status


def test_list_with_status(db, user, make_problem, make_record):
    make_problem("fresh")
    make_record(user.id, "due", interval_days=2, next_review_at=TODAY)
    make_record(user.id, "reviewed", interval_days=1, next_review_at=TODAY + timedelta(days=1),
                last_reviewed=NOW.replace(hour=8))
    make_record(user.id, "scheduled", interval_days=6, next_review_at=TODAY + timedelta(days=3))
    status = {e["problem"].slug: e["status"] for e in list_with_status(db, user.id, now=NOW)}
    assert status == {"fresh": "new", "due": "due", "reviewed": "reviewed", "scheduled": "ok"}


def test_difficulty_counts(db, make_problem):
    make_problem("a", difficulty="Easy")
    make_problem("b", difficulty="Easy")
    make_problem("c", difficulty="Hard")
    counts = get_difficulty_counts(db)
    assert counts == {"Easy": 2, "Medium": 0, "Hard": 1, "Unknown": 0}


def test_review_stats(db, user, make_problem, make_record):
    make_problem("fresh")
    make_record(user.id, "due", interval_days=2, next_review_at=TODAY - timedelta(days=1))
    make_record(user.id, "reviewed", interval_days=1, next_review_at=TODAY + timedelta(days=1),
                last_reviewed=NOW.replace(hour=8))
    stats = get_review_stats(db, user.id, now=NOW)
    assert stats["catalog_size"] == 3
    assert stats["reviewed"] == 2
    assert stats["due_now"] == 1
    assert stats["completed_today"] == 1
    assert stats["by_difficulty"]["Medium"] == 3


def test_review_stats_empty(db, user):
    stats = get_review_stats(db, user.id, now=NOW)
    assert stats["catalog_size"] == 0
    assert stats["due_now"] == 0
