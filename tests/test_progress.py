# tests/test_progress.py
from datetime import datetime, timedelta

from conftest import NOW, TODAY
from practice_review.progress import (
    count_reviewed, count_reviewed_since, get_record, list_due, list_records, list_reviewed_slugs,
)

TODAY_START = datetime.combine(TODAY, datetime.min.time())


def test_count_reviewed_since_only_counts_today(db, user, make_record):
    make_record(user.id, "today", interval_days=1, next_review_at=TODAY + timedelta(days=1),
                last_reviewed=NOW.replace(hour=8))
    make_record(user.id, "yesterday", interval_days=1, next_review_at=TODAY)
    assert count_reviewed_since(db, user.id, TODAY_START) == 1
    assert count_reviewed(db, user.id) == 2


def test_counts_are_per_user(db, user, make_record):
    from practice_review.users import create_user
    bob = create_user(db, "bob")
    make_record(bob.id, "two-sum")
    assert count_reviewed(db, user.id) == 0
    assert list_reviewed_slugs(db, user.id) == set()
    assert list_reviewed_slugs(db, bob.id) == {"two-sum"}


def test_list_due_orders_by_due_date_then_slug(db, user, make_record):
    make_record(user.id, "c", interval_days=2, next_review_at=TODAY - timedelta(days=1))
    make_record(user.id, "b", interval_days=2, next_review_at=TODAY)
    make_record(user.id, "a", interval_days=2, next_review_at=TODAY)
    make_record(user.id, "later", interval_days=5, next_review_at=TODAY + timedelta(days=2))
    due = list_due(db, user.id, TODAY, TODAY_START)
    assert [p.slug for _, p in due] == ["c", "a", "b"]
    record, problem = due[0]
    assert record.problem_id == problem.id
    assert record.interval_days == 2


def test_list_due_excludes_reviewed_today(db, user, make_record):
    make_record(user.id, "done", interval_days=1, next_review_at=TODAY,
                last_reviewed=NOW.replace(hour=7))
    assert list_due(db, user.id, TODAY, TODAY_START) == []


def test_get_record_and_list_records(db, user, make_record):
    problem = make_record(user.id, "two-sum", interval_days=3, next_review_at=TODAY + timedelta(days=1))
    record = get_record(db, user.id, problem.id)
    assert record.interval_days == 3
    assert record.next_review_at == TODAY + timedelta(days=1)
    assert list_records(db, user.id)[problem.id] == record
    assert get_record(db, user.id, problem.id + 100) is None
