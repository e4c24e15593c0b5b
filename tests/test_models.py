"""Tests for data model classes."""
from datetime import date, datetime

import pytest

from practice_review.errors import InvalidOutcome, InvalidSettings
from practice_review.models import (
    Difficulty, Problem, ReviewItem, ReviewOutcome, ReviewRecord, ReviewSubmission,
    Settings, SettingsUpdate, TodayQueue,
)


def test_difficulty_parse():
    assert Difficulty.parse("Easy") is Difficulty.EASY
    assert Difficulty.parse("MEDIUM") is Difficulty.MEDIUM
    assert Difficulty.parse("hard") is Difficulty.HARD
    assert Difficulty.parse(None) is Difficulty.UNKNOWN
    assert Difficulty.parse("Impossible") is Difficulty.UNKNOWN


def test_review_outcome_parse():
    assert ReviewOutcome.parse("INSTANT") is ReviewOutcome.INSTANT
    assert ReviewOutcome.parse(" struggled ") is ReviewOutcome.STRUGGLED
    assert ReviewOutcome.parse(ReviewOutcome.FAILED) is ReviewOutcome.FAILED


@pytest.mark.parametrize("value", ["", "GOOD", None, 3])
def test_review_outcome_parse_rejects(value):
    with pytest.raises(InvalidOutcome):
        ReviewOutcome.parse(value)


def test_problem_topic_is_first_tag():
    p = Problem(id=1, slug="two-sum", title="Two Sum", tags=["Array", "Hash Table"])
    assert p.topic == "Array"
    assert Problem(id=2, slug="x", title="X").topic == "Other"


def test_problem_from_row_decodes_tags_and_dates():
    row = {
        "id": 3, "slug": "lru-cache", "title": "LRU Cache", "difficulty": "Medium",
        "tags": '["Design", "Linked List"]', "solved_at": "2026-03-01T10:00:00",
    }
    p = Problem.from_row(row)
    assert p.difficulty is Difficulty.MEDIUM
    assert p.tags == ["Design", "Linked List"]
    assert p.solved_at == datetime(2026, 3, 1, 10, 0)


def test_review_record_from_row():
    row = {
        "id": 1, "user_id": 2, "problem_id": 3, "last_reviewed": "2026-03-14T08:00:00",
        "interval_days": 4, "next_review_at": "2026-03-18",
    }
    r = ReviewRecord.from_row(row)
    assert r.last_reviewed == datetime(2026, 3, 14, 8, 0)
    assert r.next_review_at == date(2026, 3, 18)


def test_settings_defaults():
    s = Settings()
    assert (s.daily_goal, s.max_new_per_day, s.default_interval) == (5, 2, 7)
    assert s.validate() is s


@pytest.mark.parametrize("kwargs", [
    {"daily_goal": 0}, {"daily_goal": 21},
    {"max_new_per_day": 0}, {"max_new_per_day": 11},
    {"default_interval": 0}, {"default_interval": 31},
])
def test_settings_bounds(kwargs):
    with pytest.raises(InvalidSettings):
        Settings(**kwargs).validate()


def test_settings_update_applies_only_given_fields():
    updated = SettingsUpdate(daily_goal=10).apply(Settings())
    assert updated == Settings(daily_goal=10, max_new_per_day=2, default_interval=7)


def test_settings_update_empty_rejected():
    with pytest.raises(InvalidSettings, match="No valid fields"):
        SettingsUpdate().validate()


def test_settings_update_bounds_message():
    with pytest.raises(InvalidSettings, match="max_new_per_day must be between 1 and 10"):
        SettingsUpdate(max_new_per_day=12).validate()


def test_settings_update_rejects_non_integers():
    with pytest.raises(InvalidSettings):
        SettingsUpdate(daily_goal="5").validate()
    with pytest.raises(InvalidSettings):
        SettingsUpdate(daily_goal=True).validate()


def test_today_queue_to_dict():
    problem = Problem(id=1, slug="two-sum", title="Two Sum", difficulty=Difficulty.EASY, tags=["Array"])
    record = ReviewRecord(id=9, user_id=1, problem_id=1, last_reviewed=datetime(2026, 3, 10, 8, 0),
                          interval_days=4, next_review_at=date(2026, 3, 14))
    queue = TodayQueue(
        date=date(2026, 3, 15), daily_goal=5, completed_today=1,
        items=[ReviewItem(problem=problem, is_new=False, record=record)], total=5,
    )
    data = queue.to_dict()
    assert data["date"] == "2026-03-15"
    assert data["dailyGoal"] == 5
    assert data["completedToday"] == 1
    assert data["total"] == 5
    item = data["remaining"][0]
    assert item["slug"] == "two-sum"
    assert item["difficulty"] == "Easy"
    assert item["id"] == 9
    assert item["intervalDays"] == 4
    assert item["isNew"] is False


def test_new_item_to_dict_has_no_history():
    problem = Problem(id=1, slug="two-sum", title="Two Sum")
    data = ReviewItem(problem=problem, is_new=True).to_dict()
    assert data["id"] is None
    assert data["lastReviewed"] is None
    assert data["intervalDays"] == 0
    assert data["isNew"] is True


def test_review_submission_to_dict():
    s = ReviewSubmission(slug="two-sum", outcome=ReviewOutcome.SOLVED, next_interval=2,
                         next_review_at=date(2026, 3, 17), record_id=4)
    assert s.to_dict() == {
        "success": True, "slug": "two-sum", "result": "SOLVED",
        "nextInterval": 2, "nextReviewAt": "2026-03-17", "progressId": 4,
    }
