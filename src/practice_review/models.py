"""Data classes for the review domain model."""
import json
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional

from practice_review.errors import InvalidOutcome, InvalidSettings


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value) -> "Difficulty":
        """Case-insensitive lookup; anything unrecognised is UNKNOWN."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().capitalize()
        for member in cls:
            if member.value == text:
                return member
        return cls.UNKNOWN


class ReviewOutcome(str, Enum):
    """Self-reported recall quality, weakest first."""
    FAILED = "FAILED"
    STRUGGLED = "STRUGGLED"
    SOLVED = "SOLVED"
    INSTANT = "INSTANT"

    @classmethod
    def parse(cls, value) -> "ReviewOutcome":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise InvalidOutcome(value)


@dataclass
class Problem:
    id: int
    slug: str
    title: str
    difficulty: Difficulty = Difficulty.UNKNOWN
    tags: list[str] = field(default_factory=list)
    solved_at: Optional[datetime] = None

    @property
    def topic(self) -> str:
        return self.tags[0] if self.tags else "Other"

    @classmethod
    def from_row(cls, row) -> "Problem":
        return cls(
            id=row["id"],
            slug=row["slug"],
            title=row["title"],
            difficulty=Difficulty.parse(row["difficulty"]),
            tags=json.loads(row["tags"] or "[]"),
            solved_at=datetime.fromisoformat(row["solved_at"]) if row["solved_at"] else None,
        )

    def to_dict(self) -> dict:
        return {
            "slug": self.slug,
            "title": self.title,
            "difficulty": self.difficulty.value,
            "tags": list(self.tags),
            "solvedAt": self.solved_at.isoformat() if self.solved_at else None,
        }


@dataclass
class ReviewRecord:
    id: int
    user_id: int
    problem_id: int
    last_reviewed: Optional[datetime] = None
    interval_days: int = 0
    next_review_at: Optional[date] = None

    @classmethod
    def from_row(cls, row) -> "ReviewRecord":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            problem_id=row["problem_id"],
            last_reviewed=datetime.fromisoformat(row["last_reviewed"]) if row["last_reviewed"] else None,
            interval_days=row["interval_days"],
            next_review_at=date.fromisoformat(row["next_review_at"]) if row["next_review_at"] else None,
        )


# (minimum, maximum) per field
SETTINGS_BOUNDS = {
    "daily_goal": (1, 20),
    "max_new_per_day": (1, 10),
    "default_interval": (1, 30),
}


def _check_bounds(name: str, value) -> None:
    low, high = SETTINGS_BOUNDS[name]
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSettings(f"{name} must be an integer")
    if value < low or value > high:
        raise InvalidSettings(f"{name} must be between {low} and {high}")


@dataclass(frozen=True)
class Settings:
    daily_goal: int = 5
    max_new_per_day: int = 2
    default_interval: int = 7

    def validate(self) -> "Settings":
        for name in SETTINGS_BOUNDS:
            _check_bounds(name, getattr(self, name))
        return self

    def to_dict(self) -> dict:
        return {
            "dailyGoal": self.daily_goal,
            "maxNewPerDay": self.max_new_per_day,
            "defaultInterval": self.default_interval,
        }


@dataclass(frozen=True)
class SettingsUpdate:
    """Partial settings change. Fields left as None are untouched."""
    daily_goal: Optional[int] = None
    max_new_per_day: Optional[int] = None
    default_interval: Optional[int] = None

    def changes(self) -> dict:
        return {
            name: getattr(self, name)
            for name in SETTINGS_BOUNDS
            if getattr(self, name) is not None
        }

    def validate(self) -> dict:
        """Return the validated changes, raising InvalidSettings on any problem."""
        changes = self.changes()
        if not changes:
            raise InvalidSettings("No valid fields to update")
        for name, value in changes.items():
            _check_bounds(name, value)
        return changes

    def apply(self, settings: Settings) -> Settings:
        return replace(settings, **self.validate())


@dataclass
class User:
    id: int
    username: str
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def from_row(cls, row) -> "User":
        return cls(
            id=row["id"],
            username=row["username"],
            settings=Settings(
                daily_goal=row["daily_goal"],
                max_new_per_day=row["max_new_per_day"],
                default_interval=row["default_interval"],
            ),
        )


@dataclass
class ReviewItem:
    problem: Problem
    is_new: bool
    record: Optional[ReviewRecord] = None

    def to_dict(self) -> dict:
        data = self.problem.to_dict()
        data.update({
            "id": self.record.id if self.record else None,
            "lastReviewed": (
                self.record.last_reviewed.isoformat()
                if self.record and self.record.last_reviewed else None
            ),
            "intervalDays": self.record.interval_days if self.record else 0,
            "isNew": self.is_new,
        })
        return data


@dataclass
class TodayQueue:
    date: date
    daily_goal: int
    completed_today: int
    items: list[ReviewItem] = field(default_factory=list)
    total: int = 0

    @property
    def due_items(self) -> list[ReviewItem]:
        return [i for i in self.items if not i.is_new]

    @property
    def new_items(self) -> list[ReviewItem]:
        return [i for i in self.items if i.is_new]

    @property
    def goal_met(self) -> bool:
        return self.completed_today >= self.daily_goal

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "dailyGoal": self.daily_goal,
            "completedToday": self.completed_today,
            "remaining": [item.to_dict() for item in self.items],
            "total": self.total,
        }


@dataclass
class ReviewSubmission:
    slug: str
    outcome: ReviewOutcome
    next_interval: int
    next_review_at: date
    record_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "success": True,
            "slug": self.slug,
            "result": self.outcome.value,
            "nextInterval": self.next_interval,
            "nextReviewAt": self.next_review_at.isoformat(),
            "progressId": self.record_id,
        }
