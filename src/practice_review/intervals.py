"""Review interval calculation."""
import math
from datetime import date, datetime, timedelta
from typing import Optional

from practice_review.models import ReviewOutcome

FIRST_REVIEW_INTERVALS = {
    ReviewOutcome.FAILED: 1,
    ReviewOutcome.STRUGGLED: 1,
    ReviewOutcome.SOLVED: 2,
    ReviewOutcome.INSTANT: 4,
}

STRUGGLED_MULTIPLIER = 1.2
SOLVED_MULTIPLIER = 1.5
INSTANT_MULTIPLIER = 2


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3)."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


def next_interval(
    current_interval: int,
    outcome: ReviewOutcome,
    is_first_review: bool,
    today: Optional[date] = None,
) -> dict:
    """Calculate the next review interval and due date.

    Args:
        current_interval: Days in the current interval (ignored on a first review)
        outcome: How well the learner recalled the problem
        is_first_review: True when no review record exists yet
        today: Reference date, defaults to today

    Returns:
        Dict with ``interval`` (days) and ``next_review_at`` (a date).
    """
    outcome = ReviewOutcome.parse(outcome)
    if is_first_review:
        interval = FIRST_REVIEW_INTERVALS[outcome]
    elif outcome is ReviewOutcome.FAILED:
        interval = 1
    elif outcome is ReviewOutcome.STRUGGLED:
        interval = max(1, round_half_up(current_interval * STRUGGLED_MULTIPLIER))
    elif outcome is ReviewOutcome.SOLVED:
        interval = max(2, round_half_up(current_interval * SOLVED_MULTIPLIER))
    else:
        interval = current_interval * INSTANT_MULTIPLIER

    if today is None:
        today = date.today()
    elif isinstance(today, datetime):
        today = today.date()

    return {
        "interval": interval,
        "next_review_at": today + timedelta(days=interval),
    }
