"""Today's review queue: due reviews first, then never-reviewed problems."""
import logging
from datetime import datetime, time, timedelta
from typing import Optional

from practice_review import catalog, progress
from practice_review.models import ReviewItem, Settings, TodayQueue

logger = logging.getLogger(__name__)

NEW_USER_MIN_REVIEWS = 10
NEW_USER_CATALOG_FRACTION = 0.1


def start_of_day(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.min)


def is_new_user(reviewed_count: int, catalog_size: int) -> bool:
    """Users early in the habit get every unreviewed problem, regardless of solve date."""
    return (
        reviewed_count < NEW_USER_MIN_REVIEWS
        or reviewed_count < catalog_size * NEW_USER_CATALOG_FRACTION
    )


def select_new_problems(
    db_path: str, user_id: int, settings: Settings, today_start: datetime, limit: int
):
    reviewed = progress.list_reviewed_slugs(db_path, user_id)
    catalog_size = catalog.count_all(db_path)
    if is_new_user(len(reviewed), catalog_size):
        return catalog.list_excluding(db_path, reviewed, limit)
    cutoff = today_start - timedelta(days=settings.default_interval)
    return catalog.list_eligible_fresh(db_path, reviewed, cutoff, limit)


def build_today_queue(
    db_path: str, user_id: int, settings: Settings, now: Optional[datetime] = None
) -> TodayQueue:
    """Build the ordered list of problems to work through today.

    Overdue reviews are never dropped, so the queue can exceed the daily goal.
    New problems only fill the slots the goal leaves over, capped by
    ``max_new_per_day``. Any storage failure aborts the whole build.
    """
    now = now or datetime.now()
    today_start = start_of_day(now)

    completed_today = progress.count_reviewed_since(db_path, user_id, today_start)
    due = progress.list_due(db_path, user_id, today_start.date(), today_start)
    items = [ReviewItem(problem=p, is_new=False, record=r) for r, p in due]

    remaining_slots = max(0, settings.daily_goal - completed_today - len(items))
    max_new = min(remaining_slots, settings.max_new_per_day)
    if max_new > 0:
        for problem in select_new_problems(db_path, user_id, settings, today_start, max_new):
            items.append(ReviewItem(problem=problem, is_new=True))

    queue = TodayQueue(
        date=today_start.date(),
        daily_goal=settings.daily_goal,
        completed_today=completed_today,
        items=items,
        total=max(settings.daily_goal, completed_today + len(items)),
    )
    logger.info(
        "Queue for user %s on %s: %d due, %d new, %d done today",
        user_id, queue.date, len(due), len(items) - len(due), completed_today,
    )
    return queue
