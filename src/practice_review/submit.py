"""Record a review outcome and reschedule the problem."""
import logging
from datetime import datetime
from typing import Optional

from practice_review import progress
from practice_review.db import connection
from practice_review.errors import ProblemNotFound
from practice_review.intervals import next_interval
from practice_review.models import ReviewOutcome, ReviewSubmission

logger = logging.getLogger(__name__)


def submit_review(
    db_path: str,
    user_id: int,
    slug: str,
    outcome,
    now: Optional[datetime] = None,
) -> ReviewSubmission:
    """Apply ``outcome`` to the user's record for ``slug``.

    The read of the current interval and the write of the new one happen in a
    single write transaction, so two submissions for the same problem cannot
    both advance from the same starting interval.
    """
    outcome = ReviewOutcome.parse(outcome)
    now = now or datetime.now()

    with connection(db_path) as conn:
        # Take the write lock before reading the record.
        conn.execute("BEGIN IMMEDIATE")
        row = conn.execute("SELECT id FROM problems WHERE slug = ?", (slug,)).fetchone()
        if row is None:
            conn.rollback()
            raise ProblemNotFound(slug)
        problem_id = row["id"]

        record = progress.read_record(conn, user_id, problem_id)
        updated = next_interval(
            current_interval=record.interval_days if record else 0,
            outcome=outcome,
            is_first_review=record is None,
            today=now.date(),
        )
        record_id = progress.write_record(
            conn,
            user_id=user_id,
            problem_id=problem_id,
            last_reviewed=now,
            interval_days=updated["interval"],
            next_review_at=updated["next_review_at"],
        )
        conn.commit()

    logger.info(
        "User %s reviewed %s as %s: next in %d days (%s)",
        user_id, slug, outcome.value, updated["interval"], updated["next_review_at"],
    )
    return ReviewSubmission(
        slug=slug,
        outcome=outcome,
        next_interval=updated["interval"],
        next_review_at=updated["next_review_at"],
        record_id=record_id,
    )
