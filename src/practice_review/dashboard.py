"""Review statistics and the per-problem status shown when browsing."""
from datetime import datetime
from typing import Optional

from practice_review import catalog, progress
from practice_review.db import connection
from practice_review.models import Difficulty
from practice_review.today import start_of_day


def get_problem_status(record, today_start: datetime) -> str:
    if record is None:
        return "new"
    if record.last_reviewed and record.last_reviewed >= today_start:
        return "reviewed"
    if record.next_review_at and record.next_review_at <= today_start.date():
        return "due"
    return "ok"


def list_with_status(db_path: str, user_id: int, now: Optional[datetime] = None) -> list[dict]:
    today_start = start_of_day(now or datetime.now())
    records = progress.list_records(db_path, user_id)
    return [
        {"problem": p, "status": get_problem_status(records.get(p.id), today_start)}
        for p in catalog.list_problems(db_path)
    ]


def get_difficulty_counts(db_path: str) -> dict[str, int]:
    with connection(db_path) as conn:
        rows = conn.execute(
            "SELECT difficulty, COUNT(*) AS n FROM problems GROUP BY difficulty"
        ).fetchall()
    counts = {d.value: 0 for d in Difficulty}
    for r in rows:
        counts[Difficulty.parse(r["difficulty"]).value] += r["n"]
    return counts


def get_review_stats(db_path: str, user_id: int, now: Optional[datetime] = None) -> dict:
    today_start = start_of_day(now or datetime.now())
    due = progress.list_due(db_path, user_id, today_start.date(), today_start)
    return {
        "catalog_size": catalog.count_all(db_path),
        "reviewed": progress.count_reviewed(db_path, user_id),
        "due_now": len(due),
        "completed_today": progress.count_reviewed_since(db_path, user_id, today_start),
        "by_difficulty": get_difficulty_counts(db_path),
    }
