"""Per-user review records: one row per (user, problem) once a problem enters the cycle."""
from datetime import date, datetime

from practice_review.db import connection
from practice_review.models import Problem, ReviewRecord

JOINED_COLUMNS = """r.id AS record_id, r.user_id, r.problem_id, r.last_reviewed,
    r.interval_days, r.next_review_at,
    p.slug, p.title, p.difficulty, p.tags, p.solved_at"""


def _split_joined(row) -> tuple[ReviewRecord, Problem]:
    data = dict(row)
    record = ReviewRecord.from_row({**data, "id": data["record_id"]})
    problem = Problem.from_row({**data, "id": data["problem_id"]})
    return record, problem


def count_reviewed_since(db_path: str, user_id: int, since: datetime) -> int:
    with connection(db_path) as conn:
        return conn.execute(
            "SELECT COUNT(*) FROM review_records WHERE user_id = ? AND last_reviewed >= ?",
            (user_id, since.isoformat()),
        ).fetchone()[0]


def count_reviewed(db_path: str, user_id: int) -> int:
    with connection(db_path) as conn:
        return conn.execute(
            "SELECT COUNT(*) FROM review_records WHERE user_id = ?", (user_id,)
        ).fetchone()[0]


def list_reviewed_slugs(db_path: str, user_id: int) -> set[str]:
    with connection(db_path) as conn:
        rows = conn.execute(
            """SELECT p.slug FROM review_records r
            JOIN problems p ON r.problem_id = p.id
            WHERE r.user_id = ?""",
            (user_id,),
        ).fetchall()
    return {r["slug"] for r in rows}


def list_due(
    db_path: str, user_id: int, as_of: date, exclude_reviewed_since: datetime
) -> list[tuple[ReviewRecord, Problem]]:
    """Records due on or before ``as_of`` and not reviewed since the cutoff.

    Ordered by due date, then slug.
    """
    with connection(db_path) as conn:
        rows = conn.execute(
            f"""SELECT {JOINED_COLUMNS}
            FROM review_records r
            JOIN problems p ON r.problem_id = p.id
            WHERE r.user_id = ?
                AND r.next_review_at <= ?
                AND (r.last_reviewed IS NULL OR r.last_reviewed < ?)
            ORDER BY r.next_review_at ASC, p.slug ASC""",
            (user_id, as_of.isoformat(), exclude_reviewed_since.isoformat()),
        ).fetchall()
    return [_split_joined(r) for r in rows]


def list_records(db_path: str, user_id: int) -> dict[int, ReviewRecord]:
    """All of a user's records keyed by problem id."""
    with connection(db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM review_records WHERE user_id = ?", (user_id,)
        ).fetchall()
    return {r["problem_id"]: ReviewRecord.from_row(r) for r in rows}


def read_record(conn, user_id: int, problem_id: int) -> ReviewRecord | None:
    row = conn.execute(
        "SELECT * FROM review_records WHERE user_id = ? AND problem_id = ?",
        (user_id, problem_id),
    ).fetchone()
    return ReviewRecord.from_row(row) if row else None


def write_record(
    conn,
    user_id: int,
    problem_id: int,
    last_reviewed: datetime,
    interval_days: int,
    next_review_at: date,
) -> int:
    """Upsert a record inside the caller's transaction and return its id."""
    conn.execute(
        """INSERT INTO review_records
            (user_id, problem_id, last_reviewed, interval_days, next_review_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(user_id, problem_id) DO UPDATE SET
            last_reviewed=excluded.last_reviewed,
            interval_days=excluded.interval_days,
            next_review_at=excluded.next_review_at""",
        (user_id, problem_id, last_reviewed.isoformat(), interval_days, next_review_at.isoformat()),
    )
    return conn.execute(
        "SELECT id FROM review_records WHERE user_id = ? AND problem_id = ?",
        (user_id, problem_id),
    ).fetchone()[0]


def get_record(db_path: str, user_id: int, problem_id: int) -> ReviewRecord | None:
    with connection(db_path) as conn:
        return read_record(conn, user_id, problem_id)
