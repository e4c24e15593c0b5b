"""Problem catalog queries."""
import json
from datetime import datetime
from typing import Iterable, Optional

from practice_review.db import connection
from practice_review.models import Difficulty, Problem

NEW_ITEM_ORDER = "ORDER BY solved_at ASC NULLS FIRST, slug ASC"


def _not_in_clause(slugs) -> tuple[str, list]:
    """Exclude ``slugs`` using a single bound JSON array, whatever its size."""
    return "slug NOT IN (SELECT value FROM json_each(?))", [json.dumps(sorted(slugs))]


def count_all(db_path: str) -> int:
    with connection(db_path) as conn:
        return conn.execute("SELECT COUNT(*) FROM problems").fetchone()[0]


def find_by_slug(db_path: str, slug: str) -> Problem | None:
    with connection(db_path) as conn:
        row = conn.execute("SELECT * FROM problems WHERE slug = ?", (slug,)).fetchone()
    return Problem.from_row(row) if row else None


def list_problems(db_path: str) -> list[Problem]:
    with connection(db_path) as conn:
        rows = conn.execute("SELECT * FROM problems ORDER BY slug").fetchall()
    return [Problem.from_row(r) for r in rows]


def list_excluding(db_path: str, slugs: Iterable[str], limit: int) -> list[Problem]:
    """Problems whose slug is not in ``slugs``, oldest solve first (unknown solve dates lead)."""
    clause, params = _not_in_clause(slugs)
    with connection(db_path) as conn:
        rows = conn.execute(
            f"SELECT * FROM problems WHERE {clause} {NEW_ITEM_ORDER} LIMIT ?",
            (*params, limit),
        ).fetchall()
    return [Problem.from_row(r) for r in rows]


def list_eligible_fresh(
    db_path: str, slugs: Iterable[str], cutoff: datetime, limit: int
) -> list[Problem]:
    """Like list_excluding, but only problems solved on or before ``cutoff`` or never dated."""
    clause, params = _not_in_clause(slugs)
    with connection(db_path) as conn:
        rows = conn.execute(
            f"""SELECT * FROM problems
            WHERE {clause} AND (solved_at IS NULL OR solved_at <= ?)
            {NEW_ITEM_ORDER} LIMIT ?""",
            (*params, cutoff.isoformat(), limit),
        ).fetchall()
    return [Problem.from_row(r) for r in rows]


def upsert_problem(
    conn,
    slug: str,
    title: str,
    difficulty=Difficulty.UNKNOWN,
    tags: Optional[list[str]] = None,
    solved_at: Optional[datetime] = None,
) -> None:
    """Insert or refresh one catalog entry inside the caller's transaction."""
    values = (
        title,
        Difficulty.parse(difficulty).value,
        json.dumps(list(tags or [])),
        solved_at.isoformat() if solved_at else None,
    )
    conn.execute(
        """INSERT INTO problems (slug, title, difficulty, tags, solved_at) VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(slug) DO UPDATE SET
            title=excluded.title, difficulty=excluded.difficulty,
            tags=excluded.tags, solved_at=excluded.solved_at""",
        (slug, *values),
    )


def group_by_topic(problems: Iterable[Problem]) -> list[tuple[str, list[Problem]]]:
    """Group problems by primary topic, largest group first."""
    groups: dict[str, list[Problem]] = {}
    for problem in problems:
        groups.setdefault(problem.topic, []).append(problem)
    return sorted(groups.items(), key=lambda item: (-len(item[1]), item[0]))
