"""Import solved problems from exported files into the catalog."""
import csv
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from practice_review.catalog import upsert_problem
from practice_review.db import connection
from practice_review.errors import ImportFormatError
from practice_review.models import Difficulty

logger = logging.getLogger(__name__)

PROBLEM_LIST_KEYS = ("problems", "questions", "problemsetQuestionList")
SUBMISSION_LIST_KEYS = ("submissions", "recentAcSubmissionList")


@dataclass
class ParseResult:
    """Outcome of one parsing strategy. ``ok`` is False only when the layout didn't fit."""
    ok: bool
    problems: list[dict] = field(default_factory=list)
    error: str = ""


def read_file_data(file_path: str):
    path = Path(file_path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".json":
            return json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            import yaml
            try:
                return yaml.safe_load(path.read_text(encoding="utf-8"))
            except yaml.YAMLError as e:
                raise ImportFormatError(f"Malformed YAML in {path.name}: {e}") from e
        elif suffix == ".csv":
            with path.open(newline="", encoding="utf-8") as f:
                return list(csv.DictReader(f))
    except (ValueError, csv.Error) as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors.
        if isinstance(e, ImportFormatError):
            raise
        raise ImportFormatError(f"Cannot read {path.name}: {e}") from e
    raise ImportFormatError(f"Unsupported file type: {suffix or path.name}")


def parse_timestamp(value) -> datetime | None:
    """Epoch seconds/milliseconds or ISO-8601 text to a naive local datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) or str(value).strip().isdigit():
        seconds = float(value)
        if seconds > 1e11:
            seconds /= 1000
        return datetime.fromtimestamp(seconds)
    else:
        dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def parse_tags(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(";") if t.strip()]
    return [t["name"] if isinstance(t, dict) else str(t) for t in value]


def _unwrap(data):
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        return data["data"]
    return data


def _find_list(data, keys):
    data = _unwrap(data)
    if isinstance(data, dict):
        for key in keys:
            value = data.get(key)
            if isinstance(value, dict):
                value = value.get("questions") or value.get("data")
            if isinstance(value, list):
                return value
    return None


def parse_problem_list(data) -> ParseResult:
    """Full solved-problem list with titles, difficulty and tags."""
    entries = data if isinstance(data, list) else _find_list(data, PROBLEM_LIST_KEYS)
    if entries is None:
        return ParseResult(ok=False, error="no problem list found")
    problems = []
    try:
        for entry in entries:
            slug = entry.get("slug") or entry.get("titleSlug")
            if not slug or not entry.get("title"):
                return ParseResult(ok=False, error=f"entry without slug or title: {entry!r}")
            problems.append({
                "slug": slug,
                "title": entry["title"],
                "difficulty": Difficulty.parse(entry.get("difficulty")),
                "tags": parse_tags(entry.get("tags") or entry.get("topicTags")),
                "solved_at": parse_timestamp(
                    entry.get("solvedAt") or entry.get("solved_at") or entry.get("lastSubmittedAt")
                ),
            })
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        return ParseResult(ok=False, error=str(e))
    return ParseResult(ok=True, problems=problems)


def parse_submissions(data) -> ParseResult:
    """Accepted-submission history; newest first, one problem per slug."""
    entries = _find_list(data, SUBMISSION_LIST_KEYS)
    if entries is None:
        return ParseResult(ok=False, error="no submission list found")
    seen = {}
    try:
        for entry in entries:
            slug = entry["titleSlug"]
            if slug in seen:
                continue
            seen[slug] = {
                "slug": slug,
                "title": entry.get("title") or slug,
                "difficulty": Difficulty.parse(entry.get("difficulty")),
                "tags": parse_tags(entry.get("topicTags")),
                "solved_at": parse_timestamp(entry.get("timestamp")),
            }
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        return ParseResult(ok=False, error=str(e))
    return ParseResult(ok=True, problems=list(seen.values()))


STRATEGIES = (
    ("problem_list", parse_problem_list),
    ("submissions", parse_submissions),
)


def parse_export(data) -> tuple[str, list[dict]]:
    """Try each layout in turn; fall back only when a layout fails, not when it is empty."""
    errors = []
    for name, strategy in STRATEGIES:
        result = strategy(data)
        if result.ok:
            return name, result.problems
        logger.info("Layout %s did not match: %s", name, result.error)
        errors.append(f"{name}: {result.error}")
    raise ImportFormatError("Unrecognised export layout (" + "; ".join(errors) + ")")


def import_problems(db_path: str, file_path: str) -> dict:
    """Upsert every problem in the export file. Existing problems are refreshed, never removed."""
    name, problems = parse_export(read_file_data(file_path))
    with connection(db_path) as conn:
        for p in problems:
            upsert_problem(conn, p["slug"], p["title"], p["difficulty"], p["tags"], p["solved_at"])
        conn.commit()
    logger.info("Imported %d problems from %s as %s", len(problems), file_path, name)
    return {"filename": Path(file_path).name, "count": len(problems), "layout": name}
