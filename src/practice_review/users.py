"""Learners, their review settings, and who is signed in."""
import logging
import sqlite3
from datetime import datetime

from practice_review.db import connection
from practice_review.errors import InvalidSettings, NotAuthenticated
from practice_review.models import Settings, SettingsUpdate, User

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "current_user_id"


def get_state(db_path: str, key: str, default: str = None) -> str | None:
    with connection(db_path) as conn:
        row = conn.execute("SELECT value FROM app_state WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else default


def set_state(db_path: str, key: str, value: str | None) -> None:
    with connection(db_path) as conn:
        conn.execute(
            "INSERT INTO app_state (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
            (key, value, value),
        )
        conn.commit()


def create_user(db_path: str, username: str, settings: Settings | None = None) -> User:
    username = username.strip()
    if not username:
        raise InvalidSettings("username must not be empty")
    settings = (settings or Settings()).validate()
    with connection(db_path) as conn:
        try:
            cur = conn.execute(
                """INSERT INTO users (username, daily_goal, max_new_per_day, default_interval, created_at)
                VALUES (?, ?, ?, ?, ?)""",
                (username, settings.daily_goal, settings.max_new_per_day,
                 settings.default_interval, datetime.now().isoformat()),
            )
        except sqlite3.IntegrityError:
            raise InvalidSettings(f"user {username} already exists") from None
        conn.commit()
        user_id = cur.lastrowid
    logger.info("Created user %s (%s)", user_id, username)
    return User(id=user_id, username=username, settings=settings)


def get_user(db_path: str, user_id: int) -> User | None:
    with connection(db_path) as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    return User.from_row(row) if row else None


def get_user_by_name(db_path: str, username: str) -> User | None:
    with connection(db_path) as conn:
        row = conn.execute("SELECT * FROM users WHERE username = ?", (username.strip(),)).fetchone()
    return User.from_row(row) if row else None


def login(db_path: str, username: str) -> User:
    """Sign in as ``username``, creating the user on first use."""
    user = get_user_by_name(db_path, username) or create_user(db_path, username)
    set_state(db_path, CURRENT_USER_KEY, str(user.id))
    return user


def logout(db_path: str) -> None:
    set_state(db_path, CURRENT_USER_KEY, None)


def resolve_current_user(db_path: str) -> User:
    user_id = get_state(db_path, CURRENT_USER_KEY)
    if not user_id:
        raise NotAuthenticated("Not signed in")
    user = get_user(db_path, int(user_id))
    if user is None:
        raise NotAuthenticated(f"Signed-in user {user_id} no longer exists")
    return user


def get_settings(db_path: str, user_id: int) -> Settings:
    user = get_user(db_path, user_id)
    if user is None:
        raise NotAuthenticated(f"Unknown user {user_id}")
    return user.settings


def update_settings(db_path: str, user_id: int, update: SettingsUpdate) -> Settings:
    """Apply a partial settings update and return the resulting settings."""
    changes = update.validate()
    assignments = ", ".join(f"{name} = ?" for name in changes)
    with connection(db_path) as conn:
        cur = conn.execute(
            f"UPDATE users SET {assignments} WHERE id = ?",
            (*changes.values(), user_id),
        )
        conn.commit()
        if cur.rowcount == 0:
            raise NotAuthenticated(f"Unknown user {user_id}")
    logger.info("Updated settings for user %s: %s", user_id, changes)
    return get_settings(db_path, user_id)
