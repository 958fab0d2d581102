from __future__ import annotations

from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text, bindparam

from backend.db import get_sessionmaker
from backend.db_init import (
    DAILY_RETROS_TABLE,
    FOCUS_SESSIONS_TABLE,
    HABIT_LOGS_TABLE,
    HABITS_TABLE,
    TASKS_TABLE,
    USERS_TABLE,
)
from backend.settings import get_settings
from momentum.constants import (
    RETRO_GOOD_THINGS,
    RETRO_RATING_MAX,
    RETRO_RATING_MIN,
    STARTING_LEVEL,
    TASK_TYPE_LABELS,
    TASK_TYPES,
)
from momentum.days import as_utc

HABIT_COLUMNS = ["id", "user_email", "title", "category", "frequency", "streak", "created_at", "updated_at"]
HABIT_LOG_COLUMNS = ["id", "habit_id", "day", "occurred_at", "completed"]
TASK_COLUMNS = [
    "id",
    "user_email",
    "title",
    "task_type",
    "is_completed",
    "due_date",
    "completed_at",
    "created_at",
    "updated_at",
]
FOCUS_COLUMNS = ["id", "user_email", "duration", "started_at"]
USER_COLUMNS = ["user_email", "name", "level", "current_xp", "created_at", "updated_at"]
RETRO_COLUMNS = ["id", "user_email", "day", "rating", *RETRO_GOOD_THINGS, "notes", "created_at", "updated_at"]


def _new_id() -> str:
    return uuid4().hex


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _utc_timestamp(value) -> str:
    if value is None:
        return _now_iso()
    return as_utc(value, get_settings().day_timezone).isoformat(timespec="seconds")


def _clean_title(value, limit: int = 120) -> str:
    return " ".join(str(value or "").split()).strip()[:limit]


def _normalize_task_type(value) -> str:
    key = str(value or "").strip()
    if key in TASK_TYPES:
        return TASK_TYPES[key]
    if key.upper() in TASK_TYPE_LABELS:
        return key.upper()
    return TASK_TYPES["backlog"]


def _normalize_habit_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    payload["streak"] = int(payload.get("streak") or 0)
    return payload


def _normalize_log_row(row) -> dict:
    payload = dict(row)
    payload["completed"] = bool(payload.get("completed", 1))
    return payload


def _normalize_task_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    payload["is_completed"] = bool(payload.get("is_completed") or 0)
    payload["type"] = TASK_TYPE_LABELS.get(payload.get("task_type"), "backlog")
    due_date = payload.get("due_date")
    if isinstance(due_date, date):
        payload["due_date"] = due_date.isoformat()
    return payload


async def list_habits(user_email: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(HABIT_COLUMNS)}
                FROM {HABITS_TABLE}
                WHERE user_email = :user_email
                ORDER BY created_at DESC
                """
            ),
            {"user_email": user_email},
        )).mappings().all()
    return [_normalize_habit_row(row) for row in rows]


async def get_habit(user_email: str, habit_id: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(HABIT_COLUMNS)} FROM {HABITS_TABLE} "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {"id": habit_id, "user_email": user_email},
        )).mappings().fetchone()
    return _normalize_habit_row(row)


async def create_habit(user_email: str, title: str, category: str | None = None) -> dict:
    title = _clean_title(title)
    if not title:
        raise ValueError("Habit title cannot be empty")
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_email": user_email,
        "title": title,
        "category": _clean_title(category, 40) or None,
        "frequency": "DAILY",
        "streak": 0,
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {HABITS_TABLE} ({', '.join(HABIT_COLUMNS)})
                VALUES ({', '.join(f':{col}' for col in HABIT_COLUMNS)})
                """
            ),
            record,
        )
        await session.commit()
    return record


async def delete_habit(user_email: str, habit_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {HABITS_TABLE} WHERE id = :id AND user_email = :user_email"),
            {"id": habit_id, "user_email": user_email},
        )
        if result.rowcount:
            await session.execute(
                sql_text(f"DELETE FROM {HABIT_LOGS_TABLE} WHERE habit_id = :habit_id"),
                {"habit_id": habit_id},
            )
        await session.commit()


async def update_habit_streak(habit_id: str, streak: int) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"UPDATE {HABITS_TABLE} SET streak = :streak, updated_at = :updated_at WHERE id = :id"
            ),
            {"id": habit_id, "streak": int(streak), "updated_at": _now_iso()},
        )
        await session.commit()


async def list_habit_logs(habit_ids: list[str], start_iso: str | None = None, end_iso: str | None = None) -> list[dict]:
    if not habit_ids:
        return []
    clauses = ["habit_id IN :habit_ids", "completed = 1"]
    params: dict = {"habit_ids": list(habit_ids)}
    if start_iso:
        clauses.append("day >= :start_date")
        params["start_date"] = start_iso
    if end_iso:
        clauses.append("day <= :end_date")
        params["end_date"] = end_iso
    query = sql_text(
        f"""
        SELECT {', '.join(HABIT_LOG_COLUMNS)}
        FROM {HABIT_LOGS_TABLE}
        WHERE {' AND '.join(clauses)}
        ORDER BY day DESC
        """
    ).bindparams(bindparam("habit_ids", expanding=True))
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(query, params)).mappings().all()
    return [_normalize_log_row(row) for row in rows]


async def list_user_habit_logs(user_email: str, start_iso: str, end_iso: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT l.id, l.habit_id, l.day, l.occurred_at, l.completed
                FROM {HABIT_LOGS_TABLE} l
                JOIN {HABITS_TABLE} h ON h.id = l.habit_id
                WHERE h.user_email = :user_email
                  AND l.completed = 1
                  AND l.day BETWEEN :start_date AND :end_date
                ORDER BY l.day
                """
            ),
            {"user_email": user_email, "start_date": start_iso, "end_date": end_iso},
        )).mappings().all()
    return [_normalize_log_row(row) for row in rows]


async def insert_habit_log(habit_id: str, day_iso: str) -> dict:
    record = {
        "id": _new_id(),
        "habit_id": habit_id,
        "day": day_iso,
        "occurred_at": _now_iso(),
        "completed": 1,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {HABIT_LOGS_TABLE} ({', '.join(HABIT_LOG_COLUMNS)})
                VALUES ({', '.join(f':{col}' for col in HABIT_LOG_COLUMNS)})
                """
            ),
            record,
        )
        await session.commit()
    return _normalize_log_row(record)


async def delete_habit_logs(habit_id: str, day_iso: str) -> int:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"DELETE FROM {HABIT_LOGS_TABLE} WHERE habit_id = :habit_id AND day = :day"),
            {"habit_id": habit_id, "day": day_iso},
        )
        await session.commit()
    return int(result.rowcount or 0)


async def list_tasks(user_email: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(TASK_COLUMNS)}
                FROM {TASKS_TABLE}
                WHERE user_email = :user_email
                ORDER BY created_at DESC, id DESC
                """
            ),
            {"user_email": user_email},
        )).mappings().all()
    return [_normalize_task_row(row) for row in rows]


async def get_task(user_email: str, task_id: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(TASK_COLUMNS)} FROM {TASKS_TABLE} "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {"id": task_id, "user_email": user_email},
        )).mappings().fetchone()
    return _normalize_task_row(row)


async def create_task(user_email: str, title: str, task_type: str = "backlog", due_date: date | None = None) -> dict:
    title = _clean_title(title, 200)
    if not title:
        raise ValueError("Task title cannot be empty")
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_email": user_email,
        "title": title,
        "task_type": _normalize_task_type(task_type),
        "is_completed": 0,
        "due_date": due_date.isoformat() if isinstance(due_date, date) else due_date,
        "completed_at": None,
        "created_at": now,
        "updated_at": now,
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {TASKS_TABLE} ({', '.join(TASK_COLUMNS)})
                VALUES ({', '.join(f':{col}' for col in TASK_COLUMNS)})
                """
            ),
            record,
        )
        await session.commit()
    return _normalize_task_row(record)


async def toggle_task(user_email: str, task_id: str) -> dict:
    task = await get_task(user_email, task_id)
    if not task:
        raise LookupError("Task not found")
    completed = not task["is_completed"]
    now = _now_iso()
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                UPDATE {TASKS_TABLE}
                SET is_completed = :is_completed, completed_at = :completed_at, updated_at = :updated_at
                WHERE id = :id AND user_email = :user_email
                """
            ),
            {
                "id": task_id,
                "user_email": user_email,
                "is_completed": int(completed),
                "completed_at": now if completed else None,
                "updated_at": now,
            },
        )
        await session.commit()
    return await get_task(user_email, task_id)


async def move_task(user_email: str, task_id: str, task_type: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(
                f"""
                UPDATE {TASKS_TABLE} SET task_type = :task_type, updated_at = :updated_at
                WHERE id = :id AND user_email = :user_email
                """
            ),
            {
                "id": task_id,
                "user_email": user_email,
                "task_type": _normalize_task_type(task_type),
                "updated_at": _now_iso(),
            },
        )
        await session.commit()
    if not result.rowcount:
        raise LookupError("Task not found")
    return await get_task(user_email, task_id)


async def delete_task(user_email: str, task_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {TASKS_TABLE} WHERE id = :id AND user_email = :user_email"),
            {"id": task_id, "user_email": user_email},
        )
        await session.commit()


async def list_completed_tasks(user_email: str, start_iso: str, end_iso: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(TASK_COLUMNS)}
                FROM {TASKS_TABLE}
                WHERE user_email = :user_email
                  AND is_completed = 1
                  AND completed_at IS NOT NULL
                  AND completed_at >= :start_at
                  AND completed_at < :end_at
                ORDER BY completed_at
                """
            ),
            {"user_email": user_email, "start_at": start_iso, "end_at": end_iso},
        )).mappings().all()
    return [_normalize_task_row(row) for row in rows]


async def list_focus_sessions(user_email: str, start_iso: str | None = None) -> list[dict]:
    clause = "AND started_at >= :start_at" if start_iso else ""
    params = {"user_email": user_email}
    if start_iso:
        params["start_at"] = start_iso
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(FOCUS_COLUMNS)}
                FROM {FOCUS_SESSIONS_TABLE}
                WHERE user_email = :user_email {clause}
                ORDER BY started_at DESC
                """
            ),
            params,
        )).mappings().all()
    return [dict(row) for row in rows]


async def create_focus_session(user_email: str, duration: int, started_at=None) -> dict:
    """Store a finished session.

    ``started_at`` may be a datetime or ISO string; naive values are local to
    ``DAY_TIMEZONE``. It is always stored as UTC isoformat because the range
    filters compare it as text.
    """
    try:
        minutes = int(duration)
    except (TypeError, ValueError) as exc:
        raise ValueError("Duration must be a whole number of minutes") from exc
    if minutes <= 0:
        raise ValueError("Duration must be positive")
    record = {
        "id": _new_id(),
        "user_email": user_email,
        "duration": minutes,
        "started_at": _utc_timestamp(started_at),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {FOCUS_SESSIONS_TABLE} ({', '.join(FOCUS_COLUMNS)})
                VALUES ({', '.join(f':{col}' for col in FOCUS_COLUMNS)})
                """
            ),
            record,
        )
        await session.commit()
    return record


def _default_name(user_email: str) -> str:
    return user_email.split("@")[0].title() or "User"


def _normalize_user_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    payload["level"] = int(payload.get("level") or STARTING_LEVEL)
    payload["current_xp"] = int(payload.get("current_xp") or 0)
    return payload


async def get_user(user_email: str) -> dict:
    """Fetch the progress row, creating a level 1 row on first use."""
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {USERS_TABLE} (user_email, name, level, current_xp, created_at)
                VALUES (:user_email, :name, :level, 0, :created_at)
                ON CONFLICT(user_email) DO NOTHING
                """
            ),
            {
                "user_email": user_email,
                "name": _default_name(user_email),
                "level": STARTING_LEVEL,
                "created_at": _now_iso(),
            },
        )
        row = (await session.execute(
            sql_text(f"SELECT {', '.join(USER_COLUMNS)} FROM {USERS_TABLE} WHERE user_email = :user_email"),
            {"user_email": user_email},
        )).mappings().fetchone()
        await session.commit()
    return _normalize_user_row(row)


async def save_user_progress(user_email: str, xp: int, level: int) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                UPDATE {USERS_TABLE}
                SET current_xp = :current_xp, level = :level, updated_at = :updated_at
                WHERE user_email = :user_email
                """
            ),
            {"user_email": user_email, "current_xp": xp, "level": level, "updated_at": _now_iso()},
        )
        await session.commit()


def _normalize_retro_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    payload["rating"] = int(payload.get("rating") or 0)
    payload["gratitude"] = [payload[key] for key in RETRO_GOOD_THINGS if payload.get(key)]
    payload["notes"] = payload.get("notes") or ""
    return payload


def _clean_retro_fields(fields: dict) -> dict:
    clean = {}
    if "rating" in fields:
        try:
            rating = int(fields["rating"])
        except (TypeError, ValueError) as exc:
            raise ValueError("Rating must be a whole number") from exc
        if not RETRO_RATING_MIN <= rating <= RETRO_RATING_MAX:
            raise ValueError(f"Rating must be between {RETRO_RATING_MIN} and {RETRO_RATING_MAX}")
        clean["rating"] = rating
    for key in RETRO_GOOD_THINGS:
        if key in fields:
            clean[key] = _clean_title(fields[key], limit=200) or None
    if "notes" in fields:
        clean["notes"] = str(fields["notes"] or "").strip() or None
    return clean


async def list_daily_retros(user_email: str, limit: int | None = None) -> list[dict]:
    clause = "LIMIT :limit" if limit else ""
    params = {"user_email": user_email}
    if limit:
        params["limit"] = int(limit)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT {', '.join(RETRO_COLUMNS)}
                FROM {DAILY_RETROS_TABLE}
                WHERE user_email = :user_email
                ORDER BY day DESC
                {clause}
                """
            ),
            params,
        )).mappings().all()
    return [_normalize_retro_row(row) for row in rows]


async def get_daily_retro(user_email: str, day_iso: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(RETRO_COLUMNS)} FROM {DAILY_RETROS_TABLE} "
                "WHERE user_email = :user_email AND day = :day"
            ),
            {"user_email": user_email, "day": day_iso},
        )).mappings().fetchone()
    return _normalize_retro_row(row)


async def upsert_daily_retro(user_email: str, day_iso: str, fields: dict) -> dict:
    """Write the retro for ``day_iso``, replacing one already saved that day."""
    if "rating" not in fields:
        raise ValueError("Rating is required")
    clean = _clean_retro_fields(fields)
    now = _now_iso()
    record = {
        "id": _new_id(),
        "user_email": user_email,
        "day": day_iso,
        "rating": clean["rating"],
        **{key: clean.get(key) for key in RETRO_GOOD_THINGS},
        "notes": clean.get("notes"),
        "created_at": now,
        "updated_at": now,
    }
    updates = ", ".join(f"{col}=EXCLUDED.{col}" for col in ["rating", *RETRO_GOOD_THINGS, "notes", "updated_at"])
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {DAILY_RETROS_TABLE} ({', '.join(RETRO_COLUMNS)})
                VALUES ({', '.join(f':{col}' for col in RETRO_COLUMNS)})
                ON CONFLICT(user_email, day) DO UPDATE SET {updates}
                """
            ),
            record,
        )
        await session.commit()
    return await get_daily_retro(user_email, day_iso)


async def update_daily_retro(user_email: str, retro_id: str, fields: dict) -> dict:
    clean = _clean_retro_fields(fields)
    if not clean:
        raise ValueError("No changes provided")
    clean["updated_at"] = _now_iso()
    assignments = ", ".join(f"{col} = :{col}" for col in clean)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(
                f"UPDATE {DAILY_RETROS_TABLE} SET {assignments} "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {**clean, "id": retro_id, "user_email": user_email},
        )
        row = (await session.execute(
            sql_text(
                f"SELECT {', '.join(RETRO_COLUMNS)} FROM {DAILY_RETROS_TABLE} "
                "WHERE id = :id AND user_email = :user_email"
            ),
            {"id": retro_id, "user_email": user_email},
        )).mappings().fetchone()
        await session.commit()
    if not result.rowcount:
        raise LookupError("Retro not found")
    return _normalize_retro_row(row)
