from __future__ import annotations

import logging

from sqlalchemy import text as sql_text

from backend.db import get_engine

logger = logging.getLogger(__name__)

HABITS_TABLE = "habits"
HABIT_LOGS_TABLE = "habit_logs"
TASKS_TABLE = "tasks"
FOCUS_SESSIONS_TABLE = "focus_sessions"
USERS_TABLE = "users"
DAILY_RETROS_TABLE = "daily_retros"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {HABITS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    title TEXT NOT NULL,
                    category TEXT,
                    frequency TEXT NOT NULL DEFAULT 'DAILY',
                    streak INTEGER DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {HABIT_LOGS_TABLE} (
                    id TEXT PRIMARY KEY,
                    habit_id TEXT NOT NULL,
                    day TEXT NOT NULL,
                    occurred_at TEXT NOT NULL,
                    completed INTEGER DEFAULT 1
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {TASKS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    title TEXT NOT NULL,
                    task_type TEXT NOT NULL DEFAULT 'BACKLOG',
                    is_completed INTEGER DEFAULT 0,
                    due_date TEXT,
                    completed_at TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {FOCUS_SESSIONS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    duration INTEGER NOT NULL,
                    started_at TEXT NOT NULL
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
                    user_email TEXT PRIMARY KEY,
                    name TEXT,
                    level INTEGER NOT NULL DEFAULT 1,
                    current_xp INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {DAILY_RETROS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_email TEXT NOT NULL,
                    day TEXT NOT NULL,
                    rating INTEGER NOT NULL,
                    good_thing_1 TEXT,
                    good_thing_2 TEXT,
                    good_thing_3 TEXT,
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )

    async def ensure_index(index_sql: str) -> None:
        try:
            async with engine.begin() as conn:
                await conn.execute(sql_text(index_sql))
        except Exception as exc:
            logger.warning("Index creation skipped: %s", exc)

    # one log per habit per calendar day
    await ensure_index(
        f"CREATE UNIQUE INDEX IF NOT EXISTS idx_{HABIT_LOGS_TABLE}_habit_day "
        f"ON {HABIT_LOGS_TABLE} (habit_id, day)"
    )
    # one retro per user per local day
    await ensure_index(
        f"CREATE UNIQUE INDEX IF NOT EXISTS idx_{DAILY_RETROS_TABLE}_user_day "
        f"ON {DAILY_RETROS_TABLE} (user_email, day)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{HABITS_TABLE}_user "
        f"ON {HABITS_TABLE} (user_email, created_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{TASKS_TABLE}_user_completed "
        f"ON {TASKS_TABLE} (user_email, completed_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{FOCUS_SESSIONS_TABLE}_user_started "
        f"ON {FOCUS_SESSIONS_TABLE} (user_email, started_at)"
    )
