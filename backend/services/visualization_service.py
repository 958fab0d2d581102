from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from backend import repositories
from backend.services import habit_service, progress_service
from backend.settings import get_settings
from momentum.days import today_in
from momentum.focus import FocusSession, focus_momentum, minutes_on_day
from momentum.heatmap import YearGrid, build_year_grid, merge_series, series_from_events
from momentum.streaks import CompletionEvent

logger = logging.getLogger(__name__)

HEATMAP_KINDS = ("habits", "tasks", "overall")


def _task_events(rows: list[dict]) -> list[CompletionEvent]:
    return [CompletionEvent(item_id=row["id"], occurred_at=row["completed_at"]) for row in rows]


def _focus_sessions(rows: list[dict]) -> list[FocusSession]:
    return [FocusSession(duration_minutes=row["duration"], started_at=row["started_at"]) for row in rows]


async def habit_series(user_email: str, year: int) -> dict[str, int]:
    rows = await repositories.list_user_habit_logs(user_email, f"{year}-01-01", f"{year}-12-31")
    return series_from_events(habit_service.log_events(rows), get_settings().day_timezone, year=year)


async def task_series(user_email: str, year: int) -> dict[str, int]:
    # completed_at is stored in UTC; widen by a day on each side so local-day
    # conversion can still place edge completions in the right year
    rows = await repositories.list_completed_tasks(user_email, f"{year - 1}-12-31", f"{year + 1}-01-02")
    return series_from_events(_task_events(rows), get_settings().day_timezone, year=year)


async def overall_series(user_email: str, year: int) -> dict[str, int]:
    habits, tasks = await asyncio.gather(habit_series(user_email, year), task_series(user_email, year))
    return merge_series(habits, tasks)


async def series_for(kind: str, user_email: str, year: int) -> dict[str, int]:
    if kind == "habits":
        return await habit_series(user_email, year)
    if kind == "tasks":
        return await task_series(user_email, year)
    if kind == "overall":
        return await overall_series(user_email, year)
    raise ValueError(f"Unknown heatmap kind: {kind}")


async def year_grid(kind: str, user_email: str, year: int) -> YearGrid:
    settings = get_settings()
    series = await series_for(kind, user_email, year)
    return build_year_grid(series, year, week_starts_on=settings.week_starts_on)


async def _recent_sessions(user_email: str, days: int) -> list[FocusSession]:
    tz = get_settings().day_timezone
    start = today_in(tz) - timedelta(days=days + 1)
    rows = await repositories.list_focus_sessions(user_email, start.isoformat())
    return _focus_sessions(rows)


async def focus_summary(user_email: str) -> dict:
    settings = get_settings()
    tz = settings.day_timezone
    today = today_in(tz)
    sessions = await _recent_sessions(user_email, 14)
    payload = focus_momentum(sessions, today, tz, week_starts_on=settings.week_starts_on).to_dict()
    payload["today_minutes"] = minutes_on_day(sessions, today, tz)
    return payload


async def today_focus_minutes(user_email: str) -> int:
    tz = get_settings().day_timezone
    sessions = await _recent_sessions(user_email, 1)
    return minutes_on_day(sessions, today_in(tz), tz)


async def dashboard(user_email: str) -> dict:
    year = today_in(get_settings().day_timezone).year
    # inserts the progress row on first use
    user = await progress_service.get_progress(user_email)
    habits, tasks, focus, habit_counts, overall_counts = await asyncio.gather(
        habit_service.list_habits(user_email),
        repositories.list_tasks(user_email),
        focus_summary(user_email),
        habit_series(user_email, year),
        overall_series(user_email, year),
    )
    logger.debug("Dashboard loaded for %s: %s habits, %s tasks", user_email, len(habits), len(tasks))
    return {
        "year": year,
        "user": user,
        "habits": habits,
        "tasks": tasks,
        "focus": focus,
        "habit_series": habit_counts,
        "overall_series": overall_counts,
    }
