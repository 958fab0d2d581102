from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError

from backend import repositories
from backend.settings import get_settings
from momentum.days import today_in
from momentum.streaks import CompletionEvent, StreakState, streak_state, toggle_completion

logger = logging.getLogger(__name__)


class StaleStateError(RuntimeError):
    """Stored completion state changed underneath a toggle; callers should re-fetch."""


def log_events(rows: list[dict]) -> list[CompletionEvent]:
    return [
        CompletionEvent(item_id=row["habit_id"], occurred_at=row["day"], completed=bool(row.get("completed", True)))
        for row in rows
    ]


def habit_payload(habit: dict, state: StreakState) -> dict:
    return {
        "id": habit["id"],
        "title": habit["title"],
        "category": habit.get("category"),
        "frequency": str(habit.get("frequency") or "DAILY").lower(),
        "streak": state.count,
        "completed_today": state.completed_today,
    }


async def list_habits(user_email: str) -> list[dict]:
    tz = get_settings().day_timezone
    today = today_in(tz)
    habits = await repositories.list_habits(user_email)
    logs = await repositories.list_habit_logs([habit["id"] for habit in habits])
    events = log_events(logs)
    items = []
    for habit in habits:
        state = streak_state(events, today, tz, item_id=habit["id"])
        if state.count != habit["streak"]:
            logger.info("Correcting stored streak for habit %s: %s -> %s", habit["id"], habit["streak"], state.count)
            await repositories.update_habit_streak(habit["id"], state.count)
        items.append(habit_payload(habit, state))
    return items


async def get_streak_state(user_email: str, habit_id: str) -> StreakState:
    habit = await repositories.get_habit(user_email, habit_id)
    if not habit:
        raise LookupError("Habit not found")
    tz = get_settings().day_timezone
    logs = await repositories.list_habit_logs([habit_id])
    return streak_state(log_events(logs), today_in(tz), tz, item_id=habit_id)


async def recompute_streak(user_email: str, habit_id: str) -> StreakState:
    state = await get_streak_state(user_email, habit_id)
    await repositories.update_habit_streak(habit_id, state.count)
    return state


async def toggle_habit(user_email: str, habit_id: str, day: date | None = None) -> dict:
    """Flip a habit's completion for ``day`` (default: today) and persist the new streak.

    This is a plain read-modify-write with no version check; two sessions
    toggling the same habit concurrently resolve as last write wins. A
    collision on the per-day unique index is reported as ``StaleStateError``.
    """
    habit = await repositories.get_habit(user_email, habit_id)
    if not habit:
        raise LookupError("Habit not found")
    tz = get_settings().day_timezone
    today = today_in(tz)
    target = day or today
    if target > today:
        raise ValueError("Cannot complete a habit on a future day")

    events = log_events(await repositories.list_habit_logs([habit_id]))
    updated, transition = toggle_completion(events, habit_id, target, today=today, tz=tz)
    try:
        if transition.now_completed:
            await repositories.insert_habit_log(habit_id, target.isoformat())
        else:
            await repositories.delete_habit_logs(habit_id, target.isoformat())
    except IntegrityError as exc:
        logger.warning("Concurrent toggle detected for habit %s on %s", habit_id, target.isoformat())
        raise StaleStateError("Habit state may be stale, re-fetch and try again") from exc

    await repositories.update_habit_streak(habit_id, transition.streak_after)
    state = streak_state(updated, today, tz, item_id=habit_id)
    return {"habit": habit_payload(habit, state), "transition": transition.to_dict()}
