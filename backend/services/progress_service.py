from __future__ import annotations

import logging

from backend import repositories
from momentum.progress import Progress, add_xp, session_xp

logger = logging.getLogger(__name__)


def _progress(row: dict) -> Progress:
    return Progress(xp=row.get("current_xp", 0), level=row.get("level", 1))


def user_payload(row: dict, progress: Progress) -> dict:
    return {"name": row.get("name") or "User", **progress.to_dict()}


async def get_progress(user_email: str) -> dict:
    row = await repositories.get_user(user_email)
    return user_payload(row, _progress(row))


async def award_xp(user_email: str, amount: int) -> dict:
    # read-modify-write; concurrent awards resolve as last write wins
    row = await repositories.get_user(user_email)
    before = _progress(row)
    after = add_xp(before, amount)
    await repositories.save_user_progress(user_email, after.xp, after.level)
    if after.level > before.level:
        logger.info("User %s reached level %s", user_email, after.level)
    return {**user_payload(row, after), "leveled_up": after.level > before.level}


async def complete_focus_session(user_email: str, duration: int, started_at=None) -> dict:
    session = await repositories.create_focus_session(user_email, duration, started_at)
    awarded = session_xp(session["duration"])
    user = await award_xp(user_email, awarded)
    return {"session": session, "xp_awarded": awarded, "user": user}
