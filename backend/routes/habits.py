from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException

from backend.auth import require_user_email
from backend import repositories
from backend.schemas import HabitCreate, HabitResponse, HabitToggle, HabitToggleResponse, StreakResponse
from backend.services import habit_service
from backend.services.habit_service import StaleStateError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v1/habits")
async def list_habits(user_email: str = Depends(require_user_email)):
    return {"items": await habit_service.list_habits(user_email)}


@router.post("/v1/habits", response_model=HabitResponse)
async def create_habit(payload: HabitCreate, user_email: str = Depends(require_user_email)):
    try:
        habit = await repositories.create_habit(user_email, payload.title, payload.category)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {**habit, "frequency": "daily", "completed_today": False}


@router.delete("/v1/habits/{habit_id}")
async def delete_habit(habit_id: str, user_email: str = Depends(require_user_email)):
    await repositories.delete_habit(user_email, habit_id)
    return {"ok": True}


@router.post("/v1/habits/{habit_id}/toggle", response_model=HabitToggleResponse)
async def toggle_habit(
    habit_id: str,
    payload: HabitToggle | None = Body(default=None),
    user_email: str = Depends(require_user_email),
):
    day = payload.day if payload else None
    try:
        return await habit_service.toggle_habit(user_email, habit_id, day)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StaleStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.get("/v1/habits/{habit_id}/streak", response_model=StreakResponse)
async def get_streak(habit_id: str, user_email: str = Depends(require_user_email)):
    try:
        state = await habit_service.get_streak_state(user_email, habit_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return state.to_dict()


@router.post("/v1/habits/{habit_id}/streak/recompute", response_model=StreakResponse)
async def recompute_streak(habit_id: str, user_email: str = Depends(require_user_email)):
    try:
        state = await habit_service.recompute_streak(user_email, habit_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    logger.info("Recomputed streak for habit %s: %s", habit_id, state.count)
    return state.to_dict()
