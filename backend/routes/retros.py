from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.auth import require_user_email
from backend import repositories
from backend.schemas import RetroCreate, RetroResponse, RetroUpdate
from backend.settings import get_settings
from momentum.days import today_in

router = APIRouter()


def _today_iso() -> str:
    return today_in(get_settings().day_timezone).isoformat()


@router.get("/v1/retros")
async def list_retros(
    limit: Optional[int] = Query(default=None, ge=1, le=366),
    user_email: str = Depends(require_user_email),
):
    items = await repositories.list_daily_retros(user_email, limit)
    return {"items": [RetroResponse(**item).model_dump() for item in items]}


@router.get("/v1/retros/today")
async def today_retro(user_email: str = Depends(require_user_email)):
    retro = await repositories.get_daily_retro(user_email, _today_iso())
    return {"item": RetroResponse(**retro).model_dump() if retro else None}


@router.post("/v1/retros", response_model=RetroResponse)
async def save_today_retro(payload: RetroCreate, user_email: str = Depends(require_user_email)):
    try:
        return await repositories.upsert_daily_retro(user_email, _today_iso(), payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.patch("/v1/retros/{retro_id}", response_model=RetroResponse)
async def update_retro(retro_id: str, patch: RetroUpdate, user_email: str = Depends(require_user_email)):
    data = patch.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=400, detail="No changes provided")
    try:
        return await repositories.update_daily_retro(user_email, retro_id, data)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
