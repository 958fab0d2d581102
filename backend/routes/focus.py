from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backend.auth import require_user_email
from backend import repositories
from backend.schemas import FocusMomentumResponse, FocusSessionCreate, FocusSessionResult
from backend.services import progress_service, visualization_service

router = APIRouter()


@router.get("/v1/focus/sessions")
async def list_focus_sessions(user_email: str = Depends(require_user_email)):
    return {"items": await repositories.list_focus_sessions(user_email)}


@router.post("/v1/focus/sessions", response_model=FocusSessionResult)
async def create_focus_session(payload: FocusSessionCreate, user_email: str = Depends(require_user_email)):
    try:
        return await progress_service.complete_focus_session(user_email, payload.duration, payload.started_at)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/v1/focus/today")
async def today_focus_minutes(user_email: str = Depends(require_user_email)):
    return {"minutes": await visualization_service.today_focus_minutes(user_email)}


@router.get("/v1/focus/momentum", response_model=FocusMomentumResponse)
async def focus_momentum(user_email: str = Depends(require_user_email)):
    return await visualization_service.focus_summary(user_email)
