from __future__ import annotations

from fastapi import APIRouter, Depends

from backend.auth import require_user_email
from backend.schemas import UserProgressResponse
from backend.services import progress_service, visualization_service
from backend.settings import get_settings
from momentum.days import today_in

router = APIRouter()


@router.get("/v1/bootstrap")
async def bootstrap(user_email: str = Depends(require_user_email)):
    settings = get_settings()
    return {
        "user_email": user_email,
        "user_name": user_email.split("@")[0].title(),
        "today": today_in(settings.day_timezone).isoformat(),
        "day_timezone": settings.day_timezone,
        "week_starts_on": settings.week_starts_on,
    }


@router.get("/v1/user", response_model=UserProgressResponse)
async def user_progress(user_email: str = Depends(require_user_email)):
    return await progress_service.get_progress(user_email)


@router.get("/v1/dashboard")
async def dashboard(user_email: str = Depends(require_user_email)):
    return await visualization_service.dashboard(user_email)
