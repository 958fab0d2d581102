from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.auth import require_user_email
from backend.schemas import TaskCreate, TaskMove
from backend import repositories

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/v1/tasks")
async def list_tasks(user_email: str = Depends(require_user_email)):
    return {"items": await repositories.list_tasks(user_email)}


@router.post("/v1/tasks")
async def create_task(payload: TaskCreate, user_email: str = Depends(require_user_email)):
    try:
        return await repositories.create_task(user_email, payload.title, payload.type, payload.due_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/v1/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, user_email: str = Depends(require_user_email)):
    try:
        record = await repositories.toggle_task(user_email, task_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    logger.debug("Task %s completed=%s", task_id, record["is_completed"])
    return record


@router.patch("/v1/tasks/{task_id}/move")
async def move_task(task_id: str, payload: TaskMove, user_email: str = Depends(require_user_email)):
    try:
        return await repositories.move_task(user_email, task_id, payload.type)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/v1/tasks/{task_id}")
async def delete_task(task_id: str, user_email: str = Depends(require_user_email)):
    await repositories.delete_task(user_email, task_id)
    return {"ok": True}
