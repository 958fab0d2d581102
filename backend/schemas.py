from __future__ import annotations

from datetime import date, datetime
from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, Field

TaskType = Literal["my_day", "backlog", "planned"]


class HabitCreate(BaseModel):
    title: str
    category: Optional[str] = None


class HabitToggle(BaseModel):
    day: Optional[date] = None


class HabitResponse(BaseModel):
    id: str
    title: str
    category: Optional[str] = None
    frequency: str = "daily"
    streak: int = 0
    completed_today: bool = False


class TransitionResponse(BaseModel):
    item_id: str
    day: str
    now_completed: bool
    streak_before: int
    streak_after: int
    streak_delta: int


class HabitToggleResponse(BaseModel):
    habit: HabitResponse
    transition: TransitionResponse


class StreakResponse(BaseModel):
    streakCount: int
    completedToday: bool


class TaskCreate(BaseModel):
    title: str
    type: TaskType = "backlog"
    due_date: Optional[date] = None


class TaskMove(BaseModel):
    type: TaskType


class FocusSessionCreate(BaseModel):
    duration: int = Field(..., gt=0, le=24 * 60)
    started_at: Optional[datetime] = None


class HeatmapCellResponse(BaseModel):
    date: Optional[str] = None
    count: int
    level: int
    opacity: float
    in_range: bool
    week_index: int
    day_index: int


class HeatmapResponse(BaseModel):
    kind: str
    year: int
    week_starts_on: int
    week_count: int
    order: str
    total: int
    max_count: int
    cells: List[HeatmapCellResponse]
    legend: List[Dict[str, Any]]


class SeriesResponse(BaseModel):
    kind: str
    year: int
    items: List[Dict[str, Any]]


class FocusMomentumResponse(BaseModel):
    this_week_count: int
    last_week_count: int
    last_7_days_minutes: List[int]
    trend: int
    today_minutes: int


class FocusSessionResponse(BaseModel):
    id: str
    duration: int
    started_at: str


class UserProgressResponse(BaseModel):
    name: str
    xp: int
    level: int
    next_level_xp: int
    progress_pct: int
    leveled_up: Optional[bool] = None


class FocusSessionResult(BaseModel):
    session: FocusSessionResponse
    xp_awarded: int
    user: UserProgressResponse


class RetroCreate(BaseModel):
    rating: int = Field(..., ge=1, le=10)
    good_thing_1: Optional[str] = None
    good_thing_2: Optional[str] = None
    good_thing_3: Optional[str] = None
    notes: Optional[str] = None


class RetroUpdate(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=10)
    good_thing_1: Optional[str] = None
    good_thing_2: Optional[str] = None
    good_thing_3: Optional[str] = None
    notes: Optional[str] = None


class RetroResponse(BaseModel):
    id: str
    day: str
    rating: int
    good_thing_1: Optional[str] = None
    good_thing_2: Optional[str] = None
    good_thing_3: Optional[str] = None
    gratitude: List[str] = []
    notes: str = ""
