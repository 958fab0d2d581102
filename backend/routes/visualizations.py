from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from backend.auth import require_user_email
from backend.schemas import HeatmapResponse, SeriesResponse
from backend.services import visualization_service
from backend.settings import get_settings
from momentum.constants import HEATMAP_COLORS
from momentum.days import today_in
from momentum.heatmap import series_to_entries
from momentum.visualizations import contribution_heatmap

router = APIRouter()

HeatmapKind = Literal["habits", "tasks", "overall"]


def _resolve_year(year: Optional[int]) -> int:
    if year is not None:
        return year
    return today_in(get_settings().day_timezone).year


@router.get("/v1/heatmap/{kind}", response_model=HeatmapResponse)
async def heatmap(
    kind: HeatmapKind,
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    order: Literal["day", "week"] = Query(default="day"),
    user_email: str = Depends(require_user_email),
):
    resolved = _resolve_year(year)
    grid = await visualization_service.year_grid(kind, user_email, resolved)
    return {"kind": kind, **grid.to_dict(order)}


@router.get("/v1/heatmap/{kind}/series", response_model=SeriesResponse)
async def heatmap_series(
    kind: HeatmapKind,
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    user_email: str = Depends(require_user_email),
):
    resolved = _resolve_year(year)
    series = await visualization_service.series_for(kind, user_email, resolved)
    return {"kind": kind, "year": resolved, "items": series_to_entries(series)}


@router.get("/v1/heatmap/{kind}/figure")
async def heatmap_figure(
    kind: HeatmapKind,
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    user_email: str = Depends(require_user_email),
):
    resolved = _resolve_year(year)
    grid = await visualization_service.year_grid(kind, user_email, resolved)
    fig = contribution_heatmap(grid, title=f"{kind.title()} {resolved}", color=HEATMAP_COLORS[kind])
    return Response(content=fig.to_json(), media_type="application/json")
