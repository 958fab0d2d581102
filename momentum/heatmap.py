"""Year heatmap aggregation.

Turns sparse ``(day, count)`` observations into a rectangular week grid for a
calendar year, GitHub contribution style, with fixed intensity levels.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from momentum.constants import (
    LEVEL_EMPTY,
    LEVEL_FULL,
    LEVEL_LABELS,
    LEVEL_LIGHT,
    LEVEL_MEDIUM,
    LEVEL_OPACITY,
    LEVEL_RANGES,
    SUNDAY,
)
from momentum.days import day_key, parse_day, year_bounds

logger = logging.getLogger(__name__)

GRID_ORDERS = ("day", "week")
MIN_ORDINAL = date.min.toordinal()
MAX_ORDINAL = date.max.toordinal()


def intensity_level(count) -> int:
    try:
        count = int(count or 0)
    except (TypeError, ValueError):
        return LEVEL_EMPTY
    if count <= 0:
        return LEVEL_EMPTY
    if count == 1:
        return LEVEL_LIGHT
    if count <= 4:
        return LEVEL_MEDIUM
    return LEVEL_FULL


def legend() -> list[dict]:
    items = []
    for level in (LEVEL_EMPTY, LEVEL_LIGHT, LEVEL_MEDIUM, LEVEL_FULL):
        low, high = LEVEL_RANGES[level]
        items.append(
            {
                "level": level,
                "label": LEVEL_LABELS[level],
                "opacity": LEVEL_OPACITY[level],
                "min_count": low,
                "max_count": high,
            }
        )
    return items


def _clean_count(value) -> int:
    try:
        count = int(value or 0)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def _iter_pairs(entries):
    if entries is None:
        return
    if isinstance(entries, Mapping):
        yield from entries.items()
        return
    for entry in entries:
        if isinstance(entry, Mapping):
            yield entry.get("date"), entry.get("count")
        elif isinstance(entry, (tuple, list)) and len(entry) == 2:
            yield entry[0], entry[1]
        else:
            logger.debug("Skipping unreadable heatmap entry %r", entry)


def normalize_series(entries, tz=None) -> Dict[str, int]:
    """Key observations by local day, summing days that appear more than once."""
    series: Dict[str, int] = {}
    for raw_day, raw_count in _iter_pairs(entries):
        day = parse_day(raw_day, tz)
        if day is None:
            continue
        key = day_key(day)
        series[key] = series.get(key, 0) + _clean_count(raw_count)
    return series


def series_from_events(events, tz=None, year: Optional[int] = None) -> Dict[str, int]:
    series: Dict[str, int] = {}
    for event in events:
        if not getattr(event, "completed", True):
            continue
        day = event.day(tz)
        if day is None:
            continue
        if year is not None and day.year != year:
            continue
        key = day_key(day)
        series[key] = series.get(key, 0) + 1
    return series


def merge_series(*series) -> Dict[str, int]:
    merged: Dict[str, int] = {}
    for item in series:
        for key, count in normalize_series(item).items():
            merged[key] = merged.get(key, 0) + count
    return dict(sorted(merged.items()))


def series_to_entries(series: Mapping) -> list[dict]:
    return [{"date": key, "count": count} for key, count in sorted(normalize_series(series).items())]


@dataclass(frozen=True)
class HeatmapCell:
    date: Optional[date]
    count: int
    level: int
    in_range: bool
    week_index: int
    day_index: int

    @property
    def opacity(self) -> float:
        return LEVEL_OPACITY[self.level]

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat() if self.date else None,
            "count": self.count,
            "level": self.level,
            "opacity": self.opacity,
            "in_range": self.in_range,
            "week_index": self.week_index,
            "day_index": self.day_index,
        }


@dataclass
class YearGrid:
    year: int
    week_starts_on: int
    weeks: List[List[HeatmapCell]] = field(default_factory=list)

    @property
    def week_count(self) -> int:
        return len(self.weeks)

    def cells(self, order: str = "day") -> List[HeatmapCell]:
        """Flatten the grid.

        ``"day"`` lists every first-weekday cell, then every second-weekday
        cell and so on, which is the order a CSS grid with seven fixed rows
        fills column by column. ``"week"`` is plain week-major order.
        """
        if order not in GRID_ORDERS:
            raise ValueError(f"Unknown grid order: {order!r}")
        if order == "week":
            return [cell for week in self.weeks for cell in week]
        return [week[day_index] for day_index in range(7) for week in self.weeks]

    def rows(self) -> List[List[HeatmapCell]]:
        return [[week[day_index] for week in self.weeks] for day_index in range(7)]

    def real_cells(self) -> List[HeatmapCell]:
        return [cell for week in self.weeks for cell in week if cell.in_range]

    @property
    def total(self) -> int:
        return sum(cell.count for cell in self.real_cells())

    @property
    def max_count(self) -> int:
        return max((cell.count for cell in self.real_cells()), default=0)

    def to_dict(self, order: str = "day") -> dict:
        return {
            "year": self.year,
            "week_starts_on": self.week_starts_on,
            "week_count": self.week_count,
            "order": order,
            "total": self.total,
            "max_count": self.max_count,
            "cells": [cell.to_dict() for cell in self.cells(order)],
            "legend": legend(),
        }


def _day_from_ordinal(ordinal: int) -> Optional[date]:
    # padding before year 1 or after 9999 has no calendar date
    if MIN_ORDINAL <= ordinal <= MAX_ORDINAL:
        return date.fromordinal(ordinal)
    return None


def build_year_grid(entries, year: int, week_starts_on: int = SUNDAY, tz=None) -> YearGrid:
    counts = normalize_series(entries, tz)
    year_start, year_end = year_bounds(year)
    first_ordinal = year_start.toordinal() - (year_start.weekday() - week_starts_on) % 7
    last_ordinal = year_end.toordinal() + (week_starts_on + 6 - year_end.weekday()) % 7

    weeks: List[List[HeatmapCell]] = []
    for week_index, week_ordinal in enumerate(range(first_ordinal, last_ordinal + 1, 7)):
        column = []
        for day_index in range(7):
            cell_day = _day_from_ordinal(week_ordinal + day_index)
            in_range = cell_day is not None and year_start <= cell_day <= year_end
            count = counts.get(day_key(cell_day), 0) if in_range else 0
            column.append(
                HeatmapCell(
                    date=cell_day,
                    count=count,
                    level=intensity_level(count),
                    in_range=in_range,
                    week_index=week_index,
                    day_index=day_index,
                )
            )
        weeks.append(column)
    return YearGrid(year=year, week_starts_on=week_starts_on, weeks=weeks)
