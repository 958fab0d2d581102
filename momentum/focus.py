from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List

from momentum.constants import SUNDAY
from momentum.days import parse_day, week_start


@dataclass(frozen=True)
class FocusSession:
    duration_minutes: int
    started_at: object

    def day(self, tz=None):
        return parse_day(self.started_at, tz)


@dataclass(frozen=True)
class FocusMomentum:
    this_week_count: int
    last_week_count: int
    last_7_days_minutes: List[int]

    @property
    def trend(self) -> int:
        diff = self.this_week_count - self.last_week_count
        return (diff > 0) - (diff < 0)

    def to_dict(self) -> dict:
        return {
            "this_week_count": self.this_week_count,
            "last_week_count": self.last_week_count,
            "last_7_days_minutes": list(self.last_7_days_minutes),
            "trend": self.trend,
        }


def _minutes(session: FocusSession) -> int:
    try:
        return max(int(session.duration_minutes or 0), 0)
    except (TypeError, ValueError):
        return 0


def minutes_on_day(sessions: Iterable[FocusSession], day: date, tz=None) -> int:
    return sum(_minutes(session) for session in sessions if session.day(tz) == day)


def focus_momentum(sessions: Iterable[FocusSession], today: date, tz=None, week_starts_on: int = SUNDAY) -> FocusMomentum:
    """Compare this week's session count with last week's.

    Weeks are calendar weeks starting on ``week_starts_on``; the current week
    runs up to and including ``today``. The minutes series covers the seven
    local days ending at ``today``, oldest first.
    """
    this_week_start = week_start(today, week_starts_on)
    last_week_start = this_week_start - timedelta(days=7)
    window_start = today - timedelta(days=6)

    this_week = 0
    last_week = 0
    minutes = [0] * 7
    for session in sessions:
        day = session.day(tz)
        if day is None:
            continue
        if this_week_start <= day <= today:
            this_week += 1
        elif last_week_start <= day < this_week_start:
            last_week += 1
        if window_start <= day <= today:
            minutes[(day - window_start).days] += _minutes(session)
    return FocusMomentum(this_week_count=this_week, last_week_count=last_week, last_7_days_minutes=minutes)
