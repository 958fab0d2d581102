"""Streak computation over per-day completion events.

Completion is modelled as presence or absence of an event on a calendar day:
turning an item "on" appends an event, turning it "off" removes it. Streaks are
never adjusted in place, they are recomputed from the whole history after
every change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from momentum.days import local_day, parse_day, resolve_timezone, today_in

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionEvent:
    item_id: str
    occurred_at: object
    completed: bool = True

    def day(self, tz=None) -> Optional[date]:
        return parse_day(self.occurred_at, tz)


@dataclass(frozen=True)
class StreakState:
    count: int
    completed_today: bool

    def to_dict(self) -> dict:
        return {"streakCount": self.count, "completedToday": self.completed_today}


@dataclass(frozen=True)
class TransitionResult:
    item_id: str
    day: date
    now_completed: bool
    streak_before: int
    streak_after: int

    @property
    def streak_delta(self) -> int:
        diff = self.streak_after - self.streak_before
        return (diff > 0) - (diff < 0)

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "day": self.day.isoformat(),
            "now_completed": self.now_completed,
            "streak_before": self.streak_before,
            "streak_after": self.streak_after,
            "streak_delta": self.streak_delta,
        }


def _for_item(events: Iterable[CompletionEvent], item_id: Optional[str]):
    if item_id is None:
        return events
    return (event for event in events if event.item_id == item_id)


def completed_days(events: Iterable[CompletionEvent], tz=None, item_id: Optional[str] = None) -> set[date]:
    days = set()
    for event in _for_item(events, item_id):
        if not event.completed:
            continue
        day = event.day(tz)
        if day is None:
            continue
        days.add(day)
    return days


def _streak_from_days(days, today: date) -> int:
    count = 0
    expected = today
    for day in sorted(days, reverse=True):
        if day > expected:
            continue
        if day != expected:
            break
        count += 1
        expected -= timedelta(days=1)
    return count


def compute_streak(events: Iterable[CompletionEvent], today: date, tz=None, item_id: Optional[str] = None) -> int:
    """Count consecutive completed days ending at ``today``.

    ``today`` itself has to be completed; an open day with no completion yet
    yields 0 even if yesterday was completed.
    """
    return _streak_from_days(completed_days(events, tz, item_id), today)


def is_completed_on(events: Iterable[CompletionEvent], day: date, tz=None, item_id: Optional[str] = None) -> bool:
    return day in completed_days(events, tz, item_id)


def streak_state(events: Iterable[CompletionEvent], today: date, tz=None, item_id: Optional[str] = None) -> StreakState:
    days = completed_days(events, tz, item_id)
    return StreakState(count=_streak_from_days(days, today), completed_today=today in days)


def toggle_completion(
    events: Iterable[CompletionEvent],
    item_id: str,
    day,
    today: Optional[date] = None,
    tz=None,
) -> Tuple[List[CompletionEvent], TransitionResult]:
    """Flip the completion state of ``item_id`` on ``day``.

    Returns the new event list and the transition. Events of other items are
    passed through untouched.
    """
    history = list(events)
    target = local_day(day, tz)
    if today is None:
        today = today_in(tz)
    before = compute_streak(history, today, tz, item_id=item_id)

    def _matches(event: CompletionEvent) -> bool:
        return event.item_id == item_id and event.completed and event.day(tz) == target

    if any(_matches(event) for event in history):
        updated = [event for event in history if not _matches(event)]
        now_completed = False
    else:
        updated = history + [CompletionEvent(item_id=item_id, occurred_at=target, completed=True)]
        now_completed = True

    after = compute_streak(updated, today, tz, item_id=item_id)
    logger.debug(
        "Toggled %s on %s -> %s (streak %s -> %s)",
        item_id,
        target.isoformat(),
        "on" if now_completed else "off",
        before,
        after,
    )
    result = TransitionResult(
        item_id=item_id,
        day=target,
        now_completed=now_completed,
        streak_before=before,
        streak_after=after,
    )
    return updated, result


@dataclass
class CompletionLog:
    """In-memory event log for one or more items with derived projections."""

    tz: object = None
    events: List[CompletionEvent] = field(default_factory=list)

    def record(self, item_id: str, occurred_at=None, completed: bool = True) -> CompletionEvent:
        if occurred_at is None:
            occurred_at = datetime.now(resolve_timezone(self.tz))
        event = CompletionEvent(item_id=item_id, occurred_at=occurred_at, completed=completed)
        self.events.append(event)
        return event

    def toggle(self, item_id: str, day, today: Optional[date] = None) -> TransitionResult:
        self.events, result = toggle_completion(self.events, item_id, day, today=today, tz=self.tz)
        return result

    def streak(self, item_id: str, today: Optional[date] = None) -> int:
        if today is None:
            today = today_in(self.tz)
        return compute_streak(self.events, today, self.tz, item_id=item_id)

    def state(self, item_id: str, today: Optional[date] = None) -> StreakState:
        if today is None:
            today = today_in(self.tz)
        return streak_state(self.events, today, self.tz, item_id=item_id)

    def days(self, item_id: Optional[str] = None) -> set[date]:
        return completed_days(self.events, self.tz, item_id)
