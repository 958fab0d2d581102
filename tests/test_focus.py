from __future__ import annotations

from datetime import date, datetime, timezone

from momentum.constants import MONDAY
from momentum.focus import FocusSession, focus_momentum, minutes_on_day

TODAY = date(2024, 3, 13)  # Wednesday


def _sessions():
    return [
        FocusSession(25, datetime(2024, 3, 13, 9, 0, tzinfo=timezone.utc)),
        FocusSession(50, "2024-03-11T14:00:00+00:00"),
        FocusSession(30, "2024-03-09T10:00:00Z"),
        FocusSession(20, "2024-03-02T10:00:00Z"),
        FocusSession(15, "not a timestamp"),
    ]


def test_week_over_week_counts():
    momentum = focus_momentum(_sessions(), TODAY, tz="UTC")
    assert momentum.this_week_count == 2
    assert momentum.last_week_count == 1
    assert momentum.trend == 1


def test_last_seven_days_minutes_oldest_first():
    momentum = focus_momentum(_sessions(), TODAY, tz="UTC")
    assert momentum.last_7_days_minutes == [0, 0, 30, 0, 50, 0, 25]


def test_monday_weeks():
    momentum = focus_momentum(_sessions(), TODAY, tz="UTC", week_starts_on=MONDAY)
    # Monday weeks: 03-11..03-13 this week, 03-04..03-10 last week
    assert momentum.this_week_count == 2
    assert momentum.last_week_count == 1


def test_empty_history():
    momentum = focus_momentum([], TODAY)
    assert momentum.to_dict() == {
        "this_week_count": 0,
        "last_week_count": 0,
        "last_7_days_minutes": [0] * 7,
        "trend": 0,
    }


def test_minutes_on_day():
    assert minutes_on_day(_sessions(), TODAY, tz="UTC") == 25
    assert minutes_on_day(_sessions(), date(2024, 3, 12), tz="UTC") == 0
    assert minutes_on_day([FocusSession(None, "2024-03-13")], TODAY) == 0
