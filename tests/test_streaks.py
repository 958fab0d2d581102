"""Streak counting and completion toggling over per-day events."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from momentum.streaks import (
    CompletionEvent,
    CompletionLog,
    compute_streak,
    completed_days,
    is_completed_on,
    streak_state,
    toggle_completion,
)

TODAY = date(2024, 3, 13)
HABIT = "habit-1"


def _events(*offsets, item_id=HABIT, completed=True):
    return [CompletionEvent(item_id=item_id, occurred_at=TODAY - timedelta(days=n), completed=completed) for n in offsets]


class TestComputeStreak:
    def test_empty_history_is_zero(self):
        assert compute_streak([], TODAY) == 0

    def test_gap_stops_the_walk(self):
        assert compute_streak(_events(0, 1, 2, 4), TODAY) == 3

    def test_today_must_be_completed(self):
        """No grace day: yesterday alone does not keep the streak alive."""
        assert compute_streak(_events(1, 2, 3), TODAY) == 0

    def test_unordered_input(self):
        assert compute_streak(_events(2, 0, 1), TODAY) == 3

    def test_uncompleted_events_are_ignored(self):
        events = _events(0, 1) + _events(2, completed=False) + _events(3)
        assert compute_streak(events, TODAY) == 2

    def test_same_day_duplicates_count_once(self):
        events = [
            CompletionEvent(HABIT, datetime(2024, 3, 13, 8, 0)),
            CompletionEvent(HABIT, datetime(2024, 3, 13, 21, 30)),
            CompletionEvent(HABIT, date(2024, 3, 12)),
        ]
        assert compute_streak(events, TODAY) == 2

    def test_future_days_do_not_break_the_walk(self):
        assert compute_streak(_events(-1, 0, 1), TODAY) == 2

    def test_filters_by_item(self):
        events = _events(0, 1) + _events(0, 1, 2, 3, item_id="other")
        assert compute_streak(events, TODAY, item_id=HABIT) == 2
        assert compute_streak(events, TODAY, item_id="other") == 4

    def test_malformed_timestamps_are_skipped(self):
        events = _events(0) + [CompletionEvent(HABIT, "yesterday-ish")]
        assert compute_streak(events, TODAY) == 1

    def test_day_boundary_follows_timezone(self):
        # 03:00 UTC on the 13th is still the evening of the 12th in Los Angeles
        events = [
            CompletionEvent(HABIT, datetime(2024, 3, 13, 3, 0, tzinfo=timezone.utc)),
            CompletionEvent(HABIT, datetime(2024, 3, 13, 20, 0, tzinfo=timezone.utc)),
        ]
        assert compute_streak(events, TODAY, tz="UTC") == 1
        assert compute_streak(events, TODAY, tz="America/Los_Angeles") == 2

    def test_reference_example(self):
        events = [
            CompletionEvent(HABIT, "2024-03-01"),
            CompletionEvent(HABIT, "2024-03-02"),
            CompletionEvent(HABIT, "2024-03-03"),
        ]
        today = date(2024, 3, 3)
        assert compute_streak(events, today) == 3

        updated, result = toggle_completion(events, HABIT, today, today=today)
        assert result.now_completed is False
        assert compute_streak(updated, today) == 0


class TestStreakState:
    def test_reports_completed_today(self):
        state = streak_state(_events(0, 1), TODAY)
        assert state.count == 2
        assert state.completed_today is True
        assert state.to_dict() == {"streakCount": 2, "completedToday": True}

    def test_not_completed_today(self):
        state = streak_state(_events(1), TODAY)
        assert state.count == 0
        assert state.completed_today is False

    def test_helpers_agree(self):
        events = _events(0, 1, 2, 5)
        assert completed_days(events) == {TODAY - timedelta(days=n) for n in (0, 1, 2, 5)}
        assert is_completed_on(events, TODAY - timedelta(days=5))
        assert not is_completed_on(events, TODAY - timedelta(days=3))
        assert streak_state(events, TODAY).count == compute_streak(events, TODAY)

    @pytest.mark.parametrize(
        "offsets",
        [(), (0,), (1, 2), (0, 1, 2, 4), (-2, 0, 1), (-1, 1), (0, 0, 1, 3), (0, 1, 2, 3, 4, 5, 6)],
    )
    def test_state_count_matches_compute_streak(self, offsets):
        events = _events(*offsets)
        state = streak_state(events, TODAY)
        assert state.count == compute_streak(events, TODAY)
        assert state.completed_today is (0 in offsets)


class TestToggleCompletion:
    def test_turn_on_extends_run(self):
        updated, result = toggle_completion(_events(1, 2), HABIT, TODAY, today=TODAY)
        assert result.now_completed is True
        assert (result.streak_before, result.streak_after) == (0, 3)
        assert result.streak_delta == 1
        assert len(updated) == 3

    def test_turn_off_middle_day(self):
        updated, result = toggle_completion(_events(0, 1, 2), HABIT, TODAY - timedelta(days=1), today=TODAY)
        assert result.now_completed is False
        assert (result.streak_before, result.streak_after) == (3, 1)
        assert result.streak_delta == -1
        assert compute_streak(updated, TODAY) == 1

    def test_detached_day_leaves_streak_alone(self):
        _, result = toggle_completion(_events(0), HABIT, TODAY - timedelta(days=10), today=TODAY)
        assert result.now_completed is True
        assert result.streak_delta == 0

    def test_turn_off_removes_same_day_duplicates(self):
        events = [
            CompletionEvent(HABIT, datetime(2024, 3, 13, 8, 0)),
            CompletionEvent(HABIT, datetime(2024, 3, 13, 9, 0)),
        ]
        updated, result = toggle_completion(events, HABIT, TODAY, today=TODAY)
        assert result.now_completed is False
        assert updated == []

    def test_other_items_untouched(self):
        other = _events(0, item_id="other")
        updated, _ = toggle_completion(_events(0) + other, HABIT, TODAY, today=TODAY)
        assert updated == other

    @pytest.mark.parametrize(
        "offsets",
        [(), (0,), (1, 2), (0, 1, 2, 4), (3,), (0, 0, 1)],
    )
    @pytest.mark.parametrize("target_offset", [0, 1, 3])
    def test_double_toggle_restores_state(self, offsets, target_offset):
        events = _events(*offsets)
        target = TODAY - timedelta(days=target_offset)
        before = streak_state(events, TODAY)

        once, first = toggle_completion(events, HABIT, target, today=TODAY)
        twice, second = toggle_completion(once, HABIT, target, today=TODAY)

        assert first.now_completed is not second.now_completed
        assert streak_state(twice, TODAY) == before
        assert completed_days(twice) == completed_days(events)
        assert second.streak_after == before.count

    def test_transition_serializes(self):
        _, result = toggle_completion([], HABIT, "2024-03-13", today=TODAY)
        assert result.to_dict() == {
            "item_id": HABIT,
            "day": "2024-03-13",
            "now_completed": True,
            "streak_before": 0,
            "streak_after": 1,
            "streak_delta": 1,
        }


class TestCompletionLog:
    def test_toggle_and_project(self):
        log = CompletionLog(tz="UTC")
        log.record(HABIT, TODAY - timedelta(days=1))
        log.record(HABIT, TODAY - timedelta(days=2))

        result = log.toggle(HABIT, TODAY, today=TODAY)

        assert result.streak_after == 3
        assert log.streak(HABIT, today=TODAY) == 3
        assert log.state(HABIT, today=TODAY).completed_today is True
        assert len(log.days(HABIT)) == 3

    def test_record_defaults_to_now(self):
        log = CompletionLog(tz="UTC")
        event = log.record(HABIT)
        assert event.occurred_at.tzinfo is not None
        assert log.state(HABIT).completed_today is True
