"""Tests for weekly bucketing, streaks and completion/performance percentages.

These cover the degenerate inputs the aggregation must survive without
raising:
- Empty histories and brand new habits
- Null values versus days with no entry at all
- Duplicate entries for one calendar day
- Malformed dates mixed into otherwise valid data
- Goals of zero or below
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from habitpulse.services.calendar import resolve_week
from habitpulse.services.habits import (
    DaySlot,
    attainment_percentage,
    bucket_entries,
    completion_ratio,
    consistency_by_day,
    current_streak,
    entries_by_day,
    goal_met_ratio,
    longest_streak,
    performance_radar,
)

WEDNESDAY = date(2024, 5, 15)
WEEK = resolve_week(WEDNESDAY)


def ago(days: int) -> date:
    return WEDNESDAY - timedelta(days=days)


class TestBucketEntries:
    """Entries land on the slot of their calendar day, or nowhere."""

    def test_empty_history_gives_seven_null_slots(self):
        slots = bucket_entries(WEEK, [])

        assert [slot.day for slot in slots] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert all(slot.value is None for slot in slots)
        assert not any(slot.recorded for slot in slots)

    def test_entries_fill_matching_slots(self, make_entry):
        entries = [make_entry(date(2024, 5, 13), 3), make_entry(WEDNESDAY, 8)]

        values = [slot.value for slot in bucket_entries(WEEK, entries)]

        assert values == [None, 3, None, 8, None, None, None]

    def test_entries_outside_window_are_ignored(self, make_entry):
        entries = [
            make_entry(date(2024, 5, 11), 5),  # previous Saturday
            make_entry(date(2024, 5, 19), 5),  # next Sunday
            make_entry(date(2023, 5, 15), 5),  # same weekday, a year earlier
        ]

        assert all(slot.value is None for slot in bucket_entries(WEEK, entries))

    def test_time_of_day_is_ignored(self, make_entry):
        entries = [make_entry(datetime(2024, 5, 15, 23, 59, 59), 4)]
        assert bucket_entries(WEEK, entries)[3].value == 4

    def test_null_entry_differs_from_absence(self, make_entry):
        slots = bucket_entries(WEEK, [make_entry(WEDNESDAY, None)])

        assert slots[3].value is None
        assert slots[3].recorded is True
        assert slots[2].recorded is False

    def test_duplicate_day_prefers_latest_update(self, make_entry):
        newer = make_entry(WEDNESDAY, 9, updated_at=datetime(2024, 5, 15, 20, 0))
        older = make_entry(WEDNESDAY, 3, updated_at=datetime(2024, 5, 15, 8, 0))

        assert bucket_entries(WEEK, [newer, older])[3].value == 9
        assert bucket_entries(WEEK, [older, newer])[3].value == 9

    def test_duplicate_day_tie_is_stable(self, make_entry):
        stamp = datetime(2024, 5, 15, 12, 0)
        entries = [
            make_entry(WEDNESDAY, 1, updated_at=stamp),
            make_entry(WEDNESDAY, 2, updated_at=stamp),
        ]

        first = bucket_entries(WEEK, entries)
        second = bucket_entries(WEEK, entries)

        assert first == second
        assert first[3].value == 2

    def test_malformed_dates_are_skipped(self, make_entry):
        entries = [
            make_entry("not-a-date", 4),
            make_entry("2024-02-30", 4),
            make_entry(None, 4),
            make_entry(WEDNESDAY, 6),
        ]

        slots = bucket_entries(WEEK, entries)

        assert slots[3].value == 6
        assert sum(1 for slot in slots if slot.recorded) == 1

    def test_input_list_is_not_mutated(self, make_entry):
        entries = [make_entry(ago(offset), offset) for offset in (3, 0, 5, 1)]
        before = list(entries)

        bucket_entries(WEEK, entries)
        current_streak(entries, 0)

        assert entries == before

    def test_accepts_mappings(self):
        entries = [{"occurred_on": "2024-05-15", "value": 7}]
        assert bucket_entries(WEEK, entries)[3].value == 7

    def test_slot_dict_shape(self):
        slot = DaySlot(day="Wed", on=WEDNESDAY, value=2.5, recorded=True)
        assert slot.as_dict() == {"day": "Wed", "value": 2.5}


class TestEntriesByDay:
    def test_collapses_duplicates_to_one_entry_per_day(self, make_entry):
        entries = [make_entry(WEDNESDAY, 1), make_entry(WEDNESDAY, 2), make_entry(ago(1), 3)]
        assert len(entries_by_day(entries)) == 2


class TestCurrentStreak:
    """Backward scan from the most recent entry, stopping at the first miss."""

    def test_no_entries_returns_zero(self):
        assert current_streak([], 8) == 0

    def test_scenario_water_goal(self, make_entry):
        # Two days ago 6, yesterday 10, today 8 with a goal of 8 glasses.
        entries = [make_entry(ago(2), 6), make_entry(ago(1), 10), make_entry(ago(0), 8)]
        assert current_streak(entries, 8) == 2

    def test_input_order_does_not_matter(self, make_entry):
        entries = [make_entry(ago(0), 8), make_entry(ago(2), 6), make_entry(ago(1), 10)]
        assert current_streak(entries, 8) == 2
        assert current_streak(list(reversed(entries)), 8) == 2

    def test_truncates_at_first_failure(self, make_entry):
        entries = [
            make_entry(ago(0), 5),
            make_entry(ago(1), 5),
            make_entry(ago(2), 5),
            make_entry(ago(3), 4),
            make_entry(ago(4), 5),
        ]
        assert current_streak(entries, 5) == 3

    def test_null_today_breaks_streak(self, make_entry):
        entries = [make_entry(ago(0), None), make_entry(ago(1), 5)]
        assert current_streak(entries, 5) == 0

    def test_value_equal_to_goal_counts(self, make_entry):
        assert current_streak([make_entry(ago(0), 2.5)], 2.5) == 1

    def test_gaps_do_not_break_by_default(self, make_entry):
        entries = [make_entry(ago(0), 1), make_entry(ago(1), 1), make_entry(ago(5), 1)]
        assert current_streak(entries, 1) == 3

    def test_gaps_break_when_consecutive_required(self, make_entry):
        entries = [make_entry(ago(0), 1), make_entry(ago(1), 1), make_entry(ago(5), 1)]
        assert current_streak(entries, 1, require_consecutive=True) == 2

    def test_duplicate_day_counts_once(self, make_entry):
        stamp = datetime(2024, 5, 15, 9, 0)
        entries = [
            make_entry(ago(0), 3, updated_at=stamp),
            make_entry(ago(0), 3, updated_at=stamp + timedelta(hours=1)),
            make_entry(ago(1), 3),
        ]
        assert current_streak(entries, 3) == 2

    def test_duplicate_day_uses_latest_value(self, make_entry):
        entries = [
            make_entry(ago(0), 10, updated_at=datetime(2024, 5, 15, 7, 0)),
            make_entry(ago(0), 1, updated_at=datetime(2024, 5, 15, 21, 0)),
        ]
        assert current_streak(entries, 5) == 0

    def test_malformed_dates_are_skipped(self, make_entry):
        entries = [make_entry("garbage", 0), make_entry(ago(0), 5), make_entry(ago(1), 5)]
        assert current_streak(entries, 5) == 2


class TestLongestStreak:
    def test_no_entries_returns_zero(self):
        assert longest_streak([], 1) == 0

    def test_returns_best_run(self, make_entry):
        values = [1, 1, 0, 1, 1, 1, None, 1]
        entries = [make_entry(ago(len(values) - index), value) for index, value in enumerate(values)]
        assert longest_streak(entries, 1) == 3

    def test_consecutive_days_required(self, make_entry):
        entries = [make_entry(ago(9), 1), make_entry(ago(8), 1), make_entry(ago(3), 1)]
        assert longest_streak(entries, 1) == 3
        assert longest_streak(entries, 1, require_consecutive=True) == 2


class TestCompletionRatio:
    @pytest.mark.parametrize("filled, expected", [(0, 0), (1, 14), (4, 57), (5, 71), (7, 100)])
    def test_whole_percent_of_seven(self, make_entry, filled, expected):
        entries = [make_entry(WEEK.days[index], 1) for index in range(filled)]
        assert completion_ratio(bucket_entries(WEEK, entries)) == expected

    def test_null_entries_do_not_count(self, make_entry):
        entries = [make_entry(WEDNESDAY, None), make_entry(ago(1), 0)]
        # A logged zero is present; a null is not.
        assert completion_ratio(bucket_entries(WEEK, entries)) == 14

    def test_independent_of_goal(self, make_entry):
        entries = [make_entry(ago(offset), 3) for offset in range(3)]
        slots = bucket_entries(WEEK, entries)

        assert completion_ratio(slots) == 43
        assert goal_met_ratio(slots, 1) == 100.0
        assert goal_met_ratio(slots, 100) == 0.0


class TestAttainmentPercentage:
    def test_clamps_to_one_hundred(self):
        assert attainment_percentage(1000, 1) == 100

    def test_rounds_half_up(self):
        assert attainment_percentage(1, 8) == 13  # 12.5%

    def test_partial_progress(self):
        assert attainment_percentage(6, 8) == 75

    @pytest.mark.parametrize("goal", [0, -3, None])
    def test_non_positive_goal_reports_zero(self, goal):
        assert attainment_percentage(5, goal) == 0

    def test_negative_value_clamps_to_zero(self):
        assert attainment_percentage(-4, 8) == 0

    def test_null_value_reports_zero(self):
        assert attainment_percentage(None, 8) == 0

    def test_non_finite_value_reports_zero(self):
        assert attainment_percentage(float("inf"), 8) == 0
        assert attainment_percentage(float("nan"), 8) == 0
        assert attainment_percentage(5, float("inf")) == 0

    def test_value_far_above_goal_clamps(self):
        assert attainment_percentage(1e300, 1e-10) == 100
        assert attainment_percentage(10**400, 8) == 100

    def test_value_far_below_goal(self):
        assert attainment_percentage(8, 10**400) == 0
        assert attainment_percentage(1e-300, 8) == 0

    def test_decimal_fractions_round_half_up(self):
        assert attainment_percentage(0.1, 0.8) == 13  # 12.5%
        assert attainment_percentage("3", "8") == 38  # 37.5%


class TestZeroGoal:
    def test_zero_goal_still_counts_presence(self, make_entry):
        entries = [make_entry(WEDNESDAY, 5)]
        slots = bucket_entries(WEEK, entries)

        assert attainment_percentage(5, 0) == 0
        assert completion_ratio(slots) == 14
        assert performance_radar(entries, 0, reference=WEDNESDAY)["Wednesday"] == 0

    def test_zero_goal_streak_counts_every_logged_value(self, make_entry):
        entries = [make_entry(WEDNESDAY, 5), make_entry(ago(1), 0)]

        assert current_streak(entries, 0) == 2
        assert longest_streak(entries, 0) == 2

    def test_negative_goal_streak(self, make_entry):
        entries = [make_entry(WEDNESDAY, 0), make_entry(ago(1), -1), make_entry(ago(2), -5)]

        assert current_streak(entries, -2) == 2
        assert attainment_percentage(0, -2) == 0

    def test_null_still_breaks_zero_goal_streak(self, make_entry):
        entries = [make_entry(WEDNESDAY, None), make_entry(ago(1), 3)]
        assert current_streak(entries, 0) == 0


class TestGoalMetRatio:
    def test_share_of_recorded_days(self, make_entry):
        entries = [make_entry(ago(0), 8), make_entry(ago(1), 6), make_entry(ago(2), 9)]
        assert goal_met_ratio(bucket_entries(WEEK, entries), 8) == 66.7

    def test_nothing_recorded(self):
        assert goal_met_ratio(bucket_entries(WEEK, []), 8) == 0.0


class TestPerformanceRadar:
    def test_last_seven_days_by_weekday_name(self, make_entry):
        entries = [
            make_entry(WEDNESDAY, 4),  # Wednesday, 50%
            make_entry(date(2024, 5, 10), 12),  # Friday, clamped
            make_entry(date(2024, 5, 12), None),  # Sunday, logged as not done
            make_entry(date(2024, 5, 8), 8),  # previous Wednesday, outside lookback
            make_entry(date(2024, 5, 16), 8),  # tomorrow
        ]

        radar = performance_radar(entries, 8, reference=WEDNESDAY)

        assert list(radar) == [
            "Sunday",
            "Monday",
            "Tuesday",
            "Wednesday",
            "Thursday",
            "Friday",
            "Saturday",
        ]
        assert radar["Wednesday"] == 50
        assert radar["Friday"] == 100
        assert radar["Sunday"] == 0
        assert radar["Thursday"] == 0

    def test_no_entries_reports_zero_not_null(self):
        radar = performance_radar([], 8, reference=WEDNESDAY)
        assert set(radar.values()) == {0}

    def test_extreme_values_clamp_without_overflow(self):
        entries = [
            {"occurred_on": WEDNESDAY, "value": 1e300},
            {"occurred_on": date(2024, 5, 14), "value": 10**400},
        ]

        radar = performance_radar(entries, 1e-10, reference=WEDNESDAY)

        assert radar["Wednesday"] == 100
        assert radar["Tuesday"] == 100


class TestConsistencyByDay:
    def test_share_of_habits_meeting_goal(self, make_entry):
        first = bucket_entries(WEEK, [make_entry(date(2024, 5, 13), 5)])
        second = bucket_entries(
            WEEK, [make_entry(date(2024, 5, 13), 2), make_entry(date(2024, 5, 14), 2)]
        )

        rows = consistency_by_day([(first, 5), (second, 2)])

        assert [row["day"] for row in rows] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert rows[0]["completion"] == 100.0
        assert rows[1]["completion"] == 50.0
        assert rows[6]["completion"] == 0.0

    def test_no_habits(self):
        assert all(row["completion"] == 0.0 for row in consistency_by_day([]))
