"""Habit progress aggregation: weekly buckets, streaks and percentages.

Every function here is pure. Inputs are never mutated; entry collections are
copied before sorting. Entries are read through their ``occurred_on``,
``value`` and ``updated_at`` attributes (or mapping keys of the same name), so
ORM rows, dataclasses and decoded JSON all work.

Degenerate data never raises: entries with malformed dates are skipped,
duplicate days collapse to a single winner, and a non-positive goal reports a
0% attainment instead of dividing by zero.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Sequence

from ..logging_config import get_logger
from .calendar import (
    DAY_LABELS,
    DAY_NAMES,
    WEEK_LENGTH,
    WeekWindow,
    day_name,
    local_instant,
    lookback_days,
)

logger = get_logger(__name__)

# Consistency chart runs Monday first, unlike the weekly bucket.
CONSISTENCY_ORDER: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True)
class DaySlot:
    """One labeled day of the weekly calendar."""

    day: str
    on: date
    value: float | None
    recorded: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {"day": self.day, "value": self.value}


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(name)
    return getattr(entry, name, None)


def _numeric(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _rank(entry: Any, occurred: datetime, tz: tzinfo | None) -> tuple[datetime, datetime]:
    updated = local_instant(_field(entry, "updated_at"), tz=tz)
    return (updated or datetime.min, occurred)


def entries_by_day(entries: Iterable[Any], *, tz: tzinfo | None = None) -> dict[date, Any]:
    """Map each calendar day to the single entry that represents it.

    Duplicate days keep the entry with the latest ``updated_at`` (time of day
    as secondary key); full ties go to the entry appearing last in input order.
    Entries whose date cannot be interpreted are dropped.
    """

    chosen: dict[date, tuple[tuple[datetime, datetime], Any]] = {}
    skipped = 0
    duplicates = 0
    for entry in entries:
        occurred = local_instant(_field(entry, "occurred_on"), tz=tz)
        if occurred is None:
            skipped += 1
            continue
        day = occurred.date()
        rank = _rank(entry, occurred, tz)
        current = chosen.get(day)
        if current is not None:
            duplicates += 1
            if rank < current[0]:
                continue
        chosen[day] = (rank, entry)

    if skipped:
        logger.debug("Skipped %d entries with malformed dates", skipped)
    if duplicates:
        logger.debug("Resolved %d duplicate same-day entries", duplicates)
    return {day: entry for day, (_, entry) in chosen.items()}


def bucket_entries(
    window: WeekWindow, entries: Iterable[Any], *, tz: tzinfo | None = None
) -> list[DaySlot]:
    """Place entries onto the seven labeled slots of ``window``.

    Days without an entry, and days whose entry holds a null value, both carry
    ``value=None``; ``recorded`` tells them apart.
    """

    per_day = entries_by_day(entries, tz=tz)
    slots: list[DaySlot] = []
    for label, day in window:
        entry = per_day.get(day)
        if entry is None:
            slots.append(DaySlot(day=label, on=day, value=None))
        else:
            slots.append(
                DaySlot(day=label, on=day, value=_numeric(_field(entry, "value")), recorded=True)
            )
    return slots


def meets_goal(value: Any, goal: Any) -> bool:
    """True when a recorded value reaches the daily goal."""

    value = _numeric(value)
    goal = _numeric(goal)
    if value is None or goal is None:
        return False
    return value >= goal


def current_streak(
    entries: Iterable[Any],
    goal: Any,
    *,
    tz: tzinfo | None = None,
    require_consecutive: bool = False,
) -> int:
    """Count goal-meeting days walking back from the most recent entry.

    The scan stops at the first null or below-goal entry. By default the next
    entry in date order counts as the previous day even if calendar days are
    missing in between; ``require_consecutive`` makes a gap end the streak too.
    """

    per_day = entries_by_day(entries, tz=tz)
    streak = 0
    previous: date | None = None
    for day in sorted(per_day, reverse=True):
        if require_consecutive and previous is not None and previous - day != timedelta(days=1):
            break
        if not meets_goal(_field(per_day[day], "value"), goal):
            break
        streak += 1
        previous = day
    return streak


def longest_streak(
    entries: Iterable[Any],
    goal: Any,
    *,
    tz: tzinfo | None = None,
    require_consecutive: bool = False,
) -> int:
    """Return the longest run of goal-meeting entries across the whole history."""

    per_day = entries_by_day(entries, tz=tz)
    longest = 0
    run = 0
    previous: date | None = None
    for day in sorted(per_day):
        if require_consecutive and previous is not None and day - previous != timedelta(days=1):
            run = 0
        if meets_goal(_field(per_day[day], "value"), goal):
            run += 1
            longest = max(longest, run)
        else:
            run = 0
        previous = day
    return longest


def _round_half_up(value: float, places: str = "1") -> Decimal:
    return Decimal(repr(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def _finite(number: float) -> bool:
    # ints are always finite; math.isfinite would overflow on very large ones
    return not isinstance(number, float) or math.isfinite(number)


def _decimal(number: float) -> Decimal:
    return Decimal(number) if isinstance(number, int) else Decimal(repr(number))


def completion_ratio(slots: Sequence[DaySlot]) -> int:
    """Share of the week's slots holding a non-null value, as a whole percent."""

    filled = sum(1 for slot in slots if slot.value is not None)
    return int(_round_half_up(filled * 100 / WEEK_LENGTH))


def attainment_percentage(value: Any, goal: Any) -> int:
    """``value / goal`` as a percentage clamped to 0..100.

    A missing value, a goal of zero or below, or a non-finite operand all
    report 0. Values at or above the goal report 100 without dividing, so
    extreme magnitudes cannot overflow.
    """

    value = _numeric(value)
    goal = _numeric(goal)
    if value is None or goal is None or not (_finite(value) and _finite(goal)):
        return 0
    if goal <= 0 or value <= 0:
        return 0
    if value >= goal:
        return 100
    ratio = _decimal(value) / _decimal(goal) * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def goal_met_ratio(slots: Sequence[DaySlot], goal: Any) -> float:
    """Percentage of recorded days in the week that reached the goal (one decimal)."""

    filled = [slot for slot in slots if slot.value is not None]
    if not filled:
        return 0.0
    met = sum(1 for slot in filled if meets_goal(slot.value, goal))
    return float(_round_half_up(met * 100 / len(filled), "0.1"))


def performance_radar(
    entries: Iterable[Any],
    goal: Any,
    *,
    reference: object = None,
    tz: tzinfo | None = None,
) -> dict[str, int]:
    """Attainment per weekday over the last seven days, keyed ``Sunday``..``Saturday``.

    Days without an entry report 0 rather than null.
    """

    radar = {name: 0 for name in DAY_NAMES}
    per_day = entries_by_day(entries, tz=tz)
    for day in lookback_days(reference, tz=tz):
        entry = per_day.get(day)
        if entry is not None:
            radar[day_name(day)] = attainment_percentage(_field(entry, "value"), goal)
    return radar


def consistency_by_day(weeks: Iterable[tuple[Sequence[DaySlot], Any]]) -> list[dict[str, Any]]:
    """Percentage of habits meeting their goal on each weekday, Monday first.

    ``weeks`` yields ``(slots, goal)`` pairs, one per habit.
    """

    met = dict.fromkeys(DAY_LABELS, 0)
    habit_count = 0
    for slots, goal in weeks:
        habit_count += 1
        for slot in slots:
            if meets_goal(slot.value, goal):
                met[slot.day] += 1

    rows: list[dict[str, Any]] = []
    for label in CONSISTENCY_ORDER:
        completion = 0.0
        if habit_count:
            completion = float(_round_half_up(met[label] * 100 / habit_count, "0.1"))
        rows.append({"day": label, "completion": completion})
    return rows


__all__ = [
    "CONSISTENCY_ORDER",
    "DaySlot",
    "attainment_percentage",
    "bucket_entries",
    "completion_ratio",
    "consistency_by_day",
    "current_streak",
    "entries_by_day",
    "goal_met_ratio",
    "longest_streak",
    "meets_goal",
    "performance_radar",
]
