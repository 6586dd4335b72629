"""Habit view assembly shared by every read and write path."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import TYPE_CHECKING, Any, Iterable, Sequence

from ..errors import HabitNotFoundError, NotificationNotFoundError
from ..logging_config import get_logger
from .calendar import calendar_day, resolve_week
from .habits import (
    DaySlot,
    bucket_entries,
    completion_ratio,
    consistency_by_day,
    current_streak,
    goal_met_ratio,
    longest_streak,
    performance_radar,
)

if TYPE_CHECKING:  # pragma: no cover
    from ..domain.repositories.habit import HabitStore
    from ..models.habit import Habit, HabitEntry
    from ..models.notification import Notification
    from ..models.reminder import Reminder

logger = get_logger(__name__)


@dataclass(frozen=True)
class HabitView:
    """Derived weekly view of one habit; recomputed on every read and write."""

    id: int | None
    name: str
    icon: str
    goal: float
    unit: str
    streak: int
    slots: tuple[DaySlot, ...]

    @property
    def data(self) -> list[dict[str, Any]]:
        return [slot.as_dict() for slot in self.slots]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "goal": self.goal,
            "unit": self.unit,
            "streak": self.streak,
            "data": self.data,
        }


def assemble_view(
    habit: Any, entries: Iterable[Any], reference: object = None, *, tz: tzinfo | None = None
) -> HabitView:
    """Build the canonical view for ``habit`` from its complete entry history."""

    snapshot = tuple(entries)
    window = resolve_week(reference, tz=tz)
    slots = bucket_entries(window, snapshot, tz=tz)
    streak = current_streak(snapshot, habit.goal, tz=tz)
    return HabitView(
        id=habit.id,
        name=habit.name,
        icon=habit.icon,
        goal=habit.goal,
        unit=habit.unit,
        streak=streak,
        slots=tuple(slots),
    )


def assemble_performance_view(
    habit: Any, entries: Iterable[Any], reference: object = None, *, tz: tzinfo | None = None
) -> dict[str, Any]:
    """Radar chart row: ``{"name": ..., "Sunday": pct, ..., "Saturday": pct}``."""

    row: dict[str, Any] = {"name": habit.name}
    row.update(performance_radar(tuple(entries), habit.goal, reference=reference, tz=tz))
    return row


def assemble_summary(view: HabitView) -> dict[str, Any]:
    """Dashboard progress numbers for one habit's current week."""

    return {
        "completion": completion_ratio(view.slots),
        "performance": goal_met_ratio(view.slots, view.goal),
    }


class HabitService:
    """Application service pairing the habit store with view assembly.

    Writes go through the store first; the resulting view is always rebuilt
    from a freshly queried entry list.
    """

    def __init__(self, store: "HabitStore", *, tz: tzinfo | None = None) -> None:
        self.store = store
        self.tz = tz

    def _load(self, habit_id: int, user_id: str) -> tuple["Habit", list["HabitEntry"]]:
        found = self.store.get_habit_with_entries(habit_id, user_id=user_id)
        if found is None:
            raise HabitNotFoundError(habit_id)
        return found

    def get_view(self, habit_id: int, *, user_id: str, reference: object = None) -> HabitView:
        habit, entries = self._load(habit_id, user_id)
        return assemble_view(habit, entries, reference, tz=self.tz)

    def list_views(self, *, user_id: str, reference: object = None) -> list[HabitView]:
        return [
            assemble_view(habit, entries, reference, tz=self.tz)
            for habit, entries in self.store.list_habits_with_entries(user_id=user_id)
        ]

    def create_habit(
        self,
        *,
        user_id: str,
        name: str,
        goal: float,
        icon: str,
        unit: str,
        reference: object = None,
    ) -> HabitView:
        habit = self.store.create(
            name=name, goal=goal, icon=icon, unit=unit, user_id=user_id
        )
        logger.info("Created habit", extra={"habit_id": habit.id, "user_id": user_id})
        return self.get_view(habit.id, user_id=user_id, reference=reference)

    def update_habit(
        self,
        habit_id: int,
        changes: dict[str, Any],
        *,
        user_id: str,
        reference: object = None,
    ) -> HabitView:
        updated = self.store.update(habit_id, changes, user_id=user_id)
        if updated is None:
            raise HabitNotFoundError(habit_id)
        logger.info(
            "Updated habit",
            extra={"habit_id": habit_id, "fields": sorted(changes)},
        )
        return self.get_view(habit_id, user_id=user_id, reference=reference)

    def delete_habit(self, habit_id: int, *, user_id: str) -> None:
        if not self.store.delete(habit_id, user_id=user_id):
            raise HabitNotFoundError(habit_id)
        logger.info("Deleted habit", extra={"habit_id": habit_id, "user_id": user_id})

    def check_in(
        self,
        habit_id: int,
        occurred_on: object,
        value: float | None,
        *,
        user_id: str,
        reference: object = None,
    ) -> HabitView:
        """Record the value for one calendar day and return the refreshed view."""

        day = calendar_day(occurred_on, tz=self.tz)
        if day is None:
            raise ValueError(f"Invalid check-in date: {occurred_on!r}")
        if self.store.upsert_entry(habit_id, day, value, user_id=user_id) is None:
            raise HabitNotFoundError(habit_id)
        logger.info(
            "Recorded habit entry",
            extra={"habit_id": habit_id, "occurred_on": day.isoformat(), "value": value},
        )
        return self.get_view(habit_id, user_id=user_id, reference=reference)

    def performance(self, *, user_id: str, reference: object = None) -> list[dict[str, Any]]:
        return [
            assemble_performance_view(habit, entries, reference, tz=self.tz)
            for habit, entries in self.store.list_habits_with_entries(user_id=user_id)
        ]

    def stats(self, *, user_id: str, reference: object = None) -> dict[str, Any]:
        """Per-habit summaries, longest streaks and the weekday consistency chart."""

        summary: dict[str, Any] = {}
        views: list[HabitView] = []
        for habit, entries in self.store.list_habits_with_entries(user_id=user_id):
            view = assemble_view(habit, entries, reference, tz=self.tz)
            views.append(view)
            summary[str(habit.id)] = {
                **assemble_summary(view),
                "longest_streak": longest_streak(entries, habit.goal, tz=self.tz),
            }
        return {
            "summary": summary,
            "consistency": consistency_by_day((view.slots, view.goal) for view in views),
        }

    def add_reminder(self, habit_id: int, at: str, *, user_id: str) -> "Reminder":
        reminder = self.store.add_reminder(habit_id, at, user_id=user_id)
        if reminder is None:
            raise HabitNotFoundError(habit_id)
        logger.info("Scheduled reminder", extra={"habit_id": habit_id, "time": at})
        return reminder

    def reminders(self, habit_id: int, *, user_id: str) -> Sequence["Reminder"]:
        self._load(habit_id, user_id)
        return self.store.list_reminders(habit_id, user_id=user_id)

    def notifications(self, *, user_id: str) -> Sequence["Notification"]:
        return self.store.list_notifications(user_id=user_id)

    def dismiss_notification(self, notification_id: int, *, user_id: str) -> None:
        if not self.store.dismiss_notification(notification_id, user_id=user_id):
            raise NotificationNotFoundError(notification_id)
        logger.info(
            "Dismissed notification",
            extra={"notification_id": notification_id, "user_id": user_id},
        )


__all__ = [
    "HabitService",
    "HabitView",
    "assemble_performance_view",
    "assemble_summary",
    "assemble_view",
]
