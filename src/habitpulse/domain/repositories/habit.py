"""Habit store protocol."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol

from ...models.habit import Habit, HabitEntry
from ...models.notification import Notification
from ...models.reminder import Reminder


class HabitStore(Protocol):
    """Persistence contract consumed by the habit view service.

    Every method is scoped to the owning user; habits belonging to someone
    else behave exactly like missing ones.
    """

    def get_habit_with_entries(
        self, habit_id: int, *, user_id: str
    ) -> Optional[tuple[Habit, list[HabitEntry]]]:
        """Return a habit and its full, unordered entry history."""
        ...

    def list_habits_with_entries(self, *, user_id: str) -> list[tuple[Habit, list[HabitEntry]]]:
        """Return every habit of the user paired with its full entry history."""
        ...

    def create(self, *, name: str, goal: float, icon: str, unit: str, user_id: str) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit_id: int, changes: dict[str, Any], *, user_id: str) -> Optional[Habit]:
        """Apply field changes; ``None`` when the habit is unknown."""
        ...

    def delete(self, habit_id: int, *, user_id: str) -> bool:
        """Delete a habit with its entries and reminders; ``False`` when unknown."""
        ...

    def list_entries(self, habit_id: int, *, user_id: str) -> list[HabitEntry]:
        """Full entry history for one habit."""
        ...

    def upsert_entry(
        self, habit_id: int, occurred_on: date, value: Optional[float], *, user_id: str
    ) -> Optional[HabitEntry]:
        """Insert or overwrite the entry for one calendar day; ``None`` when unknown."""
        ...

    def add_reminder(self, habit_id: int, at: str, *, user_id: str) -> Optional[Reminder]:
        """Attach a reminder time and notify the owner; ``None`` when the habit is unknown."""
        ...

    def list_reminders(self, habit_id: int, *, user_id: str) -> list[Reminder]:
        """Reminders of one habit ordered by time."""
        ...

    def list_notifications(self, *, user_id: str) -> list[Notification]:
        """Unread notifications of the user, newest first."""
        ...

    def dismiss_notification(self, notification_id: int, *, user_id: str) -> bool:
        """Mark a notification read; ``False`` when unknown, foreign or already read."""
        ...
