"""Exception hierarchy for HabitPulse."""

from __future__ import annotations


class HabitPulseError(Exception):
    """Base class for application errors."""


class ConfigurationError(HabitPulseError):
    """Raised when environment configuration cannot be interpreted."""


class HabitNotFoundError(HabitPulseError):
    """Raised when a habit does not exist or belongs to another user."""

    def __init__(self, habit_id: int) -> None:
        super().__init__(f"Habit {habit_id} not found")
        self.habit_id = habit_id


class NotificationNotFoundError(HabitPulseError):
    """Raised when a notification is unknown, foreign or already dismissed."""

    def __init__(self, notification_id: int) -> None:
        super().__init__(f"Notification {notification_id} not found")
        self.notification_id = notification_id


__all__ = [
    "ConfigurationError",
    "HabitNotFoundError",
    "HabitPulseError",
    "NotificationNotFoundError",
]
