"""SQLModel table exports."""

from .habit import Habit, HabitEntry
from .notification import Notification
from .reminder import Reminder

__all__ = [
    "Habit",
    "HabitEntry",
    "Notification",
    "Reminder",
]
