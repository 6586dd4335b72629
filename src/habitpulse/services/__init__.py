"""Service module exports."""

from . import calendar, habits, views

__all__ = ["calendar", "habits", "views"]
