"""Blueprint exports."""

from . import habits, notifications

__all__ = ["habits", "notifications"]
