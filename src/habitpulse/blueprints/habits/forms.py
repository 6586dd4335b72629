"""Request payload models for the habits API."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ...services.calendar import calendar_day

_REMINDER_TIME = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


class HabitIcon(str, Enum):
    """Symbolic icon keys understood by the dashboard."""

    SLEEP = "sleep"
    WATER = "water"
    SCREEN = "screen"
    AWARD = "award"
    TRENDING = "trending"
    READING = "reading"
    WORKOUT = "workout"
    COFFEE = "coffee"
    ENERGY = "energy"


class HabitForm(BaseModel):
    """Payload for creating a habit."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=80, description="Short label for the habit")
    goal: float = Field(gt=0, allow_inf_nan=False, description="Target value per day")
    icon: HabitIcon = Field(default=HabitIcon.AWARD)
    unit: str = Field(default="times", min_length=1, max_length=32)


class HabitUpdateForm(BaseModel):
    """Partial update of a habit's display fields and goal."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    goal: Optional[float] = Field(default=None, gt=0, allow_inf_nan=False)
    icon: Optional[HabitIcon] = None
    unit: Optional[str] = Field(default=None, min_length=1, max_length=32)

    @model_validator(mode="after")
    def ensure_changes(self) -> "HabitUpdateForm":
        """Reject empty updates."""

        if not self.changes():
            raise ValueError("Provide at least one of name, goal, icon or unit.")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")


class CheckInForm(BaseModel):
    """Payload for recording one day's value; ``value`` may be null."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    habit_id: int = Field(alias="habitId", ge=1)
    value: Optional[float] = Field(allow_inf_nan=False)
    occurred_on: str = Field(alias="date")

    @field_validator("occurred_on")
    @classmethod
    def validate_date(cls, value: str) -> str:
        """Require an ISO date or datetime."""

        if calendar_day(value) is None:
            raise ValueError("Invalid date format")
        return value


class ReminderForm(BaseModel):
    """Payload for scheduling a daily reminder."""

    model_config = ConfigDict(str_strip_whitespace=True)

    time: str

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Accept 24-hour ``H:MM``/``HH:MM`` and normalize to ``HH:MM``."""

        match = _REMINDER_TIME.match(value)
        if not match:
            raise ValueError("Invalid time format. Use HH:MM (24-hour format)")
        return f"{int(match.group(1)):02d}:{match.group(2)}"


def validation_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Group pydantic errors by the payload key they refer to."""

    structured: dict[str, list[str]] = {}
    for error in exc.errors(include_url=False):
        loc = error.get("loc", ())
        key = str(loc[0]) if loc else "__root__"
        structured.setdefault(key, []).append(error.get("msg", "Invalid value"))
    return structured


__all__ = [
    "CheckInForm",
    "HabitForm",
    "HabitIcon",
    "HabitUpdateForm",
    "ReminderForm",
    "validation_errors",
]
