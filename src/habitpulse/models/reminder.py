"""Daily reminder times attached to a habit."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .habit import Habit


class Reminder(SQLModel, table=True):
    """A 24-hour ``HH:MM`` time at which the owner wants a nudge."""

    __tablename__: ClassVar[str] = "reminder"

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    time: str = Field(nullable=False, max_length=5)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    habit: "Habit" = Relationship(
        back_populates="reminders",
        sa_relationship=relationship("Habit", back_populates="reminders"),
    )

    def to_dict(self) -> dict:
        return {"id": self.id, "habitId": self.habit_id, "time": self.time}
