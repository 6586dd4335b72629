"""In-app notices shown to the habit owner."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Notification(SQLModel, table=True):
    """A message for one user; dismissed notices are kept with ``read=True``.

    The habit is referenced by name only, so notices outlive deleted habits.
    """

    __tablename__: ClassVar[str] = "notification"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(nullable=False, index=True, max_length=64)
    habit_name: str = Field(nullable=False, max_length=80)
    message: str = Field(nullable=False, max_length=255)
    read: bool = Field(default=False, nullable=False, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "habitName": self.habit_name,
            "message": self.message,
            "read": self.read,
            "createdAt": self.created_at.isoformat(),
        }
