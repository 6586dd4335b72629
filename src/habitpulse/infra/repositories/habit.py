"""SQLModel implementation of the habit store."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ...logging_config import get_logger
from ...models.habit import Habit, HabitEntry
from ...models.notification import Notification
from ...models.reminder import Reminder

logger = get_logger(__name__)

EDITABLE_FIELDS = frozenset({"name", "icon", "goal", "unit"})


class SQLModelHabitRepository:
    """SQLModel-based habit store."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @staticmethod
    def _owned(session: Session, habit_id: int, user_id: str) -> Optional[Habit]:
        return session.exec(
            select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
        ).first()

    def get_habit_with_entries(
        self, habit_id: int, *, user_id: str
    ) -> Optional[tuple[Habit, list[HabitEntry]]]:
        """Return a habit and its full entry history."""
        with self.session_factory() as session:
            habit = self._owned(session, habit_id, user_id)
            if habit is None:
                return None
            entries = list(
                session.exec(select(HabitEntry).where(HabitEntry.habit_id == habit_id)).all()
            )
            session.expunge_all()
            return habit, entries

    def list_habits_with_entries(self, *, user_id: str) -> list[tuple[Habit, list[HabitEntry]]]:
        """Return each of the user's habits with its entries, two queries total."""
        with self.session_factory() as session:
            habits = list(
                session.exec(
                    select(Habit).where(Habit.user_id == user_id).order_by(Habit.name, Habit.id)  # type: ignore
                ).all()
            )
            habit_ids = [habit.id for habit in habits if habit.id is not None]
            entries_by_habit: dict[int, list[HabitEntry]] = defaultdict(list)
            if habit_ids:
                statement = select(HabitEntry).where(HabitEntry.habit_id.in_(habit_ids))  # type: ignore[attr-defined]
                for entry in session.exec(statement).all():
                    entries_by_habit[entry.habit_id].append(entry)
            session.expunge_all()
            return [(habit, entries_by_habit.get(habit.id, [])) for habit in habits]

    def create(self, *, name: str, goal: float, icon: str, unit: str, user_id: str) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            habit = Habit(name=name, goal=goal, icon=icon, unit=unit, user_id=user_id)
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update(self, habit_id: int, changes: dict[str, Any], *, user_id: str) -> Optional[Habit]:
        """Apply editable field changes to a habit."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        with self.session_factory() as session:
            habit = self._owned(session, habit_id, user_id)
            if habit is None:
                return None
            for field, value in changes.items():
                setattr(habit, field, value)
            habit.updated_at = datetime.now(timezone.utc)
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def delete(self, habit_id: int, *, user_id: str) -> bool:
        """Delete a habit; entries and reminders cascade with it."""
        with self.session_factory() as session:
            habit = self._owned(session, habit_id, user_id)
            if habit is None:
                return False
            session.delete(habit)
            session.commit()
            return True

    def list_entries(self, habit_id: int, *, user_id: str) -> list[HabitEntry]:
        """Full entry history for one habit, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(HabitEntry)
                .join(Habit, Habit.id == HabitEntry.habit_id)  # type: ignore[arg-type]
                .where(HabitEntry.habit_id == habit_id, Habit.user_id == user_id)
                .order_by(HabitEntry.occurred_on)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def upsert_entry(
        self, habit_id: int, occurred_on: date, value: Optional[float], *, user_id: str
    ) -> Optional[HabitEntry]:
        """Insert or overwrite the entry for one calendar day."""
        try:
            return self._upsert_entry(habit_id, occurred_on, value, user_id)
        except IntegrityError:
            # A concurrent check-in created the row first; the retry updates it.
            logger.info(
                "Retrying entry upsert after unique conflict",
                extra={"habit_id": habit_id, "occurred_on": occurred_on.isoformat()},
            )
            return self._upsert_entry(habit_id, occurred_on, value, user_id)

    def _upsert_entry(
        self, habit_id: int, occurred_on: date, value: Optional[float], user_id: str
    ) -> Optional[HabitEntry]:
        with self.session_factory() as session:
            if self._owned(session, habit_id, user_id) is None:
                return None
            existing = session.exec(
                select(HabitEntry)
                .where(HabitEntry.habit_id == habit_id)
                .where(HabitEntry.occurred_on == occurred_on)
            ).first()

            if existing:
                existing.value = value
                existing.updated_at = datetime.now(timezone.utc)
                entry = existing
            else:
                entry = HabitEntry(habit_id=habit_id, occurred_on=occurred_on, value=value)
            session.add(entry)
            session.commit()
            session.refresh(entry)
            session.expunge(entry)
            return entry

    def add_reminder(self, habit_id: int, at: str, *, user_id: str) -> Optional[Reminder]:
        """Attach a reminder time to a habit and leave the owner a notice."""
        with self.session_factory() as session:
            habit = self._owned(session, habit_id, user_id)
            if habit is None:
                return None
            reminder = Reminder(habit_id=habit_id, time=at)
            session.add(reminder)
            session.add(
                Notification(
                    user_id=user_id,
                    habit_name=habit.name,
                    message=f"Reminder set for {habit.name} at {at}",
                )
            )
            session.commit()
            session.refresh(reminder)
            session.expunge(reminder)
            return reminder

    def list_reminders(self, habit_id: int, *, user_id: str) -> list[Reminder]:
        """Reminders of one habit ordered by time."""
        with self.session_factory() as session:
            statement = (
                select(Reminder)
                .join(Habit, Habit.id == Reminder.habit_id)  # type: ignore[arg-type]
                .where(Reminder.habit_id == habit_id, Habit.user_id == user_id)
                .order_by(Reminder.time)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_notifications(self, *, user_id: str) -> list[Notification]:
        """Unread notifications of the user, newest first."""
        with self.session_factory() as session:
            statement = (
                select(Notification)
                .where(Notification.user_id == user_id, Notification.read == False)  # noqa: E712
                .order_by(Notification.created_at.desc(), Notification.id.desc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def dismiss_notification(self, notification_id: int, *, user_id: str) -> bool:
        """Mark a notification read instead of deleting it."""
        with self.session_factory() as session:
            notification = session.exec(
                select(Notification).where(
                    Notification.id == notification_id,
                    Notification.user_id == user_id,
                    Notification.read == False,  # noqa: E712
                )
            ).first()
            if notification is None:
                return False
            notification.read = True
            session.add(notification)
            session.commit()
            return True
