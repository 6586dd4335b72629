"""Calendar helpers: local day boundaries and the Sunday-Saturday week window."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DAY_LABELS: tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
DAY_NAMES: tuple[str, ...] = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
WEEK_LENGTH = 7

_HOST_LOCALE_NAMES = {"", "local", "host"}


def resolve_timezone(name: str | None) -> tzinfo | None:
    """Return the configured calendar zone, or ``None`` for the host locale.

    Raises ``ValueError`` for names the zone database does not know.
    """

    if name is None or name.strip().lower() in _HOST_LOCALE_NAMES:
        return None
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name}") from exc


def now(tz: tzinfo | None = None) -> datetime:
    """Current instant in the calendar zone (naive local time when ``tz`` is None)."""

    return datetime.now(tz) if tz is not None else datetime.now()


def local_instant(value: object, *, tz: tzinfo | None = None) -> datetime | None:
    """Normalize a date, datetime or ISO string to a naive local datetime.

    Aware datetimes are converted into ``tz`` (host locale when ``tz`` is None);
    naive datetimes are taken as already local. Plain dates map to midnight.
    Anything that cannot be interpreted yields ``None``.
    """

    if isinstance(value, str):
        value = _parse_iso(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz) if tz is not None else value.astimezone()
            return value.replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return None


def calendar_day(value: object, *, tz: tzinfo | None = None) -> date | None:
    """Return the local calendar day for ``value`` or ``None`` when malformed."""

    instant = local_instant(value, tz=tz)
    return instant.date() if instant is not None else None


def _parse_iso(raw: str) -> date | datetime | None:
    text = raw.strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def day_label(day: date) -> str:
    """Short label (``Sun``..``Sat``) for a calendar day."""

    return DAY_LABELS[(day.weekday() + 1) % WEEK_LENGTH]


def day_name(day: date) -> str:
    """Full weekday name (``Sunday``..``Saturday``) for a calendar day."""

    return DAY_NAMES[(day.weekday() + 1) % WEEK_LENGTH]


@dataclass(frozen=True)
class WeekWindow:
    """Seven consecutive calendar days starting on a Sunday."""

    start: date
    reference: date

    @property
    def days(self) -> tuple[date, ...]:
        return tuple(self.start + timedelta(days=offset) for offset in range(WEEK_LENGTH))

    @property
    def end(self) -> date:
        return self.start + timedelta(days=WEEK_LENGTH - 1)

    @property
    def labels(self) -> tuple[str, ...]:
        return DAY_LABELS

    def __iter__(self) -> Iterator[tuple[str, date]]:
        return iter(zip(DAY_LABELS, self.days))

    def __len__(self) -> int:
        return WEEK_LENGTH

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end

    def index_of(self, day: date) -> int | None:
        """Slot index of ``day`` inside the window, or ``None`` when outside."""

        if day not in self:
            return None
        return (day - self.start).days


def reference_day(reference: object = None, *, tz: tzinfo | None = None) -> date:
    """Calendar day of the reference instant, defaulting to today."""

    if reference is None:
        return now(tz).date()
    day = calendar_day(reference, tz=tz)
    if day is None:
        raise ValueError(f"Cannot interpret reference instant: {reference!r}")
    return day


def resolve_week(reference: object = None, *, tz: tzinfo | None = None) -> WeekWindow:
    """Return the Sunday-Saturday window containing the reference day."""

    today = reference_day(reference, tz=tz)
    # date.weekday(): Monday == 0 ... Sunday == 6
    start = today - timedelta(days=(today.weekday() + 1) % WEEK_LENGTH)
    return WeekWindow(start=start, reference=today)


def lookback_days(
    reference: object = None, *, days: int = WEEK_LENGTH, tz: tzinfo | None = None
) -> tuple[date, ...]:
    """The last ``days`` calendar days ending with the reference day, oldest first."""

    today = reference_day(reference, tz=tz)
    return tuple(today - timedelta(days=offset) for offset in range(days - 1, -1, -1))


__all__ = [
    "DAY_LABELS",
    "DAY_NAMES",
    "WEEK_LENGTH",
    "WeekWindow",
    "calendar_day",
    "day_label",
    "day_name",
    "local_instant",
    "lookback_days",
    "now",
    "reference_day",
    "resolve_timezone",
    "resolve_week",
]
