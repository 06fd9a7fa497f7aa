"""Event records and per-field updates."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from ..errors import ValidationError
from .timezones import is_aware

# All-day events span the whole calendar date
ALL_DAY_START = time(0, 0, 0)
ALL_DAY_END = time(23, 59, 59)


def new_id() -> str:
    """Generate an opaque unique id."""
    return str(uuid.uuid4())


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        if is_aware(value):
            raise ValidationError(
                f"expected a wall-clock time without UTC offset, got {value.isoformat()}"
            )
        return value
    if isinstance(value, date):
        return datetime.combine(value, ALL_DAY_START)
    raise ValidationError(f"expected a date or datetime, got {value!r}")


@dataclass
class Event:
    """One scheduled event.

    All-day events are normalized to 00:00:00-23:59:59 of the start's calendar
    date. Times are naive wall-clock values and ``timezone`` is their label.
    ``end`` is always set once the event is constructed. ``series_id`` is
    only a lookup key back to the recurrence definition that produced it.
    """

    subject: str
    start: datetime
    end: datetime | None = None
    description: str = ""
    location: str = ""
    is_public: bool = True
    timezone: str = ""
    all_day: bool = False
    series_id: str | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not self.subject or not self.subject.strip():
            raise ValidationError("event subject cannot be empty")

        self.start = _as_datetime(self.start)
        if self.all_day:
            day = self.start.date()
            self.start = datetime.combine(day, ALL_DAY_START)
            self.end = datetime.combine(day, ALL_DAY_END)
        elif self.end is None:
            raise ValidationError("timed event requires an end time")
        else:
            self.end = _as_datetime(self.end)

        if self.end < self.start:
            raise ValidationError(
                f"event end {self.end.isoformat()} is before start {self.start.isoformat()}"
            )

        if self.description is None:
            self.description = ""
        if self.location is None:
            self.location = ""
        if self.timezone is None:
            self.timezone = ""

    @classmethod
    def all_day_on(cls, subject: str, day: date, **kwargs: Any) -> Event:
        """Create an all-day event on a single calendar date."""
        return cls(subject, datetime.combine(day, ALL_DAY_START), all_day=True, **kwargs)

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def conflicts_with(self, other: Event) -> bool:
        """Closed-interval overlap: touching boundaries count as a conflict."""
        return self.start <= other.end and other.start <= self.end

    def contains(self, instant: datetime) -> bool:
        """Check if ``instant`` falls inside the event.

        Timed events use the inclusive [start, end] interval, all-day events
        match any instant on their date.
        """
        if self.all_day:
            return instant.date() == self.start_date
        return self.start <= instant <= self.end

    def copy(self, **changes: Any) -> Event:
        """Return a copy with the same id and ``changes`` applied."""
        return replace(self, **changes)


class EventField(Enum):
    """Fields of an event that can be edited."""

    SUBJECT = "subject"
    DESCRIPTION = "description"
    LOCATION = "location"
    START = "start"
    END = "end"
    VISIBILITY = "visibility"
    PRIVATE = "private"

    @classmethod
    def parse(cls, name: str | EventField) -> EventField:
        """Parse a field name (case-insensitive, aliases accepted).

        Raises:
            ValidationError: If the name does not denote an editable field
        """
        if isinstance(name, EventField):
            return name
        if not name:
            raise ValidationError("field name cannot be empty")
        key = name.strip().lower()
        try:
            return _FIELD_ALIASES[key]
        except KeyError:
            raise ValidationError(f"unknown event field: {name}") from None


_FIELD_ALIASES: dict[str, EventField] = {
    **{f.value: f for f in EventField},
    "name": EventField.SUBJECT,
    "starttime": EventField.START,
    "startdatetime": EventField.START,
    "endtime": EventField.END,
    "enddatetime": EventField.END,
    "ispublic": EventField.VISIBILITY,
    "public": EventField.VISIBILITY,
}


def _parse_moment(value: Any, current: datetime) -> datetime:
    """Parse a new start/end value.

    A time keeps the current date; strings containing ``T`` are full ISO
    datetimes, other strings are a time of day.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, time):
        return datetime.combine(current.date(), value)
    if isinstance(value, str):
        text = value.strip()
        try:
            if "T" in text:
                return datetime.fromisoformat(text)
            return datetime.combine(current.date(), time.fromisoformat(text))
        except ValueError:
            raise ValidationError(f"invalid date/time value: {value!r}") from None
    raise ValidationError(f"invalid date/time value: {value!r}")


def _parse_flag(value: Any, truthy: tuple[str, ...]) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in truthy
    raise ValidationError(f"invalid visibility value: {value!r}")


def apply_update(event: Event, event_field: EventField, value: Any) -> Event:
    """Return a copy of ``event`` with one field changed.

    The original event is not modified. The copy goes through the same
    validation as a newly constructed event.

    Raises:
        ValidationError: If the value is malformed or the result is invalid
    """
    if value is None:
        raise ValidationError(f"no value given for {event_field.value}")

    if event_field is EventField.SUBJECT:
        return event.copy(subject=str(value))
    if event_field is EventField.DESCRIPTION:
        return event.copy(description=str(value))
    if event_field is EventField.LOCATION:
        return event.copy(location=str(value))
    if event_field is EventField.START:
        # Moving either bound turns an all-day event into a timed one
        return event.copy(start=_parse_moment(value, event.start), all_day=False)
    if event_field is EventField.END:
        return event.copy(end=_parse_moment(value, event.end), all_day=False)
    if event_field is EventField.VISIBILITY:
        return event.copy(is_public=_parse_flag(value, ("public", "true")))
    if event_field is EventField.PRIVATE:
        return event.copy(is_public=not _parse_flag(value, ("private", "true")))
    raise ValidationError(f"unsupported event field: {event_field}")


@dataclass(frozen=True)
class FieldUpdate:
    """A single-field change to apply to an event."""

    field: EventField
    value: Any

    @classmethod
    def of(cls, name: str | EventField, value: Any) -> FieldUpdate:
        return cls(EventField.parse(name), value)

    def apply(self, event: Event) -> Event:
        return apply_update(event, self.field, self.value)
