"""Recurring event definitions and their expansion into occurrences.

A definition repeats a template time span on a set of weekdays and ends
either after a number of occurrences or on an end date, never both.
Expansion walks forward one calendar day at a time from the template start
date, using a daily ``dateutil.rrule`` filtered by weekday.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, time

from dateutil.rrule import DAILY, rrule

from ..errors import ValidationError
from .event import ALL_DAY_END, ALL_DAY_START, Event, new_id
from .timezones import is_aware

# Single-letter weekday codes, Monday first (date.weekday() order)
WEEKDAY_CODES = "MTWRFSU"

# iCalendar BYDAY names in the same order
ICAL_WEEKDAYS = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")


def parse_weekdays(codes: str) -> frozenset[int]:
    """Decode a compact weekday string such as ``"MWF"``.

    Letters are M, T, W, R, F, S, U for Monday to Sunday (case-insensitive).

    Returns:
        Set of ``date.weekday()`` numbers

    Raises:
        ValidationError: If the string contains an unknown letter
    """
    days = set()
    for code in codes.upper():
        if code.isspace() or code == ",":
            continue
        index = WEEKDAY_CODES.find(code)
        if index < 0:
            raise ValidationError(f"invalid weekday code: {code!r}")
        days.add(index)
    return frozenset(days)


def format_weekdays(weekdays: Iterable[int]) -> str:
    """Encode weekday numbers as a compact string, e.g. ``"MWF"``."""
    return "".join(WEEKDAY_CODES[d] for d in sorted(set(weekdays)))


@dataclass(frozen=True)
class ByCount:
    """End the series after a fixed number of occurrences."""

    count: int

    def __post_init__(self) -> None:
        if not isinstance(self.count, int) or isinstance(self.count, bool) or self.count <= 0:
            raise ValidationError("occurrence count must be positive")


@dataclass(frozen=True)
class ByEndDate:
    """End the series on a date (inclusive)."""

    until: date

    def __post_init__(self) -> None:
        if isinstance(self.until, datetime):
            object.__setattr__(self, "until", self.until.date())


Termination = ByCount | ByEndDate


def termination_from(count: int | None = None, until: date | None = None) -> Termination:
    """Build a termination rule from optional count/end date arguments.

    Raises:
        ValidationError: If both or neither are given
    """
    if count is not None and until is not None:
        raise ValidationError("cannot specify both occurrences and end date")
    if count is not None:
        return ByCount(count)
    if until is not None:
        return ByEndDate(until)
    raise ValidationError("must specify either occurrences or end date")


@dataclass(frozen=True)
class RecurrenceDefinition:
    """Template for a weekday-pattern series of events.

    The definition owns no occurrences; :meth:`expand` produces them on demand.
    """

    subject: str
    start: datetime
    end: datetime
    weekdays: frozenset[int]
    termination: Termination
    description: str = ""
    location: str = ""
    is_public: bool = True
    all_day: bool = False
    timezone: str = ""
    series_id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not self.subject or not self.subject.strip():
            raise ValidationError("event subject cannot be empty")
        if not self.weekdays:
            raise ValidationError("repeat days cannot be empty")
        if any(d not in range(7) for d in self.weekdays):
            raise ValidationError(f"invalid weekdays: {sorted(self.weekdays)}")
        if not isinstance(self.termination, (ByCount, ByEndDate)):
            raise ValidationError("must specify either occurrences or end date")
        if is_aware(self.start) or is_aware(self.end):
            raise ValidationError("template times must be wall-clock times without UTC offset")

        object.__setattr__(self, "weekdays", frozenset(self.weekdays))
        if self.description is None:
            object.__setattr__(self, "description", "")
        if self.location is None:
            object.__setattr__(self, "location", "")

        if self.all_day:
            day = self.start.date()
            object.__setattr__(self, "start", datetime.combine(day, ALL_DAY_START))
            object.__setattr__(self, "end", datetime.combine(day, ALL_DAY_END))

        if self.end < self.start:
            raise ValidationError("template end is before template start")
        if isinstance(self.termination, ByEndDate) and not self.termination.until > self.start.date():
            raise ValidationError("end date must be after start date")

    @classmethod
    def create(
        cls,
        subject: str,
        start: datetime,
        end: datetime,
        weekdays: str | Iterable[int],
        count: int | None = None,
        until: date | None = None,
        **kwargs,
    ) -> RecurrenceDefinition:
        """Create a definition from a weekday string/set and count or end date.

        Args:
            subject: Subject of every occurrence
            start: Template start (first candidate date and time of day)
            end: Template end (defines the duration)
            weekdays: Weekday codes like ``"MWF"`` or ``date.weekday()`` numbers
            count: Number of occurrences
            until: Last date (inclusive) an occurrence may fall on
            **kwargs: description, location, is_public, all_day, timezone, series_id

        Raises:
            ValidationError: If the arguments do not describe a valid series
        """
        days = parse_weekdays(weekdays) if isinstance(weekdays, str) else frozenset(weekdays)
        return cls(subject, start, end, days, termination_from(count, until), **kwargs)

    @classmethod
    def all_day_series(
        cls,
        subject: str,
        first_day: date,
        weekdays: str | Iterable[int],
        count: int | None = None,
        until: date | None = None,
        **kwargs,
    ) -> RecurrenceDefinition:
        """Create an all-day series starting on ``first_day``."""
        start = datetime.combine(first_day, ALL_DAY_START)
        end = datetime.combine(first_day, ALL_DAY_END)
        return cls.create(subject, start, end, weekdays, count=count, until=until, all_day=True, **kwargs)

    @property
    def count(self) -> int | None:
        if isinstance(self.termination, ByCount):
            return self.termination.count
        return None

    @property
    def until(self) -> date | None:
        if isinstance(self.termination, ByEndDate):
            return self.termination.until
        return None

    def _rule(self) -> rrule:
        if isinstance(self.termination, ByCount):
            return rrule(DAILY, dtstart=self.start, byweekday=sorted(self.weekdays), count=self.termination.count)
        until = datetime.combine(self.termination.until, time.max)
        return rrule(DAILY, dtstart=self.start, byweekday=sorted(self.weekdays), until=until)

    def occurrence_starts(self) -> list[datetime]:
        """Start datetimes of every occurrence, in ascending order."""
        return list(self._rule())

    def expand(self) -> list[Event]:
        """Materialize the occurrences of this series.

        Each call recomputes the sequence from scratch; every occurrence gets a
        fresh id and carries this definition's ``series_id``.
        """
        duration = self.end - self.start
        return [
            Event(
                subject=self.subject,
                start=occurrence,
                end=occurrence + duration,
                description=self.description,
                location=self.location,
                is_public=self.is_public,
                timezone=self.timezone,
                all_day=self.all_day,
                series_id=self.series_id,
            )
            for occurrence in self._rule()
        ]

