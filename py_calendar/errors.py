"""Error types raised by the calendar engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .calendar.event import Event


class CalendarError(Exception):
    """Base class for calendar errors."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        return self.message or self.__class__.__name__


class ValidationError(CalendarError):
    """Malformed input rejected before anything was mutated."""


class NotFoundError(CalendarError):
    """Lookup by id, subject and start, series id or calendar name failed."""


class DuplicateCalendarError(CalendarError):
    """A calendar with the requested name already exists."""


class ConflictError(CalendarError):
    """A strict add or edit collides with events already in the calendar."""

    def __init__(
        self,
        message: str = "",
        candidate: Event | None = None,
        conflicting: list[Event] | None = None,
    ):
        self.candidate = candidate
        self.conflicting = conflicting or []
        super().__init__(message)

    def __str__(self) -> str:
        s = self.message or "ConflictError"
        if self.conflicting:
            subjects = ", ".join(repr(e.subject) for e in self.conflicting)
            return f"{s} (conflicts with {subjects})"
        return s
