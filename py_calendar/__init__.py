"""A Python library for single-owner calendars with recurring events and conflict checks."""

from .calendar import (
    ByCount,
    ByEndDate,
    CalendarRegistry,
    CalendarStore,
    Event,
    EventField,
    EventIndex,
    RecurrenceDefinition,
    parse_weekdays,
)
from .config import CalendarConfig
from .errors import (
    CalendarError,
    ConflictError,
    DuplicateCalendarError,
    NotFoundError,
    ValidationError,
)
from .server import create_app

__version__ = "0.1.0"

__all__ = [
    "ByCount",
    "ByEndDate",
    "CalendarConfig",
    "CalendarError",
    "CalendarRegistry",
    "CalendarStore",
    "ConflictError",
    "DuplicateCalendarError",
    "Event",
    "EventField",
    "EventIndex",
    "NotFoundError",
    "RecurrenceDefinition",
    "ValidationError",
    "create_app",
    "parse_weekdays",
]
