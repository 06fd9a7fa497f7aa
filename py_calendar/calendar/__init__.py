"""Event indexing, recurrence expansion and conflict validation."""

from .conflicts import ConflictDetector, conflicts
from .event import Event, EventField, FieldUpdate, apply_update
from .index import EventIndex
from .recurrence import (
    ByCount,
    ByEndDate,
    RecurrenceDefinition,
    Termination,
    format_weekdays,
    parse_weekdays,
    termination_from,
)
from .registry import CalendarRegistry, validate_timezone
from .store import CalendarStore, CopyResult
from .timezones import convert_wall_clock, get_zone, to_wall_clock

__all__ = [
    "ByCount",
    "ByEndDate",
    "CalendarRegistry",
    "CalendarStore",
    "ConflictDetector",
    "CopyResult",
    "Event",
    "EventField",
    "EventIndex",
    "FieldUpdate",
    "RecurrenceDefinition",
    "Termination",
    "apply_update",
    "conflicts",
    "convert_wall_clock",
    "format_weekdays",
    "get_zone",
    "parse_weekdays",
    "termination_from",
    "to_wall_clock",
    "validate_timezone",
]
