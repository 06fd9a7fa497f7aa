"""Registry of independent, named calendars."""

from __future__ import annotations

import logging
from datetime import date

from ..config import CalendarConfig
from ..errors import DuplicateCalendarError, NotFoundError, ValidationError
from .store import CalendarStore, CopyResult
from .timezones import get_zone

logger = logging.getLogger(__name__)


def validate_timezone(timezone: str) -> str:
    """Check that ``timezone`` is a known IANA zone name.

    Raises:
        ValidationError: If the zone is unknown
    """
    get_zone(timezone)
    return timezone


class CalendarRegistry:
    """Named calendar stores plus one active calendar.

    Stores share no state; the registry only maps names to them. The first
    calendar created becomes active.
    """

    def __init__(self, config: CalendarConfig | None = None) -> None:
        self.config = config or CalendarConfig()
        self._calendars: dict[str, CalendarStore] = {}
        self._active: str | None = None

    def __contains__(self, name: object) -> bool:
        return name in self._calendars

    def __len__(self) -> int:
        return len(self._calendars)

    def create_calendar(self, name: str, timezone: str | None = None) -> CalendarStore:
        """Create an empty calendar.

        Args:
            name: Unique calendar name
            timezone: IANA timezone name (config default if None)

        Raises:
            ValidationError: If the name is empty or the timezone invalid
            DuplicateCalendarError: If the name is taken
        """
        if not name or not name.strip():
            raise ValidationError("calendar name cannot be empty")
        if name in self._calendars:
            raise DuplicateCalendarError(f"calendar with name '{name}' already exists")
        timezone = validate_timezone(timezone or self.config.timezone)

        store = CalendarStore(name, timezone)
        self._calendars[name] = store
        if self._active is None:
            self._active = name
        logger.debug("Created calendar %r (%s)", name, timezone)
        return store

    def get_calendar(self, name: str) -> CalendarStore:
        """Get a calendar by name.

        Raises:
            NotFoundError: If no calendar has this name
        """
        try:
            return self._calendars[name]
        except KeyError:
            raise NotFoundError(f"calendar not found: {name}") from None

    def use_calendar(self, name: str) -> CalendarStore:
        """Make a calendar the active one."""
        store = self.get_calendar(name)
        self._active = name
        return store

    @property
    def active(self) -> CalendarStore:
        """The active calendar.

        Raises:
            NotFoundError: If no calendar is active
        """
        if self._active is None:
            raise NotFoundError("no active calendar set")
        return self._calendars[self._active]

    @property
    def active_name(self) -> str | None:
        return self._active

    def calendar_names(self) -> list[str]:
        return list(self._calendars)

    def rename_calendar(self, old_name: str, new_name: str) -> None:
        """Rename a calendar, keeping it active if it was.

        Raises:
            NotFoundError: If ``old_name`` does not exist
            ValidationError: If ``new_name`` is empty
            DuplicateCalendarError: If ``new_name`` is taken
        """
        if not new_name or not new_name.strip():
            raise ValidationError("new calendar name cannot be empty")
        store = self.get_calendar(old_name)
        if new_name == old_name:
            return
        if new_name in self._calendars:
            raise DuplicateCalendarError(f"calendar with name '{new_name}' already exists")

        del self._calendars[old_name]
        store.name = new_name
        self._calendars[new_name] = store
        if self._active == old_name:
            self._active = new_name

    def set_timezone(self, name: str, timezone: str) -> None:
        """Change a calendar's timezone label.

        Events keep their wall-clock times; new unlabelled events get the new
        label.
        """
        timezone = validate_timezone(timezone)
        self.get_calendar(name).timezone = timezone

    def remove_calendar(self, name: str) -> CalendarStore:
        """Remove a calendar.

        If it was active, another calendar (or none) becomes active.

        Raises:
            NotFoundError: If no calendar has this name
        """
        store = self.get_calendar(name)
        del self._calendars[name]
        if self._active == name:
            self._active = next(iter(self._calendars), None)
        return store

    def copy_events_on_date(self, day: date, target_name: str, target_day: date) -> CopyResult:
        """Copy the active calendar's events on ``day`` into another calendar.

        Raises:
            NotFoundError: If there is no active calendar or no such target
        """
        target = self.get_calendar(target_name)
        return self.active.copy_events_on_date(day, target, target_day)

    def copy_events_between(
        self, start_date: date, end_date: date, target_name: str, target_start: date
    ) -> CopyResult:
        """Copy the active calendar's events in a date range into another calendar.

        Raises:
            NotFoundError: If there is no active calendar or no such target
            ValidationError: If the range is inverted
        """
        target = self.get_calendar(target_name)
        return self.active.copy_events_between(start_date, end_date, target, target_start)
