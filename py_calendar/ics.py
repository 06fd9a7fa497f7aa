"""Conversion between calendar stores and iCalendar data.

Export writes one VEVENT per committed event. Import turns plain VEVENTs into
events and simple weekly/daily RRULEs into recurring definitions:

- FREQ=DAILY or FREQ=WEEKLY, no INTERVAL other than 1
- BYDAY with plain weekday names (no ordinals)
- exactly one of COUNT or UNTIL

Any other rule is imported as its first occurrence only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Any

from icalendar import Calendar as iCalendar
from icalendar import Event as iEvent

from .calendar.event import ALL_DAY_END, Event
from .calendar.recurrence import ICAL_WEEKDAYS, RecurrenceDefinition
from .calendar.store import CalendarStore
from .calendar.timezones import to_wall_clock
from .errors import ValidationError

logger = logging.getLogger(__name__)

PRODID = "-//py-calendar//EN"
SERIES_PROPERTY = "X-PY-CALENDAR-SERIES"


@dataclass
class ImportResult:
    """Outcome of an iCalendar import."""

    added: int = 0
    declined: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


class CalendarConverter:
    """Converts events to and from iCalendar components.

    Times are stored as wall-clock datetimes labelled with the calendar's
    timezone, so timezone-aware values read from iCalendar data are moved to
    that zone and made naive.
    """

    def __init__(self, timezone: str = "UTC") -> None:
        """Initialize converter.

        Args:
            timezone: Zone that imported aware datetimes are converted to
        """
        self.timezone = timezone

    def event_to_vevent(self, event: Event) -> iEvent:
        """Convert an event to a VEVENT component.

        All-day events use DATE values with the exclusive DTEND of RFC 5545.
        """
        vevent = iEvent()
        vevent.add("uid", event.id)
        vevent.add("summary", event.subject)

        if event.all_day:
            vevent.add("dtstart", event.start_date)
            vevent.add("dtend", event.start_date + timedelta(days=1))
        else:
            vevent.add("dtstart", event.start)
            vevent.add("dtend", event.end)

        if event.description:
            vevent.add("description", event.description)
        if event.location:
            vevent.add("location", event.location)
        vevent.add("class", "PUBLIC" if event.is_public else "PRIVATE")
        if event.series_id:
            vevent.add(SERIES_PROPERTY, event.series_id)

        vevent.add("dtstamp", datetime.now(UTC))
        return vevent

    def store_to_ical(self, store: CalendarStore) -> str:
        """Generate a single VCALENDAR containing every event of ``store``."""
        cal = iCalendar()
        cal.add("prodid", PRODID)
        cal.add("version", "2.0")
        cal.add("calscale", "GREGORIAN")
        cal.add("method", "PUBLISH")
        cal.add("x-wr-calname", store.name)
        cal.add("x-wr-timezone", store.timezone)

        for event in store.get_all_events():
            cal.add_component(self.event_to_vevent(event))

        return cal.to_ical().decode("utf-8")

    def _wall_clock(self, value: date | datetime) -> datetime:
        return to_wall_clock(value, self.timezone)

    def vevent_fields(self, vevent: iEvent) -> dict[str, Any]:
        """Extract event constructor arguments from a VEVENT.

        Raises:
            ValidationError: If DTSTART is missing
        """
        dtstart = vevent.get("dtstart")
        if dtstart is None:
            raise ValidationError("VEVENT without DTSTART")
        start_value = dtstart.dt
        dtend = vevent.get("dtend")
        end_value = dtend.dt if dtend is not None else None

        fields: dict[str, Any] = {
            "subject": str(vevent.get("summary", "")),
            "description": str(vevent.get("description", "")),
            "location": str(vevent.get("location", "")),
            "is_public": str(vevent.get("class", "PUBLIC")).upper() != "PRIVATE",
            "timezone": self.timezone,
        }

        if not isinstance(start_value, datetime):
            # DATE values: DTEND is exclusive
            last_day = start_value
            if isinstance(end_value, date) and not isinstance(end_value, datetime):
                last_day = max(start_value, end_value - timedelta(days=1))
            if last_day == start_value:
                fields.update(start=self._wall_clock(start_value), end=None, all_day=True)
            else:
                fields.update(
                    start=self._wall_clock(start_value),
                    end=datetime.combine(last_day, ALL_DAY_END),
                    all_day=False,
                )
            return fields

        start = self._wall_clock(start_value)
        if end_value is None:
            duration = vevent.get("duration")
            end = start + duration.dt if duration is not None else start
        else:
            end = self._wall_clock(end_value)
        fields.update(start=start, end=end, all_day=False)
        return fields

    def rrule_to_definition(self, vevent: iEvent, fields: dict[str, Any]) -> RecurrenceDefinition | None:
        """Map a VEVENT's RRULE to a recurring definition.

        Returns:
            The definition, or None if the rule is not a supported pattern

        Raises:
            ValidationError: If the rule maps to an invalid definition
        """
        rule = vevent.get("rrule")
        if rule is None:
            return None

        freq = [str(f).upper() for f in rule.get("FREQ", [])]
        interval = rule.get("INTERVAL", [1])
        if freq not in (["DAILY"], ["WEEKLY"]) or int(interval[0]) != 1:
            return None

        start: datetime = fields["start"]
        if freq == ["DAILY"]:
            weekdays = frozenset(range(7))
        else:
            names = [str(d).upper() for d in rule.get("BYDAY", [])]
            if any(name not in ICAL_WEEKDAYS for name in names):
                return None
            weekdays = frozenset(ICAL_WEEKDAYS.index(name) for name in names) or frozenset([start.weekday()])

        count = rule.get("COUNT")
        until = rule.get("UNTIL")
        if (count is None) == (until is None):
            return None

        until_date = None
        if until is not None:
            until_date = self._wall_clock(until[0]).date()

        end = fields["end"] if fields["end"] is not None else start
        return RecurrenceDefinition.create(
            fields["subject"],
            start,
            end,
            weekdays,
            count=int(count[0]) if count is not None else None,
            until=until_date,
            description=fields["description"],
            location=fields["location"],
            is_public=fields["is_public"],
            all_day=fields["all_day"],
            timezone=fields["timezone"],
        )

    def import_ical(self, store: CalendarStore, ical_data: str, auto_decline: bool = False) -> ImportResult:
        """Add every VEVENT of ``ical_data`` to ``store``.

        Each VEVENT is added independently. Conflicting ones are declined,
        malformed ones are skipped and reported in ``errors``.

        Raises:
            ValueError: If the data is not valid iCalendar
            ConflictError: On a conflict when ``auto_decline`` is set
        """
        try:
            cal = iCalendar.from_ical(ical_data)
        except Exception as e:
            raise ValueError(f"invalid calendar object: {e}") from e

        result = ImportResult()
        for vevent in cal.walk("VEVENT"):
            uid = str(vevent.get("uid", ""))
            try:
                fields = self.vevent_fields(vevent)
                definition = self.rrule_to_definition(vevent, fields)
                if definition is not None:
                    added = store.add_recurring_event(definition, auto_decline=auto_decline)
                else:
                    if vevent.get("rrule") is not None:
                        logger.info("Unsupported RRULE on %s, importing first occurrence only", uid or "event")
                    added = store.add_event(Event(**fields), auto_decline=auto_decline)
            except ValidationError as e:
                result.skipped += 1
                result.errors.append(f"{uid or 'event'}: {e}")
                continue

            if added:
                result.added += 1
            else:
                result.declined += 1

        logger.debug(
            "Imported into %r: %d added, %d declined, %d skipped",
            store.name,
            result.added,
            result.declined,
            result.skipped,
        )
        return result
