"""Calendar store: add, edit and query the events of one named calendar."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from ..config import DEFAULT_CALENDAR_NAME, DEFAULT_TIMEZONE
from ..errors import ConflictError, NotFoundError, ValidationError
from .conflicts import ConflictDetector
from .event import Event, EventField, FieldUpdate, new_id
from .index import EventIndex
from .recurrence import RecurrenceDefinition
from .timezones import convert_wall_clock, to_wall_clock

logger = logging.getLogger(__name__)


@dataclass
class CopyResult:
    """Outcome of a bulk copy into another calendar."""

    copied: int = 0
    declined: int = 0


class CalendarStore:
    """Events of one calendar.

    The store exclusively owns its :class:`EventIndex`. Every write passes
    through the :class:`ConflictDetector`; reads go straight to the index.
    ``auto_decline`` selects strict mode: a conflicting add raises
    :class:`ConflictError` when set and is declined with ``False`` otherwise.
    """

    def __init__(self, name: str = DEFAULT_CALENDAR_NAME, timezone: str = DEFAULT_TIMEZONE) -> None:
        """Initialize an empty calendar.

        Args:
            name: Calendar name
            timezone: Timezone label stamped on events that carry none
        """
        self.name = name
        self.timezone = timezone
        self._index = EventIndex()
        self._detector = ConflictDetector(self._index)
        self._definitions: dict[str, RecurrenceDefinition] = {}

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"CalendarStore(name={self.name!r}, timezone={self.timezone!r}, events={len(self)})"

    @property
    def index(self) -> EventIndex:
        return self._index

    def _labelled(self, event: Event) -> Event:
        if event.timezone:
            return event
        return event.copy(timezone=self.timezone)

    # Writes

    def add_event(self, event: Event, auto_decline: bool = False) -> bool:
        """Add a single event.

        Returns:
            True if added, False if declined because of a conflict

        Raises:
            ConflictError: If it conflicts and ``auto_decline`` is set
        """
        return self._detector.try_add(self._labelled(event), strict=auto_decline)

    def add_recurring_event(self, definition: RecurrenceDefinition, auto_decline: bool = False) -> bool:
        """Expand a recurring definition and add all of its occurrences.

        Nothing is added unless every occurrence fits. On success the
        definition is kept for lookup by series id.

        Returns:
            True if added, False if declined because of a conflict

        Raises:
            ConflictError: If any occurrence conflicts and ``auto_decline`` is set
        """
        if definition.series_id in self._definitions:
            raise ValidationError(f"series already added: {definition.series_id}")

        occurrences = [self._labelled(e) for e in definition.expand()]
        if not self._detector.try_add_series(occurrences, strict=auto_decline):
            return False

        self._definitions[definition.series_id] = definition
        logger.debug(
            "Added series %r (%s) with %d occurrence(s)",
            definition.subject,
            definition.series_id,
            len(occurrences),
        )
        return True

    def add_event_copy(
        self, source: Event, auto_decline: bool = False, start: datetime | None = None
    ) -> bool:
        """Add a copy of ``source`` under a fresh id.

        Args:
            source: Event to copy (from this or another calendar)
            auto_decline: Raise on conflict instead of declining
            start: Optional new start; the copy keeps the source's duration

        Returns:
            True if added, False if declined because of a conflict
        """
        changes: dict[str, Any] = {"id": new_id(), "series_id": None, "timezone": self.timezone}
        if start is not None:
            changes["start"] = start
            changes["end"] = start + source.duration
        return self.add_event(source.copy(**changes), auto_decline=auto_decline)

    def copy_events_on_date(self, day: date, target: CalendarStore, target_day: date) -> CopyResult:
        """Copy every event on ``day`` into ``target``, moved to ``target_day``.

        Timed events keep their instant in time: the shifted start is converted
        from this calendar's zone to the target's. All-day events keep their
        date offset. Each copy is added on its own; a conflicting one is
        declined without affecting the others.
        """
        events = self._index.get_on_date(day)
        return self._copy_shifted(events, target, (target_day - day).days)

    def copy_events_between(
        self, start_date: date, end_date: date, target: CalendarStore, target_start: date
    ) -> CopyResult:
        """Copy every event overlapping ``[start_date, end_date]`` into ``target``.

        Events are shifted by the number of days between ``start_date`` and
        ``target_start``, otherwise as :meth:`copy_events_on_date`.

        Raises:
            ValidationError: If the range is inverted
        """
        if end_date < start_date:
            raise ValidationError("end date must not be before start date")
        events = self._index.get_in_range(start_date, end_date)
        return self._copy_shifted(events, target, (target_start - start_date).days)

    def _copy_shifted(self, events: list[Event], target: CalendarStore, days: int) -> CopyResult:
        result = CopyResult()
        for event in events:
            start = event.start + timedelta(days=days)
            if not event.all_day:
                start = convert_wall_clock(start, event.timezone or self.timezone, target.timezone)
            if target.add_event_copy(event, start=start):
                result.copied += 1
            else:
                result.declined += 1
        logger.debug(
            "Copied %d event(s) from %r to %r, %d declined",
            result.copied,
            self.name,
            target.name,
            result.declined,
        )
        return result

    def remove_event(self, event_id: str) -> Event:
        """Remove an event by id.

        Raises:
            NotFoundError: If no event has this id
        """
        event = self._index.remove(event_id)
        logger.debug("Removed event %r (%s)", event.subject, event_id)
        return event

    def remove_series(self, series_id: str) -> int:
        """Remove a recurring definition and its remaining occurrences.

        Returns:
            Number of occurrences removed

        Raises:
            NotFoundError: If no definition has this series id
        """
        self.get_recurring_definition(series_id)
        removed = 0
        for event in self._index.get_by_series(series_id):
            self._index.remove(event.id)
            removed += 1
        del self._definitions[series_id]
        logger.debug("Removed series %s (%d occurrence(s))", series_id, removed)
        return removed

    # Edits

    def find_event(self, subject: str, start: datetime) -> Event:
        """Find the first event with this subject starting exactly at ``start``.

        Raises:
            NotFoundError: If there is no such event
        """
        start = to_wall_clock(start, self.timezone)
        for event in self._index.get_by_subject(subject):
            if event.start == start:
                return event
        raise NotFoundError(f"no event {subject!r} starting at {start.isoformat()}")

    def edit_single_event(
        self,
        subject: str,
        start: datetime,
        field: str | EventField,
        new_value: Any,
        strict: bool = False,
    ) -> bool:
        """Edit one field of the event found by subject and start.

        Args:
            subject: Subject of the event
            start: Exact start of the event
            field: Field name (see :class:`EventField`)
            new_value: New value for the field
            strict: Raise on conflict instead of returning False

        Returns:
            True if applied, False if it would have created a conflict

        Raises:
            NotFoundError: If the event does not exist
            ValidationError: If the field or value is malformed
            ConflictError: If it would conflict and ``strict`` is set
        """
        update = FieldUpdate.of(field, new_value)
        event = self.find_event(subject, start)
        try:
            self._detector.try_update(event.id, update)
        except ConflictError as e:
            if strict:
                raise
            logger.info("Edit declined: %s", e)
            return False
        return True

    def edit_events_from_date(
        self, subject: str, from_instant: datetime, field: str | EventField, new_value: Any
    ) -> int:
        """Edit every event with this subject starting at or after ``from_instant``.

        Each event is updated independently; one that fails is skipped and
        does not affect the others.

        Returns:
            Number of events updated
        """
        update = FieldUpdate.of(field, new_value)
        from_instant = to_wall_clock(from_instant, self.timezone)
        targets = [e.id for e in self._index.get_by_subject(subject) if e.start >= from_instant]
        return self._update_each(targets, update)

    def edit_all_events(self, subject: str, field: str | EventField, new_value: Any) -> int:
        """Edit every event with this subject.

        Returns:
            Number of events updated
        """
        update = FieldUpdate.of(field, new_value)
        targets = [e.id for e in self._index.get_by_subject(subject)]
        return self._update_each(targets, update)

    def _update_each(self, event_ids: list[str], update: FieldUpdate) -> int:
        count = 0
        for event_id in event_ids:
            try:
                self._detector.try_update(event_id, update)
            except (ConflictError, ValidationError) as e:
                logger.info("Skipped event %s: %s", event_id, e)
                continue
            count += 1
        return count

    # Reads

    def get_event(self, event_id: str) -> Event:
        return self._index.get_by_id(event_id)

    def get_events_by_subject(self, subject: str) -> list[Event]:
        return self._index.get_by_subject(subject)

    def get_events_on_date(self, day: date) -> list[Event]:
        return self._index.get_on_date(day)

    def get_events_in_range(self, start_date: date, end_date: date) -> list[Event]:
        return self._index.get_in_range(start_date, end_date)

    def get_all_events(self) -> list[Event]:
        return self._index.get_all()

    def get_all_recurring_definitions(self) -> list[RecurrenceDefinition]:
        return list(self._definitions.values())

    def get_recurring_definition(self, series_id: str) -> RecurrenceDefinition:
        """Get a recurring definition by series id.

        Raises:
            NotFoundError: If no definition has this series id
        """
        try:
            return self._definitions[series_id]
        except KeyError:
            raise NotFoundError(f"series not found: {series_id}") from None

    def get_series_events(self, series_id: str) -> list[Event]:
        """Committed occurrences of a series still in the calendar."""
        self.get_recurring_definition(series_id)
        return self._index.get_by_series(series_id)

    def is_busy_at(self, instant: datetime) -> bool:
        """Check if any event occupies ``instant``.

        Timed events count when ``start <= instant <= end``; all-day events
        count for any instant on their date. An instant with a UTC offset is
        first converted to this calendar's wall-clock time.

        Raises:
            ValidationError: If an aware instant meets an unknown timezone
        """
        instant = to_wall_clock(instant, self.timezone)
        return any(event.contains(instant) for event in self._index.get_on_date(instant.date()))
