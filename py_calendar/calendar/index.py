"""Multi-key index over the committed events of one calendar."""

from __future__ import annotations

import bisect
from collections.abc import Iterator
from datetime import date, datetime, timedelta

from ..errors import NotFoundError, ValidationError
from .event import Event


def _span_dates(event: Event) -> Iterator[date]:
    """Every calendar date covered by the event, first to last."""
    day = event.start_date
    last = event.end_date
    while day <= last:
        yield day
        day += timedelta(days=1)


class EventIndex:
    """Id-keyed event arena plus derived lookup structures.

    Secondary structures hold ids, never event objects:

    - date buckets: every calendar date an event's span covers
    - subject buckets
    - a list of ``(start, id)`` keys kept in time order

    Buckets are dropped as soon as they become empty.
    """

    def __init__(self) -> None:
        self._events: dict[str, Event] = {}
        self._by_date: dict[date, set[str]] = {}
        self._by_subject: dict[str, set[str]] = {}
        self._by_time: list[tuple[datetime, str]] = []

    def __len__(self) -> int:
        return len(self._events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events

    def __iter__(self) -> Iterator[Event]:
        return iter(self.get_all())

    def insert(self, event: Event) -> None:
        """Add an event to the arena and every secondary structure.

        Raises:
            ValidationError: If an event with the same id is already indexed
        """
        if event.id in self._events:
            raise ValidationError(f"event already indexed: {event.id}")
        self._link(event)
        self._events[event.id] = event

    def remove(self, event_id: str) -> Event:
        """Remove an event from the arena and every secondary structure.

        Returns:
            The removed event

        Raises:
            NotFoundError: If no event has this id
        """
        event = self.get_by_id(event_id)
        self._unlink(event)
        del self._events[event_id]
        return event

    def replace(self, event: Event) -> Event:
        """Swap in a new version of an indexed event (same id).

        Only the secondary entries keyed by changed fields are touched.

        Returns:
            The previous version

        Raises:
            NotFoundError: If no event has this id
        """
        old = self.get_by_id(event.id)

        if old.start != event.start:
            bisect.insort(self._by_time, (event.start, event.id))
            self._unlink_time(old)
        if (old.start_date, old.end_date) != (event.start_date, event.end_date):
            self._unlink_dates(old)
            self._link_dates(event)
        if old.subject != event.subject:
            self._discard(self._by_subject, old.subject, old.id)
            self._by_subject.setdefault(event.subject, set()).add(event.id)

        self._events[event.id] = event
        return old

    def get_by_id(self, event_id: str) -> Event:
        """Get an event by id.

        Raises:
            NotFoundError: If no event has this id
        """
        try:
            return self._events[event_id]
        except KeyError:
            raise NotFoundError(f"event not found: {event_id}") from None

    def get_by_subject(self, subject: str) -> list[Event]:
        """Events with exactly this subject, in time order."""
        return self._sorted(self._by_subject.get(subject, ()))

    def get_by_series(self, series_id: str) -> list[Event]:
        """Committed occurrences of a series, in time order."""
        return [e for e in self.get_all() if e.series_id == series_id]

    def get_on_date(self, day: date) -> list[Event]:
        """Events whose date span includes ``day``, in time order."""
        return self._sorted(self._by_date.get(day, ()))

    def get_in_range(self, start_date: date, end_date: date) -> list[Event]:
        """Events whose date span overlaps ``[start_date, end_date]``.

        Events starting after the range are cut off with a bisect on the
        time-ordered keys; the rest are filtered on their end date so
        multi-day events that began before the range are included.
        """
        if end_date < start_date:
            return []
        cutoff = bisect.bisect_right(self._by_time, end_date, key=lambda k: k[0].date())
        result = []
        for _, event_id in self._by_time[:cutoff]:
            event = self._events[event_id]
            if event.end_date >= start_date:
                result.append(event)
        return result

    def get_all(self) -> list[Event]:
        """All events, in time order."""
        return [self._events[event_id] for _, event_id in self._by_time]

    def _sorted(self, ids: set[str] | tuple[()]) -> list[Event]:
        events = [self._events[event_id] for event_id in ids]
        events.sort(key=lambda e: (e.start, e.id))
        return events

    def _link(self, event: Event) -> None:
        # Ordered insert first: it is the only step that can raise
        bisect.insort(self._by_time, (event.start, event.id))
        self._link_dates(event)
        self._by_subject.setdefault(event.subject, set()).add(event.id)

    def _unlink(self, event: Event) -> None:
        self._unlink_dates(event)
        self._discard(self._by_subject, event.subject, event.id)
        self._unlink_time(event)

    def _link_dates(self, event: Event) -> None:
        for day in _span_dates(event):
            self._by_date.setdefault(day, set()).add(event.id)

    def _unlink_dates(self, event: Event) -> None:
        for day in _span_dates(event):
            self._discard(self._by_date, day, event.id)

    def _unlink_time(self, event: Event) -> None:
        key = (event.start, event.id)
        pos = bisect.bisect_left(self._by_time, key)
        if pos < len(self._by_time) and self._by_time[pos] == key:
            del self._by_time[pos]

    @staticmethod
    def _discard(buckets: dict, key: object, event_id: str) -> None:
        bucket = buckets.get(key)
        if bucket is None:
            return
        bucket.discard(event_id)
        if not bucket:
            del buckets[key]
