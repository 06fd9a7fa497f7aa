"""Conflict detection and the validate-then-commit write path."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..errors import ConflictError
from .event import Event, FieldUpdate
from .index import EventIndex

logger = logging.getLogger(__name__)


def conflicts(a: Event, b: Event) -> bool:
    """Check if two events overlap as closed intervals.

    An event ending exactly when another begins is a conflict.
    """
    return a.conflicts_with(b)


class ConflictDetector:
    """Guards every write to an :class:`EventIndex`.

    Candidates are checked against the index before anything is committed, so
    a rejected write never leaves a trace in the index.
    """

    def __init__(self, index: EventIndex) -> None:
        self.index = index

    def find_conflicts(self, candidate: Event, exclude_id: str | None = None) -> list[Event]:
        """Indexed events that overlap ``candidate``.

        Args:
            candidate: Event to check
            exclude_id: Id to skip (the event being updated)

        Returns:
            Conflicting events in time order
        """
        return [
            existing
            for existing in self.index.get_in_range(candidate.start_date, candidate.end_date)
            if existing.id != exclude_id and conflicts(candidate, existing)
        ]

    def has_conflict(self, candidate: Event, exclude_id: str | None = None) -> bool:
        return bool(self.find_conflicts(candidate, exclude_id))

    def try_add(self, event: Event, strict: bool) -> bool:
        """Commit ``event`` unless it conflicts.

        Returns:
            True if committed, False if declined (non-strict conflict)

        Raises:
            ConflictError: If it conflicts and ``strict`` is set
        """
        found = self.find_conflicts(event)
        if found:
            if strict:
                raise ConflictError(
                    f"cannot add event {event.subject!r} due to conflict with an existing event",
                    candidate=event,
                    conflicting=found,
                )
            logger.info("Declined event %r: conflicts with %d event(s)", event.subject, len(found))
            return False

        self.index.insert(event)
        logger.debug("Added event %r (%s)", event.subject, event.id)
        return True

    def try_add_series(self, occurrences: Sequence[Event], strict: bool) -> bool:
        """Commit all occurrences or none of them.

        Every occurrence is checked against the index and against the
        occurrences before it in the same batch before the first commit.

        Returns:
            True if all were committed, False if declined (non-strict conflict)

        Raises:
            ConflictError: On the first collision when ``strict`` is set
        """
        for i, occurrence in enumerate(occurrences):
            found = self.find_conflicts(occurrence)
            found.extend(other for other in occurrences[:i] if conflicts(occurrence, other))
            if not found:
                continue
            if strict:
                raise ConflictError(
                    f"cannot add recurring event {occurrence.subject!r} due to conflict "
                    f"on {occurrence.start_date.isoformat()}",
                    candidate=occurrence,
                    conflicting=found,
                )
            logger.info(
                "Declined series %r: occurrence on %s conflicts",
                occurrence.subject,
                occurrence.start_date.isoformat(),
            )
            return False

        for occurrence in occurrences:
            self.index.insert(occurrence)
        logger.debug("Added %d occurrence(s)", len(occurrences))
        return True

    def try_update(self, event_id: str, update: FieldUpdate) -> Event:
        """Apply a field update if the result conflicts with nothing else.

        A shadow copy with the update applied is checked against every other
        indexed event; only if it passes is it written back and re-indexed.

        Returns:
            The updated event

        Raises:
            NotFoundError: If no event has this id
            ValidationError: If the update is malformed
            ConflictError: If the updated event would conflict
        """
        original = self.index.get_by_id(event_id)
        shadow = update.apply(original)

        found = self.find_conflicts(shadow, exclude_id=event_id)
        if found:
            raise ConflictError(
                f"updating {update.field.value} of {original.subject!r} would create a conflict",
                candidate=shadow,
                conflicting=found,
            )

        self.index.replace(shadow)
        logger.debug("Updated %s of event %s", update.field.value, event_id)
        return shadow
