"""Timezone lookup and wall-clock conversion.

Events hold naive wall-clock datetimes labelled with a zone name. Aware
datetimes coming from outside (iCalendar data, query parameters) are moved
into a calendar's zone and made naive before they reach an event.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import ValidationError


def get_zone(timezone: str) -> ZoneInfo:
    """Look up an IANA zone.

    Raises:
        ValidationError: If the name is empty or unknown
    """
    if not timezone or not timezone.strip():
        raise ValidationError("timezone cannot be empty")
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"invalid timezone: {timezone}") from None


def is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def to_wall_clock(value: date | datetime, timezone: str) -> datetime:
    """Wall-clock time of ``value`` in ``timezone``.

    Dates become midnight, naive datetimes are returned unchanged.
    """
    if not isinstance(value, datetime):
        return datetime.combine(value, datetime.min.time())
    if is_aware(value):
        return value.astimezone(get_zone(timezone)).replace(tzinfo=None)
    return value.replace(tzinfo=None)


def convert_wall_clock(value: datetime, source: str, target: str) -> datetime:
    """Move a naive wall-clock time from one zone to another."""
    if source == target:
        return value
    aware = value.replace(tzinfo=get_zone(source))
    return aware.astimezone(get_zone(target)).replace(tzinfo=None)
