"""Configuration defaults, overridable through environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

PY_CALENDAR_TIMEZONE = os.getenv("PY_CALENDAR_TIMEZONE")
PY_CALENDAR_DEFAULT_NAME = os.getenv("PY_CALENDAR_DEFAULT_NAME")
PY_CALENDAR_FEED_CACHE_SECONDS = os.getenv("PY_CALENDAR_FEED_CACHE_SECONDS")

DEFAULT_TIMEZONE = PY_CALENDAR_TIMEZONE or "America/New_York"
DEFAULT_CALENDAR_NAME = PY_CALENDAR_DEFAULT_NAME or "Default"


@dataclass
class CalendarConfig:
    """Settings shared by the registry, the feed and the server command."""

    # Timezone for calendars created without one
    timezone: str = DEFAULT_TIMEZONE

    # Name of the calendar created when nothing else is loaded
    default_name: str = DEFAULT_CALENDAR_NAME

    # Cache-Control max-age of the .ics feed
    feed_cache_seconds: int = int(PY_CALENDAR_FEED_CACHE_SECONDS or 300)
