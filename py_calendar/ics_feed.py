"""ICS feed endpoint for calendar subscriptions.

Provides read-only HTTP access to a calendar via .ics URL:
    GET /feed.ics?calendar=NAME

Without the calendar parameter the active calendar is served. The feed is a
single iCalendar file with every event of the calendar, suitable for clients
that subscribe to a URL.
"""

from __future__ import annotations

import logging

from starlette.requests import Request
from starlette.responses import Response

from .calendar.registry import CalendarRegistry
from .errors import NotFoundError
from .ics import CalendarConverter

logger = logging.getLogger(__name__)


class ICSFeedHandler:
    """Handler for the ICS feed endpoint."""

    def __init__(self, registry: CalendarRegistry) -> None:
        """Initialize ICS feed handler.

        Args:
            registry: Calendars that can be served
        """
        self.registry = registry

    async def handle_feed_request(self, request: Request) -> Response:
        """Handle GET /feed.ics?calendar=NAME request.

        Returns:
            Response with Content-Type: text/calendar, or a plain-text 404 if
            the calendar does not exist
        """
        name = request.query_params.get("calendar")

        try:
            store = self.registry.get_calendar(name) if name else self.registry.active
        except NotFoundError as e:
            return Response(content=str(e), status_code=404, media_type="text/plain")

        converter = CalendarConverter(timezone=store.timezone)
        ical_content = converter.store_to_ical(store)
        logger.debug("Generated feed for %r: %d bytes", store.name, len(ical_content))

        return Response(
            content=ical_content,
            media_type="text/calendar; charset=utf-8",
            headers={
                "Content-Disposition": f'inline; filename="calendar-{store.name}.ics"',
                "Cache-Control": f"private, max-age={self.registry.config.feed_cache_seconds}",
            },
        )
