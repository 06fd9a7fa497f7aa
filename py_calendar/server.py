"""Read-only HTTP access to calendars.

Endpoints:
    GET /feed.ics?calendar=NAME                      iCalendar feed
    GET /calendars                                   calendar names, active calendar
    GET /calendars/NAME/events?date=YYYY-MM-DD       events on a date
    GET /calendars/NAME/events?start=...&end=...     events in a date range
    GET /calendars/NAME/events                       all events
    GET /calendars/NAME/series                       recurring definitions
    GET /calendars/NAME/busy?at=YYYY-MM-DDTHH:MM     busy/free at an instant
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from urllib.parse import unquote

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.responses import Response as StarletteResponse
from starlette.routing import Route

from .calendar.event import Event
from .calendar.recurrence import RecurrenceDefinition, format_weekdays
from .calendar.registry import CalendarRegistry
from .calendar.store import CalendarStore
from .calendar.timezones import to_wall_clock
from .errors import CalendarError, NotFoundError, ValidationError
from .ics_feed import ICSFeedHandler

CALENDARS_PATH = "/calendars"


def event_to_dict(event: Event) -> dict[str, Any]:
    """Serialize an event for JSON responses."""
    return {
        "id": event.id,
        "subject": event.subject,
        "start": event.start.isoformat(),
        "end": event.end.isoformat(),
        "all_day": event.all_day,
        "description": event.description,
        "location": event.location,
        "public": event.is_public,
        "timezone": event.timezone,
        "series_id": event.series_id,
    }


def definition_to_dict(definition: RecurrenceDefinition) -> dict[str, Any]:
    """Serialize a recurring definition for JSON responses."""
    return {
        "series_id": definition.series_id,
        "subject": definition.subject,
        "start": definition.start.isoformat(),
        "end": definition.end.isoformat(),
        "weekdays": format_weekdays(definition.weekdays),
        "count": definition.count,
        "until": definition.until.isoformat() if definition.until else None,
        "all_day": definition.all_day,
    }


def _query_date(request: Request, name: str) -> date:
    value = request.query_params.get(name)
    if not value:
        raise ValidationError(f"missing required '{name}' parameter")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"invalid date for '{name}': {value}") from None


def _query_datetime(request: Request, name: str) -> datetime:
    value = request.query_params.get(name)
    if not value:
        raise ValidationError(f"missing required '{name}' parameter")
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"invalid date/time for '{name}': {value}") from None


def error_status(err: CalendarError) -> int:
    """Map a calendar error to an HTTP status code."""
    if isinstance(err, NotFoundError):
        return 404
    if isinstance(err, ValidationError):
        return 400
    return 409


class Handler:
    """Calendar HTTP handler."""

    def __init__(self, registry: CalendarRegistry, debug: bool = False):
        """Initialize handler.

        Args:
            registry: Calendars to serve
            debug: Enable debug logging
        """
        self.registry = registry
        self.ics_feed_handler = ICSFeedHandler(registry)
        self.debug = debug

    async def handle(self, request: Request) -> StarletteResponse:
        """Handle an HTTP request."""
        if self.debug:
            from .debug import log_request

            log_request(request.method, request.url.path, request.url.query, dict(request.headers.items()))

        if request.method not in ("GET", "HEAD"):
            response: StarletteResponse = StarletteResponse(
                content="Method not allowed. Only GET is supported.",
                status_code=405,
                headers={"Allow": "GET, HEAD"},
            )
        else:
            try:
                response = await self._dispatch(request)
            except CalendarError as e:
                response = StarletteResponse(content=str(e), status_code=error_status(e), media_type="text/plain")

        if self.debug:
            from .debug import log_response

            log_response(response.status_code, dict(response.headers.items()), response.body)
        return response

    async def _dispatch(self, request: Request) -> StarletteResponse:
        path = request.url.path.rstrip("/") or "/"

        if path == "/feed.ics":
            return await self.ics_feed_handler.handle_feed_request(request)

        if path == CALENDARS_PATH:
            return JSONResponse(
                {
                    "active": self.registry.active_name,
                    "calendars": [
                        {
                            "name": name,
                            "timezone": self.registry.get_calendar(name).timezone,
                            "events": len(self.registry.get_calendar(name)),
                        }
                        for name in self.registry.calendar_names()
                    ],
                }
            )

        parts = [unquote(p) for p in path.split("/") if p]
        if len(parts) == 3 and parts[0] == CALENDARS_PATH.strip("/"):
            store = self.registry.get_calendar(parts[1])
            if parts[2] == "events":
                return self._events(request, store)
            if parts[2] == "series":
                return JSONResponse(
                    [definition_to_dict(d) for d in store.get_all_recurring_definitions()]
                )
            if parts[2] == "busy":
                # Aware instants are answered in the calendar's wall-clock time
                at = to_wall_clock(_query_datetime(request, "at"), store.timezone)
                return JSONResponse({"at": at.isoformat(), "busy": store.is_busy_at(at)})

        raise NotFoundError(f"not found: {request.url.path}")

    def _events(self, request: Request, store: CalendarStore) -> StarletteResponse:
        params = request.query_params
        if "date" in params:
            events = store.get_events_on_date(_query_date(request, "date"))
        elif "start" in params or "end" in params:
            events = store.get_events_in_range(_query_date(request, "start"), _query_date(request, "end"))
        else:
            events = store.get_all_events()
        return JSONResponse([event_to_dict(e) for e in events])


def create_app(registry: CalendarRegistry, debug: bool = False) -> Starlette:
    """Create a Starlette app serving ``registry``.

    Args:
        registry: Calendars to serve
        debug: Log requests and responses

    Returns:
        Starlette application
    """
    handler = Handler(registry, debug=debug)

    async def calendar_handler(request: Request) -> StarletteResponse:
        return await handler.handle(request)

    routes = [
        Route(
            "/{path:path}",
            calendar_handler,
            methods=["GET", "HEAD", "POST", "PUT", "DELETE"],
        ),
    ]

    return Starlette(routes=routes)
