"""Calendar server command-line tool."""

import argparse
import sys
from pathlib import Path


def main() -> None:
    """Main entry point for the calendar server."""
    from py_calendar.config import CalendarConfig

    config = CalendarConfig()

    parser = argparse.ArgumentParser(
        description="Read-only calendar feed and query server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve an empty default calendar
  py-calendar-server

  # Serve two calendars imported from iCalendar files
  py-calendar-server --port 8080 work.ics home.ics

  # Import in a specific timezone
  py-calendar-server --timezone Europe/Berlin team.ics

Each file becomes a calendar named after the file (work.ics -> "work").
Recurring events with weekly/daily RRULEs are expanded on import;
conflicting events are declined.

Endpoints:
  - Feed:    http://localhost:PORT/feed.ics?calendar=NAME
  - Queries: http://localhost:PORT/calendars/NAME/events?date=YYYY-MM-DD
             http://localhost:PORT/calendars/NAME/busy?at=YYYY-MM-DDTHH:MM
        """,
    )
    parser.add_argument(
        "--addr",
        default="127.0.0.1",
        help="listening address (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="listening port (default: 8080)",
    )
    parser.add_argument(
        "--timezone",
        default=config.timezone,
        help=f"timezone of the calendars (default: {config.timezone})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="enable debug logging (logs requests, responses and calendar changes)",
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="iCalendar files to import, one calendar per file",
    )

    args = parser.parse_args()

    if args.debug:
        from py_calendar.debug import setup_debug_logging

        setup_debug_logging()

    from py_calendar.calendar import CalendarRegistry
    from py_calendar.errors import CalendarError
    from py_calendar.ics import CalendarConverter

    registry = CalendarRegistry(config)

    try:
        for file_name in args.files:
            path = Path(file_name)
            if not path.is_file():
                print(f"Error: file does not exist: {path}", file=sys.stderr)
                sys.exit(1)

            store = registry.create_calendar(path.stem, args.timezone)
            converter = CalendarConverter(timezone=store.timezone)
            try:
                result = converter.import_ical(store, path.read_text(encoding="utf-8"))
            except ValueError as e:
                print(f"Error: {path}: {e}", file=sys.stderr)
                sys.exit(1)

            print(
                f"Loaded {path.name} as '{store.name}': {result.added} added, "
                f"{result.declined} declined, {result.skipped} skipped"
            )
            for error in result.errors:
                print(f"  skipped {error}", file=sys.stderr)

        if not len(registry):
            registry.create_calendar(config.default_name, args.timezone)
    except CalendarError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    from py_calendar.server import create_app

    app = create_app(registry, debug=args.debug)

    import uvicorn

    print(f"Calendar server listening on {args.addr}:{args.port}")
    print(f"Calendars: {', '.join(registry.calendar_names())} (active: {registry.active_name})")
    print(f"Feed: http://{args.addr}:{args.port}/feed.ics?calendar={registry.active_name}")

    uvicorn.run(
        app,
        host=args.addr,
        port=args.port,
        log_level="debug" if args.debug else "info",
    )


if __name__ == "__main__":
    main()
