"""CSV export of a calendar's events.

The column layout is the one calendar applications accept for import:
Subject, Start Date, Start Time, End Date, End Time, All Day Event,
Description, Location, Private.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import TextIO

from .calendar.event import Event
from .calendar.store import CalendarStore

CSV_HEADER = [
    "Subject",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
    "All Day Event",
    "Description",
    "Location",
    "Private",
]

DATE_FORMAT = "%m/%d/%Y"
TIME_FORMAT = "%I:%M %p"


def event_to_row(event: Event) -> list[str]:
    """Convert an event to a CSV row.

    All-day events leave the time columns empty.
    """
    return [
        event.subject,
        event.start.strftime(DATE_FORMAT),
        "" if event.all_day else event.start.strftime(TIME_FORMAT),
        event.end.strftime(DATE_FORMAT),
        "" if event.all_day else event.end.strftime(TIME_FORMAT),
        "True" if event.all_day else "False",
        event.description,
        event.location,
        "False" if event.is_public else "True",
    ]


def export_csv(store: CalendarStore, destination: TextIO) -> int:
    """Write a snapshot of every event in ``store`` as CSV.

    Returns:
        Number of event rows written
    """
    writer = csv.writer(destination, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    events = store.get_all_events()
    for event in events:
        writer.writerow(event_to_row(event))
    return len(events)


def export_csv_file(store: CalendarStore, path: str | Path) -> str:
    """Export ``store`` to a CSV file.

    Returns:
        Absolute path of the written file
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", newline="", encoding="utf-8") as f:
        export_csv(store, f)
    return str(file_path.resolve())
