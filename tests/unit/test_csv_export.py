"""Tests for CSV export."""

import csv
import io
from datetime import date, datetime

from py_calendar.calendar import Event
from py_calendar.csv_export import CSV_HEADER, event_to_row, export_csv, export_csv_file


def test_timed_event_row():
    """Test the columns of a timed event."""
    event = Event(
        "Review",
        datetime(2023, 5, 8, 14, 30),
        datetime(2023, 5, 8, 15, 0),
        description="Quarterly",
        location="Room 4",
        is_public=False,
    )

    assert event_to_row(event) == [
        "Review",
        "05/08/2023",
        "02:30 PM",
        "05/08/2023",
        "03:00 PM",
        "False",
        "Quarterly",
        "Room 4",
        "True",
    ]


def test_all_day_row_has_no_times():
    """Test that all-day events leave the time columns empty."""
    row = event_to_row(Event.all_day_on("Holiday", date(2023, 5, 15)))

    assert row[1:6] == ["05/15/2023", "", "05/15/2023", "", "True"]
    assert row[8] == "False"


def test_export_csv(store, meeting):
    """Test that every event is written after the header, in time order."""
    store.add_event(Event.all_day_on("Holiday", date(2023, 5, 15)))
    store.add_event(meeting)
    out = io.StringIO()

    written = export_csv(store, out)

    rows = list(csv.reader(io.StringIO(out.getvalue())))
    assert written == 2
    assert rows[0] == CSV_HEADER
    assert [r[0] for r in rows[1:]] == ["Meeting", "Holiday"]


def test_export_csv_quotes_commas(store):
    """Test that text containing commas survives a CSV round trip."""
    store.add_event(
        Event("Lunch", datetime(2023, 5, 8, 12, 0), datetime(2023, 5, 8, 13, 0), location="Main St, Suite 2")
    )
    out = io.StringIO()

    export_csv(store, out)

    rows = list(csv.reader(io.StringIO(out.getvalue())))
    assert rows[1][7] == "Main St, Suite 2"


def test_export_csv_file(store, meeting, tmp_path):
    """Test exporting to a file in a new directory."""
    store.add_event(meeting)
    target = tmp_path / "exports" / "work.csv"

    path = export_csv_file(store, target)

    assert path == str(target.resolve())
    lines = target.read_text(encoding="utf-8").splitlines()
    assert lines[0] == ",".join(CSV_HEADER)
    assert lines[1].startswith("Meeting,05/08/2023,10:00 AM,05/08/2023,11:00 AM,False")
