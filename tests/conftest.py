"""Shared fixtures for calendar tests."""

from datetime import datetime

import pytest

from py_calendar.calendar import CalendarStore, Event


@pytest.fixture
def store():
    """Empty calendar store."""
    return CalendarStore("Work", "America/New_York")


@pytest.fixture
def meeting():
    """Timed event on Monday 2023-05-08 10:00-11:00."""
    return Event("Meeting", datetime(2023, 5, 8, 10, 0), datetime(2023, 5, 8, 11, 0), location="Room 1")
