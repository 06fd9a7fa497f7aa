"""Tests for the calendar registry."""

from datetime import date, datetime

import pytest

from py_calendar.calendar import CalendarRegistry, CopyResult, validate_timezone
from py_calendar.config import CalendarConfig
from py_calendar.errors import DuplicateCalendarError, NotFoundError, ValidationError


@pytest.fixture
def registry():
    return CalendarRegistry(CalendarConfig(timezone="UTC", default_name="Default", feed_cache_seconds=60))


def test_first_calendar_becomes_active(registry):
    """Test that the first calendar created is the active one."""
    work = registry.create_calendar("Work", "America/New_York")
    registry.create_calendar("Home")

    assert registry.active is work
    assert registry.active_name == "Work"
    assert registry.calendar_names() == ["Work", "Home"]
    assert len(registry) == 2
    assert "Home" in registry


def test_default_timezone_from_config(registry):
    """Test that calendars without a timezone use the configured one."""
    assert registry.create_calendar("Home").timezone == "UTC"


def test_no_active_calendar(registry):
    """Test that an empty registry has no active calendar."""
    assert registry.active_name is None
    with pytest.raises(NotFoundError, match="no active calendar"):
        registry.active


def test_create_calendar_errors(registry):
    """Test rejected calendar names and timezones."""
    registry.create_calendar("Work")

    with pytest.raises(DuplicateCalendarError, match="already exists"):
        registry.create_calendar("Work")
    with pytest.raises(ValidationError, match="cannot be empty"):
        registry.create_calendar(" ")
    with pytest.raises(ValidationError, match="invalid timezone"):
        registry.create_calendar("Mars", "Mars/Olympus_Mons")
    assert registry.calendar_names() == ["Work"]


def test_validate_timezone():
    """Test timezone validation."""
    assert validate_timezone("Europe/Berlin") == "Europe/Berlin"
    with pytest.raises(ValidationError):
        validate_timezone("")
    with pytest.raises(ValidationError):
        validate_timezone("Not/AZone")


def test_use_calendar(registry):
    """Test switching the active calendar."""
    registry.create_calendar("Work")
    home = registry.create_calendar("Home")

    assert registry.use_calendar("Home") is home
    assert registry.active is home
    with pytest.raises(NotFoundError, match="calendar not found"):
        registry.use_calendar("Missing")
    assert registry.active_name == "Home"


def test_calendars_are_independent(registry, meeting):
    """Test that events added to one calendar do not show up in another."""
    work = registry.create_calendar("Work")
    home = registry.create_calendar("Home")

    work.add_event(meeting)

    assert len(work) == 1
    assert len(home) == 0
    assert home.add_event(meeting) is True


def test_rename_calendar(registry):
    """Test renaming keeps the store and the active pointer."""
    work = registry.create_calendar("Work")
    registry.create_calendar("Home")

    registry.rename_calendar("Work", "Office")

    assert registry.get_calendar("Office") is work
    assert work.name == "Office"
    assert registry.active_name == "Office"
    assert "Work" not in registry
    with pytest.raises(DuplicateCalendarError):
        registry.rename_calendar("Office", "Home")
    with pytest.raises(NotFoundError):
        registry.rename_calendar("Work", "Other")
    with pytest.raises(ValidationError):
        registry.rename_calendar("Office", "")


def test_set_timezone(registry):
    """Test changing a calendar's timezone label."""
    registry.create_calendar("Work")

    registry.set_timezone("Work", "Asia/Tokyo")

    assert registry.get_calendar("Work").timezone == "Asia/Tokyo"
    with pytest.raises(ValidationError):
        registry.set_timezone("Work", "Nowhere/Special")


def test_remove_calendar(registry):
    """Test that removing the active calendar activates another."""
    work = registry.create_calendar("Work")
    registry.create_calendar("Home")

    assert registry.remove_calendar("Work") is work
    assert registry.active_name == "Home"
    registry.remove_calendar("Home")
    assert registry.active_name is None
    with pytest.raises(NotFoundError):
        registry.remove_calendar("Home")


def test_copy_from_active_calendar(registry, meeting):
    """Test that bulk copies read from the active calendar."""
    work = registry.create_calendar("Work", "America/New_York")
    home = registry.create_calendar("Home", "America/New_York")
    work.add_event(meeting)

    on_date = registry.copy_events_on_date(date(2023, 5, 8), "Home", date(2023, 5, 9))
    between = registry.copy_events_between(date(2023, 5, 1), date(2023, 5, 31), "Home", date(2023, 6, 1))

    assert on_date == CopyResult(copied=1, declined=0)
    assert between == CopyResult(copied=1, declined=0)
    assert [e.start for e in home.get_all_events()] == [
        datetime(2023, 5, 9, 10, 0),
        datetime(2023, 6, 8, 10, 0),
    ]
    assert len(work) == 1


def test_copy_to_unknown_calendar(registry, meeting):
    """Test that copying into a missing calendar fails."""
    registry.create_calendar("Work").add_event(meeting)

    with pytest.raises(NotFoundError, match="calendar not found"):
        registry.copy_events_on_date(date(2023, 5, 8), "Nowhere", date(2023, 5, 9))
