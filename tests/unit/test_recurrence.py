"""Tests for recurring definitions and their expansion."""

from datetime import UTC, date, datetime, time, timedelta

import pytest

from py_calendar.calendar import (
    ByCount,
    ByEndDate,
    RecurrenceDefinition,
    format_weekdays,
    parse_weekdays,
    termination_from,
)
from py_calendar.errors import ValidationError

MONDAY_9 = datetime(2023, 5, 8, 9, 0)
MONDAY_10 = datetime(2023, 5, 8, 10, 0)


def test_parse_weekdays():
    """Test decoding of weekday letter codes."""
    assert parse_weekdays("MWF") == frozenset({0, 2, 4})
    assert parse_weekdays("tr") == frozenset({1, 3})
    assert parse_weekdays("S, U") == frozenset({5, 6})
    assert parse_weekdays("") == frozenset()


def test_parse_weekdays_unknown_letter():
    """Test that unknown weekday letters are rejected."""
    with pytest.raises(ValidationError, match="invalid weekday code"):
        parse_weekdays("MX")


def test_format_weekdays():
    """Test encoding of weekday numbers."""
    assert format_weekdays({4, 0, 2}) == "MWF"
    assert format_weekdays(range(7)) == "MTWRFSU"


def test_termination_from():
    """Test that exactly one termination argument is accepted."""
    assert termination_from(count=3) == ByCount(3)
    assert termination_from(until=date(2023, 6, 1)) == ByEndDate(date(2023, 6, 1))

    with pytest.raises(ValidationError, match="both"):
        termination_from(count=3, until=date(2023, 6, 1))
    with pytest.raises(ValidationError, match="either"):
        termination_from()


def test_count_must_be_positive():
    """Test that a zero or negative count is rejected."""
    with pytest.raises(ValidationError, match="positive"):
        RecurrenceDefinition.create("Gym", MONDAY_9, MONDAY_10, "MWF", count=0)


def test_weekdays_required():
    """Test that a definition needs at least one weekday."""
    with pytest.raises(ValidationError, match="repeat days cannot be empty"):
        RecurrenceDefinition.create("Gym", MONDAY_9, MONDAY_10, "", count=3)


def test_end_date_must_follow_start():
    """Test that the end date must be after the start date."""
    with pytest.raises(ValidationError, match="end date must be after start date"):
        RecurrenceDefinition.create("Gym", MONDAY_9, MONDAY_10, "MWF", until=date(2023, 5, 8))
    with pytest.raises(ValidationError, match="end date must be after start date"):
        RecurrenceDefinition.create("Gym", MONDAY_9, MONDAY_10, "MWF", until=date(2023, 5, 1))


def test_template_end_before_start():
    """Test that the template span cannot be inverted."""
    with pytest.raises(ValidationError, match="template end"):
        RecurrenceDefinition.create("Gym", MONDAY_10, MONDAY_9, "MWF", count=3)


def test_mwf_count_three():
    """Test that MWF from Monday 2023-05-08 with count 3 lands on Mon, Wed, Fri."""
    definition = RecurrenceDefinition.create("Class", MONDAY_9, MONDAY_10, "MWF", count=3)

    occurrences = definition.expand()

    assert [e.start_date for e in occurrences] == [
        date(2023, 5, 8),
        date(2023, 5, 10),
        date(2023, 5, 12),
    ]
    for event in occurrences:
        assert event.start.time() == MONDAY_9.time()
        assert event.end - event.start == timedelta(hours=1)
        assert event.series_id == definition.series_id
        assert event.subject == "Class"
    assert definition.count == 3
    assert definition.until is None


def test_end_date_is_inclusive():
    """Test that an occurrence on the end date itself is produced."""
    definition = RecurrenceDefinition.create("Class", MONDAY_9, MONDAY_10, "MWF", until=date(2023, 5, 15))

    starts = [s.date() for s in definition.occurrence_starts()]

    assert starts == [date(2023, 5, 8), date(2023, 5, 10), date(2023, 5, 12), date(2023, 5, 15)]
    assert definition.until == date(2023, 5, 15)
    assert definition.count is None


def test_start_on_unselected_weekday():
    """Test that the template start date is skipped when it is not a selected weekday."""
    tuesday = datetime(2023, 5, 9, 9, 0)
    definition = RecurrenceDefinition.create("Review", tuesday, tuesday + timedelta(hours=1), "M", count=2)

    assert [s.date() for s in definition.occurrence_starts()] == [date(2023, 5, 15), date(2023, 5, 22)]


def test_expansion_is_deterministic():
    """Test that two expansions produce the same sequence with fresh ids."""
    definition = RecurrenceDefinition.create("Class", MONDAY_9, MONDAY_10, "TR", count=5)

    first = definition.expand()
    second = definition.expand()

    assert [(e.start, e.end) for e in first] == [(e.start, e.end) for e in second]
    assert {e.id for e in first}.isdisjoint(e.id for e in second)


def test_all_day_series():
    """Test all-day series normalization."""
    definition = RecurrenceDefinition.all_day_series("Holiday", date(2023, 5, 13), "SU", count=2)

    occurrences = definition.expand()

    assert [e.start_date for e in occurrences] == [date(2023, 5, 13), date(2023, 5, 14)]
    for event in occurrences:
        assert event.all_day
        assert event.end == datetime.combine(event.start_date, time(23, 59, 59))


def test_multi_day_template_keeps_duration():
    """Test that occurrences keep the template's length across midnight."""
    start = datetime(2023, 5, 12, 22, 0)
    definition = RecurrenceDefinition.create("Night shift", start, start + timedelta(hours=8), "F", count=2)

    occurrences = definition.expand()

    assert occurrences[1].start == datetime(2023, 5, 19, 22, 0)
    assert occurrences[1].end == datetime(2023, 5, 20, 6, 0)


def test_bool_count_rejected():
    """Test that a boolean is not accepted as an occurrence count."""
    with pytest.raises(ValidationError, match="positive"):
        ByCount(True)


def test_aware_template_rejected():
    """Test that recurring templates are built from wall-clock times only."""
    with pytest.raises(ValidationError, match="without UTC offset"):
        RecurrenceDefinition.create(
            "Gym", MONDAY_9.replace(tzinfo=UTC), MONDAY_10.replace(tzinfo=UTC), "MWF", count=3
        )


def test_no_selected_weekday_before_end_date():
    """Test that a bound reached before any selected weekday yields no occurrences."""
    definition = RecurrenceDefinition.create("Gym", MONDAY_9, MONDAY_10, "F", until=date(2023, 5, 9))

    assert definition.expand() == []
