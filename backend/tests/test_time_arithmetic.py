from datetime import date, datetime

import pytest

from classboard.core.exceptions import ParseError, ValidationError
from classboard.services.time_arithmetic import (
    add_minutes,
    minutes_to_time,
    parse_day,
    time_to_minutes,
    to_datetime,
    to_iso,
    to_minutes,
)


def test_time_to_minutes_parses_24h_clock():
    assert time_to_minutes("00:00") == 0
    assert time_to_minutes("09:30") == 570
    assert time_to_minutes(" 23:59 ") == 1439


@pytest.mark.parametrize("value", ["24:00", "9:30", "09:60", "nine", "", None])
def test_time_to_minutes_rejects_malformed_values(value):
    with pytest.raises(ParseError) as exc_info:
        time_to_minutes(value)
    assert exc_info.value.status_code == 400


def test_minutes_to_time_pads_hours_and_minutes():
    assert minutes_to_time(0) == "00:00"
    assert minutes_to_time(570) == "09:30"
    assert minutes_to_time(1380) == "23:00"


def test_to_minutes_reads_wall_clock_from_iso_strings():
    assert to_minutes("2024-06-01T10:15:00") == 615
    assert to_minutes("2024-06-01T10:15:00Z") == 615
    assert to_minutes("2024-06-01T10:15:00+02:00") == 615
    assert to_minutes("10:15") == 615
    assert to_minutes(datetime(2024, 6, 1, 7, 5)) == 425


@pytest.mark.parametrize("value", ["2024-06-01", "2024-06-01Tlater", "garbage-T-value", 42])
def test_to_minutes_propagates_parse_errors(value):
    with pytest.raises(ParseError):
        to_minutes(value)


def test_to_datetime_composes_day_and_offset():
    assert to_datetime(date(2024, 6, 1), 615) == datetime(2024, 6, 1, 10, 15)
    assert to_datetime(date(2024, 6, 1), 0) == datetime(2024, 6, 1, 0, 0)


@pytest.mark.parametrize("minutes", [-1, 1440, 2000])
def test_to_datetime_has_no_day_rollover(minutes):
    with pytest.raises(ValidationError):
        to_datetime(date(2024, 6, 1), minutes)


def test_add_minutes_is_a_pure_shift():
    start = datetime(2024, 6, 1, 10, 0)
    assert add_minutes(start, 45) == datetime(2024, 6, 1, 10, 45)
    assert add_minutes(start, -90) == datetime(2024, 6, 1, 8, 30)
    assert start == datetime(2024, 6, 1, 10, 0)


def test_to_iso_and_parse_day():
    assert to_iso(date(2024, 6, 1), 615) == "2024-06-01T10:15:00"
    assert parse_day("2024-06-01T10:15:00") == date(2024, 6, 1)
    assert parse_day("2024-06-01") == date(2024, 6, 1)
    with pytest.raises(ParseError):
        parse_day("June 1st")
