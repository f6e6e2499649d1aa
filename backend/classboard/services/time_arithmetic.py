from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

from classboard.core.exceptions import ParseError, ValidationError

MINUTES_PER_DAY = 24 * 60

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def time_to_minutes(value: str) -> int:
    if not isinstance(value, str):
        raise ParseError(value, expected="HH:MM time")
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ParseError(value, expected="HH:MM time")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(value: int) -> str:
    hours = value // 60
    minutes = value % 60
    return f"{hours:02d}:{minutes:02d}"


def parse_datetime(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or "T" not in value:
        raise ParseError(value)
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ParseError(value) from exc


def parse_day(value: str | date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ParseError(value, expected="ISO date")
    head = value.strip().split("T", 1)[0]
    try:
        return date.fromisoformat(head)
    except ValueError as exc:
        raise ParseError(value, expected="ISO date") from exc


def to_minutes(value: str | datetime) -> int:
    """Minutes since midnight of the wall-clock time carried by ``value``.

    Accepts an ISO date-time string, a bare ``HH:MM`` string or a datetime.
    The offset of an aware value is ignored; the calendar day is assumed to
    be resolved already.
    """
    if isinstance(value, str) and "T" not in value:
        return time_to_minutes(value)
    moment = parse_datetime(value)
    return moment.hour * 60 + moment.minute


def to_datetime(day: date, minutes: int) -> datetime:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValidationError(
            f"Minutes offset {minutes} is outside the day",
            details={"minutes": minutes, "day": day.isoformat()},
        )
    return datetime.combine(day, time(hour=minutes // 60, minute=minutes % 60))


def add_minutes(value: datetime, delta: int) -> datetime:
    return value + timedelta(minutes=delta)


def to_iso(day: date, minutes: int) -> str:
    return to_datetime(day, minutes).strftime("%Y-%m-%dT%H:%M:%S")
