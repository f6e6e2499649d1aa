from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from classboard.services.time_arithmetic import to_iso, to_minutes

MIN_DURATION_MINUTES = 30


class EventStatus(str, Enum):
    planned = "planned"
    tbc = "tbc"
    completed = "completed"
    uncompleted = "uncompleted"

    @property
    def is_open(self) -> bool:
        return self in OPEN_STATUSES


OPEN_STATUSES = frozenset({EventStatus.planned, EventStatus.tbc})


class EventRecord(BaseModel):
    """Persisted lesson event as handed over by the storage layer."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1, max_length=64)
    teacher_id: str = Field(alias="teacherId", min_length=1, max_length=64)
    date: str
    duration: int = Field(ge=MIN_DURATION_MINUTES, le=24 * 60)
    location: str = ""
    status: EventStatus = EventStatus.planned


class Event(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(min_length=1, max_length=64)
    teacher_id: str = Field(min_length=1, max_length=64)
    start_minutes: int
    duration_minutes: int = Field(ge=MIN_DURATION_MINUTES)
    location: str = ""
    status: EventStatus = EventStatus.planned
    provisional: bool = False

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @property
    def within_day(self) -> bool:
        return self.start_minutes >= 0 and self.end_minutes <= 24 * 60

    @classmethod
    def from_record(cls, record: EventRecord | dict) -> "Event":
        if isinstance(record, dict):
            record = EventRecord.model_validate(record)
        return cls(
            id=record.id,
            teacher_id=record.teacher_id,
            start_minutes=to_minutes(record.date),
            duration_minutes=record.duration,
            location=record.location,
            status=record.status,
        )


class EventChange(BaseModel):
    """One event's new timing, ready for the persistence layer."""

    model_config = ConfigDict(frozen=True)

    event_id: str
    start_minutes: int
    duration_minutes: int
    location: str | None = None

    @classmethod
    def from_event(cls, event: Event) -> "EventChange":
        return cls(
            event_id=event.id,
            start_minutes=event.start_minutes,
            duration_minutes=event.duration_minutes,
            location=event.location,
        )

    def to_record_update(self, day: date) -> dict:
        update = {
            "id": self.event_id,
            "date": to_iso(day, self.start_minutes),
            "duration": self.duration_minutes,
        }
        if self.location is not None:
            update["location"] = self.location
        return update
