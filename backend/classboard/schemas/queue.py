from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from classboard.schemas.event import Event, EventChange, EventStatus


class GapState(str, Enum):
    overlap = "overlap"
    exact = "exact"
    gap = "gap"


class GapReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: GapState
    magnitude_minutes: int = Field(ge=0)
    actual_gap_minutes: int
    required_gap_minutes: int

    @property
    def adjustment_minutes(self) -> int:
        """Signed shift that would bring the later event to the required gap."""
        return self.required_gap_minutes - self.actual_gap_minutes


class InsertionPosition(str, Enum):
    head = "head"
    tail = "tail"


class InsertionSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: int
    position: InsertionPosition
    duration_minutes: int

    @property
    def fits_in_day(self) -> bool:
        return 0 <= self.time and self.time + self.duration_minutes <= 24 * 60


class ReorderDirection(str, Enum):
    up = "up"
    down = "down"


class CompactionPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    updates: list[EventChange] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)


class RemovalResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    removed: Event
    updates: list[EventChange] = Field(default_factory=list)


class EventCardState(BaseModel):
    """Everything a card needs to render one event's controls."""

    model_config = ConfigDict(frozen=True)

    event: Event
    index: int
    gap: GapReport | None
    is_first: bool
    is_last: bool
    can_move_earlier: bool
    can_move_later: bool


class QueueSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_count: int
    total_minutes: int
    total_hours: float
    status_counts: dict[EventStatus, int] = Field(default_factory=dict)
