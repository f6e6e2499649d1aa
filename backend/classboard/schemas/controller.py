from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from classboard.core.config import Settings
from classboard.core.exceptions import ParseError
from classboard.schemas.event import MIN_DURATION_MINUTES
from classboard.services.time_arithmetic import time_to_minutes


class ControllerSettings(BaseModel):
    """Board-level knobs threaded into every editor and coordinator."""

    model_config = ConfigDict(frozen=True)

    step_duration_minutes: int = Field(default=30, ge=1, le=240)
    min_duration_minutes: int = Field(default=MIN_DURATION_MINUTES, ge=MIN_DURATION_MINUTES, le=24 * 60)
    required_gap_minutes: int = Field(default=0, ge=0, le=240)
    max_start_minutes: int = Field(default=23 * 60, ge=0, le=24 * 60)
    submit_time: str = "09:00"
    default_location: str = "Beach"
    duration_cap_one: int = Field(default=60, ge=MIN_DURATION_MINUTES)
    duration_cap_two: int = Field(default=90, ge=MIN_DURATION_MINUTES)
    duration_cap_three: int = Field(default=120, ge=MIN_DURATION_MINUTES)
    location_options: tuple[str, ...] = ("Beach", "Bay", "Lake", "River", "Pool", "Indoor")

    @field_validator("submit_time")
    @classmethod
    def validate_submit_time(cls, value: str) -> str:
        try:
            time_to_minutes(value)
        except ParseError as exc:
            raise ValueError("Time must be in HH:MM 24-hour format") from exc
        return value.strip()

    @model_validator(mode="after")
    def validate_duration_caps(self) -> "ControllerSettings":
        if not self.duration_cap_one <= self.duration_cap_two <= self.duration_cap_three:
            raise ValueError("Duration caps must not decrease with capacity")
        return self

    @property
    def submit_minutes(self) -> int:
        return time_to_minutes(self.submit_time)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ControllerSettings":
        return cls(
            step_duration_minutes=settings.step_duration_minutes,
            min_duration_minutes=settings.min_duration_minutes,
            required_gap_minutes=settings.required_gap_minutes,
            max_start_minutes=settings.max_start_minutes,
            submit_time=settings.submit_time,
            default_location=settings.default_location,
            duration_cap_one=settings.duration_cap_one,
            duration_cap_two=settings.duration_cap_two,
            duration_cap_three=settings.duration_cap_three,
            location_options=tuple(settings.location_options),
        )
