from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TimeLockStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_synchronized: bool
    lock_count: int
    total_teachers: int


class LocationLockStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_synchronized: bool
    synchronized_events: int
    total_events: int
    synchronized_teachers: int
    total_teachers: int


class OptimisationStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    optimised: int
    total: int
