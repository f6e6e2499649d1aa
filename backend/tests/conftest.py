from datetime import date

import pytest

from classboard.core.config import get_settings
from classboard.schemas.controller import ControllerSettings
from classboard.schemas.event import Event
from classboard.services.event_queue import EventQueue
from classboard.services.time_arithmetic import time_to_minutes

BOARD_DAY = date(2024, 6, 1)


@pytest.fixture()
def day():
    return BOARD_DAY


@pytest.fixture()
def settings():
    return ControllerSettings()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def make_queue():
    # rows are (id, "HH:MM", duration) with an optional trailing location
    def _make(rows, teacher_id="t1"):
        queue = EventQueue(teacher_id, BOARD_DAY)
        for row in rows:
            event_id, start, duration, *rest = row
            queue.insert_at_tail(
                Event(
                    id=event_id,
                    teacher_id=teacher_id,
                    start_minutes=time_to_minutes(start),
                    duration_minutes=duration,
                    location=rest[0] if rest else "Beach",
                )
            )
        return queue

    return _make


@pytest.fixture()
def change_counter():
    calls = []

    def on_change():
        calls.append(1)

    on_change.calls = calls
    return on_change
