from __future__ import annotations

import logging

from classboard.schemas.controller import ControllerSettings
from classboard.schemas.queue import InsertionPosition, InsertionSlot
from classboard.services.event_queue import EventQueue
from classboard.services.gap_analyzer import overlaps
from classboard.services.time_arithmetic import MINUTES_PER_DAY

logger = logging.getLogger(__name__)


def find_insertion_slot(
    queue: EventQueue,
    anchor_minutes: int,
    duration_minutes: int,
    required_gap_minutes: int,
) -> InsertionSlot:
    """Pick where a new lesson goes: before the head or after the tail.

    The middle of the queue is never searched. When the anchor is taken, or
    sits between events, the slot falls back to the tail end plus the gap
    even if that runs past midnight; check ``fits_in_day`` on the result.
    """
    events = queue.all_events()
    if not events:
        return InsertionSlot(time=anchor_minutes, position=InsertionPosition.tail, duration_minutes=duration_minutes)

    anchor_end = anchor_minutes + duration_minutes
    anchor_free = not any(
        overlaps(anchor_minutes, anchor_end, event.start_minutes, event.end_minutes) for event in events
    )
    first = events[0]
    last = events[-1]

    if (
        anchor_free
        and anchor_minutes < first.start_minutes
        and first.start_minutes - anchor_end >= required_gap_minutes
    ):
        return InsertionSlot(time=anchor_minutes, position=InsertionPosition.head, duration_minutes=duration_minutes)

    if (
        anchor_free
        and anchor_minutes >= last.end_minutes + required_gap_minutes
        and anchor_end <= MINUTES_PER_DAY
    ):
        return InsertionSlot(time=anchor_minutes, position=InsertionPosition.tail, duration_minutes=duration_minutes)

    fallback = last.end_minutes + required_gap_minutes
    logger.debug(
        "Anchor %s unavailable for teacher %s; appending at %s",
        anchor_minutes,
        queue.teacher_id,
        fallback,
    )
    return InsertionSlot(time=fallback, position=InsertionPosition.tail, duration_minutes=duration_minutes)


def duration_for_capacity(capacity: int, settings: ControllerSettings) -> int:
    """Default lesson length for a booking with ``capacity`` students."""
    if capacity <= 1:
        return settings.duration_cap_one
    if capacity == 2:
        return settings.duration_cap_two
    return settings.duration_cap_three
