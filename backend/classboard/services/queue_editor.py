from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from classboard.schemas.controller import ControllerSettings
from classboard.schemas.event import Event, EventChange, EventStatus
from classboard.schemas.queue import (
    EventCardState,
    InsertionPosition,
    RemovalResult,
    ReorderDirection,
)
from classboard.services.event_queue import EventQueue
from classboard.services.gap_analyzer import classify_before, is_contiguous
from classboard.services.slot_finder import duration_for_capacity, find_insertion_slot
from classboard.services.time_arithmetic import minutes_to_time

logger = logging.getLogger(__name__)


def _changes(events: Iterable[Event]) -> list[EventChange]:
    return [EventChange.from_event(event) for event in events]


class QueueEditor:
    """Mutation API for one teacher's queue.

    Every timing edit returns the change set the caller should persist; an
    empty list means nothing happened. Unknown ids and refused moves are
    silent no-ops, except for ``remove_with_cascade`` which raises
    ``NotFoundError`` so the caller never issues a delete for a stale view.
    """

    def __init__(
        self,
        queue: EventQueue,
        settings: ControllerSettings,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.queue = queue
        self.settings = settings
        self.on_change = on_change

    @property
    def teacher_id(self) -> str:
        return self.queue.teacher_id

    # ---- guards ----

    def can_move_earlier(self, event_id: str) -> bool:
        event = self.queue.get(event_id)
        if event is None:
            return False
        new_start = event.start_minutes - self.settings.step_duration_minutes
        previous = self.queue.previous_of(event_id)
        if previous is None:
            return new_start >= 0
        return new_start >= previous.end_minutes

    def can_move_later(self, event_id: str) -> bool:
        """Start must be before ``max_start_minutes``.

        The step must also leave the event's zero-gap chain at or before the
        next event it is not attached to, so start order never breaks.
        """
        event = self.queue.get(event_id)
        if event is None:
            return False
        if event.start_minutes >= self.settings.max_start_minutes:
            return False
        return self._chain_clears_follower(event_id, self.settings.step_duration_minutes)

    # ---- single event timing ----

    def move_earlier(self, event_id: str) -> list[EventChange]:
        if not self.can_move_earlier(event_id):
            logger.debug("Move earlier refused for event %s of teacher %s", event_id, self.teacher_id)
            return []
        shifted = self.queue.cascade_shift(event_id, -self.settings.step_duration_minutes)
        return self._commit(_changes(shifted))

    def move_later(self, event_id: str) -> list[EventChange]:
        if not self.can_move_later(event_id):
            logger.debug("Move later refused for event %s of teacher %s", event_id, self.teacher_id)
            return []
        shifted = self.queue.cascade_shift(event_id, self.settings.step_duration_minutes)
        return self._commit(_changes(shifted))

    def resize(self, event_id: str, grow: bool) -> list[EventChange]:
        event = self.queue.get(event_id)
        if event is None:
            logger.debug("Resize skipped for unknown event %s of teacher %s", event_id, self.teacher_id)
            return []

        step = self.settings.step_duration_minutes
        current = event.duration_minutes
        if grow:
            target = current + step
        else:
            floor = min(current, self.settings.min_duration_minutes)
            target = max(floor, current - step)
        delta = target - current
        if delta == 0:
            logger.debug("Resize of event %s already at the %s minute floor", event_id, current)
            return []

        follower = self.queue.next_of(event_id)
        cascade = follower is not None and is_contiguous(event, follower)
        if cascade and delta > 0 and not self._chain_clears_follower(follower.id, delta):
            logger.debug("Resize of event %s would push its chain past the next event", event_id)
            return []
        event.duration_minutes = target
        touched = [event]
        if cascade:
            touched.extend(self.queue.cascade_shift(follower.id, delta))
        return self._commit(_changes(touched))

    def close_gap_before(self, event_id: str) -> list[EventChange]:
        event = self.queue.get(event_id)
        previous = self.queue.previous_of(event_id)
        if event is None or previous is None:
            return []
        gap = event.start_minutes - previous.end_minutes
        if gap <= 0:
            return []
        shifted = self.queue.cascade_shift(event_id, -gap)
        return self._commit(_changes(shifted))

    def add_gap_before(self, event_id: str) -> list[EventChange]:
        """Push the event later until it clears the required gap."""
        event = self.queue.get(event_id)
        previous = self.queue.previous_of(event_id)
        if event is None or previous is None:
            return []
        gap = event.start_minutes - previous.end_minutes
        required = self.settings.required_gap_minutes
        if gap >= required:
            return []
        shifted = self.queue.cascade_shift(event_id, required - gap)
        return self._commit(_changes(shifted))

    # ---- positional edits ----

    def reorder(self, event_id: str, direction: ReorderDirection | str) -> list[EventChange]:
        """Swap with a neighbour and restack from the earlier slot.

        The restack walks forward stacking events back to back and stops at the
        first event that already starts after the running end, so gaps beyond
        the swap are kept.
        """
        direction = ReorderDirection(direction)
        position = self.queue.index_of(event_id)
        if position is None:
            return []
        other = position - 1 if direction == ReorderDirection.up else position + 1
        if other < 0 or other >= len(self.queue):
            logger.debug("Reorder %s of event %s is at the queue boundary", direction.value, event_id)
            return []

        events = self.queue.all_events()
        low = min(position, other)
        cursor = events[low].start_minutes
        events[position], events[other] = events[other], events[position]
        self.queue.rebuild_from_order(events)

        touched: list[Event] = []
        for index in range(low, len(events)):
            event = events[index]
            if index > low and event.start_minutes > cursor:
                break
            if event.start_minutes != cursor:
                event.start_minutes = cursor
                touched.append(event)
            cursor = event.end_minutes

        changes = _changes(touched)
        self._notify()
        return changes

    def remove_with_cascade(self, event_id: str) -> RemovalResult:
        """Remove the event and pack every later event back to back.

        Raises ``NotFoundError`` when the event is not queued.
        """
        removed = self.queue.require(event_id)
        position = self.queue.index_of(event_id)
        self.queue.remove_by_id(event_id)

        plan = self.queue.plan_compaction(removed.start_minutes, 0, from_index=position)
        touched = self.queue.apply_changes(plan.updates)

        logger.debug(
            "Removed event %s of teacher %s; restacked %d event(s)",
            event_id,
            self.teacher_id,
            len(touched),
        )
        self._notify()
        return RemovalResult(removed=removed, updates=_changes(touched))

    # ---- location ----

    def set_location(self, event_id: str, location: str) -> list[EventChange]:
        event = self.queue.get(event_id)
        if event is None or event.location == location:
            return []
        event.location = location
        return self._commit(_changes([event]))

    def set_all_locations(self, location: str) -> list[EventChange]:
        touched = []
        for event in self.queue.all_events():
            if event.location != location:
                event.location = location
                touched.append(event)
        return self._commit(_changes(touched))

    # ---- bulk ----

    def set_first_event_time(self, start_minutes: int) -> list[EventChange]:
        """Re-anchor the queue so the head starts at ``start_minutes``.

        Events attached to the head by zero-gap edges move along; events after
        the first gap stay put.
        """
        head = self.queue.head
        if head is None:
            return []
        delta = start_minutes - head.start_minutes
        if delta == 0:
            return []
        shifted = self.queue.cascade_shift(head.id, delta)
        return self._commit(_changes(shifted))

    def is_optimised(self) -> bool:
        return self.queue.is_optimised(self.settings.required_gap_minutes)

    def optimise(self) -> list[str]:
        """Pack the whole queue from the head's start with the required gap."""
        head = self.queue.head
        if head is None:
            return []
        plan = self.queue.plan_compaction(head.start_minutes, self.settings.required_gap_minutes)
        touched = self.queue.apply_changes(plan.updates)
        self.queue.sort_by_start()
        if touched:
            logger.info(
                "Optimised queue | teacher_id=%s start=%s moved=%s skipped=%s",
                self.teacher_id,
                minutes_to_time(head.start_minutes),
                len(touched),
                len(plan.skipped),
            )
            self._notify()
        return [event.id for event in touched]

    # ---- rendering and scheduling ----

    def describe(self, event_id: str) -> EventCardState | None:
        position = self.queue.index_of(event_id)
        if position is None:
            return None
        events = self.queue.all_events()
        return EventCardState(
            event=events[position],
            index=position,
            gap=classify_before(events, position, self.settings.required_gap_minutes),
            is_first=position == 0,
            is_last=position == len(events) - 1,
            can_move_earlier=self.can_move_earlier(event_id),
            can_move_later=self.can_move_later(event_id),
        )

    def schedule(
        self,
        event_id: str,
        duration_minutes: int | None = None,
        *,
        anchor_minutes: int | None = None,
        capacity: int = 1,
        location: str | None = None,
        status: EventStatus = EventStatus.planned,
        provisional: bool = True,
    ) -> Event:
        """Insert a new lesson at the slot picked for the anchor time.

        The id comes from the caller; pass ``provisional=True`` for a placeholder
        and swap it later with ``EventQueue.confirm_id``.
        """
        if duration_minutes is None:
            duration_minutes = duration_for_capacity(capacity, self.settings)
        anchor = self.settings.submit_minutes if anchor_minutes is None else anchor_minutes
        slot = find_insertion_slot(self.queue, anchor, duration_minutes, self.settings.required_gap_minutes)
        if not slot.fits_in_day:
            logger.warning(
                "Event %s for teacher %s runs past midnight at %s",
                event_id,
                self.teacher_id,
                minutes_to_time(slot.time),
            )

        event = Event(
            id=event_id,
            teacher_id=self.teacher_id,
            start_minutes=slot.time,
            duration_minutes=duration_minutes,
            location=self.settings.default_location if location is None else location,
            status=status,
            provisional=provisional,
        )
        if slot.position == InsertionPosition.head:
            self.queue.insert_at_head(event)
        else:
            self.queue.insert_at_tail(event)
        self._notify()
        return event

    # ---- internals ----

    def _chain_clears_follower(self, event_id: str, delta: int) -> bool:
        """True when shifting the zero-gap chain from ``event_id`` later by
        ``delta`` keeps it at or before the next event it is not attached to."""
        chain = self.queue.contiguous_chain(event_id)
        follower = self.queue.next_of(chain[-1].id)
        if follower is None:
            return True
        return chain[-1].start_minutes + delta <= follower.start_minutes

    def _commit(self, changes: list[EventChange]) -> list[EventChange]:
        if changes:
            self._notify()
        return changes

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
