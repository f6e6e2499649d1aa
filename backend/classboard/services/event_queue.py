from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from datetime import date

from classboard.core.exceptions import NotFoundError, ValidationError
from classboard.schemas.event import Event, EventChange, EventRecord
from classboard.schemas.queue import CompactionPlan, QueueSummary
from classboard.services.gap_analyzer import is_contiguous
from classboard.services.time_arithmetic import MINUTES_PER_DAY, parse_day

logger = logging.getLogger(__name__)


class EventQueue:
    """Ordered lessons of one teacher on one day.

    Events live in a list addressed by position; ``next`` and ``previous``
    are index + 1 and index - 1. An id -> index map is rebuilt whenever the
    structure changes. The queue never reorders itself on a timing mutation;
    callers request positional moves explicitly.
    """

    def __init__(self, teacher_id: str, day: date, events: Iterable[Event] = ()) -> None:
        self.teacher_id = teacher_id
        self.day = day
        self._events: list[Event] = []
        self._index: dict[str, int] = {}
        for event in events:
            self.insert_at_tail(event)

    @classmethod
    def from_records(
        cls,
        teacher_id: str,
        records: Iterable[EventRecord | dict],
        *,
        day: date | None = None,
    ) -> "EventQueue":
        parsed = [
            record if isinstance(record, EventRecord) else EventRecord.model_validate(record)
            for record in records
        ]
        days = {parse_day(record.date) for record in parsed}
        if day is not None:
            days.add(day)
        if len(days) > 1:
            raise ValidationError(
                f"Queue for teacher {teacher_id} spans more than one day",
                details={"days": sorted(d.isoformat() for d in days)},
            )
        if not days:
            raise ValidationError(f"Queue for teacher {teacher_id} needs a day when it has no records")

        queue = cls(teacher_id, days.pop())
        for record in parsed:
            if record.teacher_id != teacher_id:
                raise ValidationError(
                    f"Event {record.id} belongs to teacher {record.teacher_id}, not {teacher_id}",
                )
            queue.insert_chronological(Event.from_record(record))
        return queue

    # ---- read access ----

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._index

    def all_events(self) -> list[Event]:
        """Head-to-tail list.

        The list is new on every call, so later relinking does not affect it,
        but the Event records are the queue's own: mutate them through an
        editor. Use ``snapshot`` for independent copies.
        """
        return list(self._events)

    def snapshot(self) -> list[Event]:
        return [event.model_copy(deep=True) for event in self._events]

    def ids(self) -> list[str]:
        return [event.id for event in self._events]

    def get(self, event_id: str) -> Event | None:
        position = self._index.get(event_id)
        return None if position is None else self._events[position]

    def require(self, event_id: str) -> Event:
        event = self.get(event_id)
        if event is None:
            raise NotFoundError("Event", event_id)
        return event

    def index_of(self, event_id: str) -> int | None:
        return self._index.get(event_id)

    def next_of(self, event_id: str) -> Event | None:
        position = self._index.get(event_id)
        if position is None or position + 1 >= len(self._events):
            return None
        return self._events[position + 1]

    def previous_of(self, event_id: str) -> Event | None:
        position = self._index.get(event_id)
        if position is None or position == 0:
            return None
        return self._events[position - 1]

    @property
    def head(self) -> Event | None:
        return self._events[0] if self._events else None

    @property
    def tail(self) -> Event | None:
        return self._events[-1] if self._events else None

    @property
    def earliest_start(self) -> int | None:
        head = self.head
        return None if head is None else head.start_minutes

    # ---- structure ----

    def insert_at_head(self, event: Event) -> None:
        self._check_insertable(event)
        self._events.insert(0, event)
        self._reindex()

    def insert_at_tail(self, event: Event) -> None:
        self._check_insertable(event)
        self._events.append(event)
        self._index[event.id] = len(self._events) - 1

    def insert_chronological(self, event: Event) -> None:
        self._check_insertable(event)
        position = len(self._events)
        for i, existing in enumerate(self._events):
            if event.start_minutes < existing.start_minutes:
                position = i
                break
        self._events.insert(position, event)
        self._reindex()

    def remove_by_id(self, event_id: str) -> Event | None:
        position = self._index.get(event_id)
        if position is None:
            return None
        removed = self._events.pop(position)
        self._reindex()
        return removed

    def rebuild_from_order(self, events: Iterable[Event]) -> None:
        ordered = list(events)
        current = {id(event) for event in self._events}
        proposed = {id(event) for event in ordered}
        if len(ordered) != len(self._events) or current != proposed:
            raise ValidationError(
                f"Rebuild for teacher {self.teacher_id} must reuse exactly the queued events",
                details={"expected": self.ids(), "received": [event.id for event in ordered]},
            )
        self._events = ordered
        self._reindex()

    def confirm_id(self, provisional_id: str, persisted_id: str) -> Event | None:
        """Swap a placeholder id for the id the server assigned."""
        position = self._index.get(provisional_id)
        if position is None:
            return None
        if persisted_id != provisional_id and persisted_id in self._index:
            raise ValidationError(f"Event id {persisted_id} already queued for teacher {self.teacher_id}")
        event = self._events[position]
        event.id = persisted_id
        event.provisional = False
        del self._index[provisional_id]
        self._index[persisted_id] = position
        return event

    # ---- timing ----

    def contiguous_chain(self, event_id: str) -> list[Event]:
        """The event plus every follower reachable through zero-gap edges."""
        position = self._index.get(event_id)
        if position is None:
            return []
        chain = [self._events[position]]
        for follower in self._events[position + 1:]:
            if not is_contiguous(chain[-1], follower):
                break
            chain.append(follower)
        return chain

    def cascade_shift(self, event_id: str, delta_minutes: int) -> list[Event]:
        """Shift the event and its zero-gap chain by ``delta_minutes``.

        The chain is resolved before anything moves and then shifted in full,
        so a follower that becomes contiguous mid-walk is never picked up and
        the walk never stops early.
        """
        chain = self.contiguous_chain(event_id)
        if delta_minutes == 0:
            return []
        for event in chain:
            event.start_minutes += delta_minutes
        return chain

    def is_optimised(self, gap_minutes: int) -> bool:
        for previous, current in zip(self._events, self._events[1:]):
            if current.start_minutes - previous.end_minutes != gap_minutes:
                return False
        return True

    def plan_compaction(self, start_minutes: int, gap_minutes: int, *, from_index: int = 0) -> CompactionPlan:
        """Pack events back to back from ``start_minutes`` without mutating them.

        Events whose packed start would reach midnight are reported as skipped
        and left where they are.
        """
        updates: list[EventChange] = []
        skipped: list[str] = []
        cursor = start_minutes
        for event in self._events[from_index:]:
            if cursor >= MINUTES_PER_DAY:
                skipped.append(event.id)
                continue
            if event.start_minutes != cursor:
                updates.append(
                    EventChange(
                        event_id=event.id,
                        start_minutes=cursor,
                        duration_minutes=event.duration_minutes,
                    )
                )
            cursor += event.duration_minutes + gap_minutes
        if skipped:
            logger.warning(
                "Compaction skipped events past midnight | teacher_id=%s skipped=%s",
                self.teacher_id,
                skipped,
            )
        return CompactionPlan(updates=updates, skipped=skipped)

    def apply_changes(self, changes: Iterable[EventChange]) -> list[Event]:
        touched: list[Event] = []
        for change in changes:
            event = self.get(change.event_id)
            if event is None:
                continue
            event.start_minutes = change.start_minutes
            event.duration_minutes = change.duration_minutes
            if change.location is not None:
                event.location = change.location
            touched.append(event)
        return touched

    def sort_by_start(self) -> None:
        self._events.sort(key=lambda event: event.start_minutes)
        self._reindex()

    def summary(self) -> QueueSummary:
        total_minutes = sum(event.duration_minutes for event in self._events)
        return QueueSummary(
            event_count=len(self._events),
            total_minutes=total_minutes,
            total_hours=round(total_minutes / 60, 2),
            status_counts=dict(Counter(event.status for event in self._events)),
        )

    # ---- internals ----

    def _check_insertable(self, event: Event) -> None:
        if event.id in self._index:
            raise ValidationError(
                f"Event id {event.id} already queued for teacher {self.teacher_id}",
                details={"event_id": event.id},
            )
        if event.teacher_id != self.teacher_id:
            raise ValidationError(
                f"Event {event.id} belongs to teacher {event.teacher_id}, not {self.teacher_id}",
                details={"event_id": event.id},
            )

    def _reindex(self) -> None:
        self._index = {event.id: position for position, event in enumerate(self._events)}
