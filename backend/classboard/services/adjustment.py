from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from classboard.core.exceptions import NotFoundError
from classboard.schemas.adjustment import LocationLockStatus, OptimisationStats, TimeLockStatus
from classboard.schemas.controller import ControllerSettings
from classboard.schemas.event import Event, EventChange
from classboard.services.event_queue import EventQueue
from classboard.services.queue_editor import QueueEditor
from classboard.services.time_arithmetic import minutes_to_time

logger = logging.getLogger(__name__)


@dataclass
class AdjustmentSession:
    pending_teacher_ids: set[str] = field(default_factory=set)
    snapshots: dict[str, list[Event]] = field(default_factory=dict)
    is_locked: bool = False
    is_location_locked: bool = False
    target_time: int | None = None
    target_location: str | None = None


class GlobalAdjustmentCoordinator:
    """Batch time and location edits across the teachers of one board day.

    While a session is active the opted-in teachers can be moved together and
    their queues rolled back to the copies taken when they joined. Calls that
    need a session do nothing while idle.
    """

    def __init__(
        self,
        queues: Iterable[EventQueue],
        settings: ControllerSettings,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.queues: dict[str, EventQueue] = {queue.teacher_id: queue for queue in queues}
        self.settings = settings
        self.on_change = on_change
        self.session: AdjustmentSession | None = None

    # ---- state ----

    @property
    def is_active(self) -> bool:
        return self.session is not None

    @property
    def pending_teacher_ids(self) -> set[str]:
        return set(self.session.pending_teacher_ids) if self.session else set()

    @property
    def is_locked(self) -> bool:
        return bool(self.session and self.session.is_locked)

    @property
    def is_location_locked(self) -> bool:
        return bool(self.session and self.session.is_location_locked)

    @property
    def target_time(self) -> int | None:
        return self.session.target_time if self.session else None

    @property
    def target_location(self) -> str | None:
        return self.session.target_location if self.session else None

    def editor_for(self, teacher_id: str) -> QueueEditor:
        queue = self.queues.get(teacher_id)
        if queue is None:
            raise NotFoundError("Teacher queue", teacher_id)
        return QueueEditor(queue, self.settings, on_change=self.on_change)

    # ---- lifecycle ----

    def enter_adjustment_mode(self) -> bool:
        if self.session is not None:
            logger.debug("Adjustment mode already active")
            return False

        pending = [teacher_id for teacher_id, queue in self.queues.items() if len(queue)]
        if not pending:
            logger.debug("No teacher has events; adjustment mode not entered")
            return False

        session = AdjustmentSession(
            pending_teacher_ids=set(pending),
            snapshots={teacher_id: self.queues[teacher_id].snapshot() for teacher_id in pending},
        )
        session.target_time = min(self.queues[teacher_id].earliest_start for teacher_id in pending)
        session.target_location = self._most_frequent_location(pending)
        session.is_locked = all(
            self.queues[teacher_id].earliest_start == session.target_time for teacher_id in pending
        )
        session.is_location_locked = session.target_location is not None and all(
            event.location == session.target_location
            for teacher_id in pending
            for event in self.queues[teacher_id]
        )
        self.session = session

        logger.info(
            "Entered adjustment mode | teachers=%s target_time=%s target_location=%s locked=%s",
            len(pending),
            minutes_to_time(session.target_time),
            session.target_location,
            session.is_locked,
        )
        self._notify()
        return True

    def exit_adjustment_mode(self, discard: bool = False) -> None:
        if self.session is None:
            return
        if discard:
            self.discard()
        self.session = None
        logger.info("Exited adjustment mode | discarded=%s", discard)
        self._notify()

    def opt_in(self, teacher_id: str) -> bool:
        session = self.session
        if session is None or teacher_id not in self.queues or teacher_id in session.pending_teacher_ids:
            logger.debug("Opt-in skipped for teacher %s", teacher_id)
            return False
        session.pending_teacher_ids.add(teacher_id)
        session.snapshots[teacher_id] = self.queues[teacher_id].snapshot()
        self._notify()
        return True

    def opt_out(self, teacher_id: str) -> bool:
        """Drop a teacher from the batch; their edits so far stay in place."""
        session = self.session
        if session is None or teacher_id not in session.pending_teacher_ids:
            logger.debug("Opt-out skipped for teacher %s", teacher_id)
            return False
        session.pending_teacher_ids.discard(teacher_id)
        session.snapshots.pop(teacher_id, None)
        if not session.pending_teacher_ids:
            self.exit_adjustment_mode()
            return True
        self._notify()
        return True

    def discard(self) -> int:
        """Roll pending queues back to their snapshots.

        Start, duration and location are restored by id on events that are
        still queued. Events created after the snapshot are kept. Each queue is
        then re-sorted by start, keeping the current order among equal starts.
        Returns the number of events that changed.
        """
        if self.session is None:
            return 0
        restored = 0
        for teacher_id in self._pending_in_board_order():
            queue = self.queues[teacher_id]
            saved = {event.id: event for event in self.session.snapshots.get(teacher_id, [])}
            for event in queue:
                original = saved.get(event.id)
                if original is None:
                    continue
                if (
                    event.start_minutes != original.start_minutes
                    or event.duration_minutes != original.duration_minutes
                    or event.location != original.location
                ):
                    event.start_minutes = original.start_minutes
                    event.duration_minutes = original.duration_minutes
                    event.location = original.location
                    restored += 1
            queue.sort_by_start()
        if restored:
            logger.info("Discarded adjustments | events_restored=%s", restored)
            self._notify()
        return restored

    # ---- time ----

    def apply_time(self, new_time: int) -> list[EventChange]:
        """Re-anchor every pending teacher that starts at or before ``new_time``.

        Teachers whose first lesson is already later are left alone.
        """
        if self.session is None:
            logger.debug("apply_time ignored while idle")
            return []
        changes = self._apply_time(new_time)
        self._notify()
        return changes

    def adapt(self) -> bool:
        """Toggle the time lock and return the new state."""
        session = self.session
        if session is None:
            return False
        if session.is_locked:
            session.is_locked = False
        else:
            starts = [
                self.queues[teacher_id].earliest_start
                for teacher_id in session.pending_teacher_ids
                if len(self.queues[teacher_id])
            ]
            if starts:
                self._apply_time(min(starts))
            session.is_locked = True
        self._notify()
        return session.is_locked

    def lock_to_time(self, target_time: int) -> list[EventChange]:
        if self.session is None:
            return []
        changes = self._apply_time(target_time)
        self.session.is_locked = True
        self._notify()
        return changes

    def unlock_time(self) -> None:
        if self.session is None or not self.session.is_locked:
            return
        self.session.is_locked = False
        self._notify()

    # ---- location ----

    def apply_location(self, location: str) -> list[EventChange]:
        if self.session is None:
            logger.debug("apply_location ignored while idle")
            return []
        changes = self._apply_location(location)
        self._notify()
        return changes

    def lock_to_location(self, location: str) -> list[EventChange]:
        if self.session is None:
            return []
        changes = self._apply_location(location)
        self.session.is_location_locked = True
        self._notify()
        return changes

    def unlock_location(self) -> None:
        if self.session is None or not self.session.is_location_locked:
            return
        self.session.is_location_locked = False
        self._notify()

    # ---- diffs ----

    def collect_changes(self, include_location: bool = False) -> list[EventChange]:
        if self.session is None:
            return []
        changes: list[EventChange] = []
        for teacher_id in self._pending_in_board_order():
            changes.extend(self.collect_changes_for_teacher(teacher_id, include_location=include_location))
        return changes

    def collect_changes_for_teacher(self, teacher_id: str, include_location: bool = False) -> list[EventChange]:
        if self.session is None or teacher_id not in self.session.snapshots:
            return []
        saved = {event.id: event for event in self.session.snapshots[teacher_id]}
        changes = []
        for event in self.queues[teacher_id]:
            original = saved.get(event.id)
            if original is None:
                continue
            timing_changed = (
                event.start_minutes != original.start_minutes
                or event.duration_minutes != original.duration_minutes
            )
            location_changed = event.location != original.location
            if timing_changed or (include_location and location_changed):
                changes.append(
                    EventChange(
                        event_id=event.id,
                        start_minutes=event.start_minutes,
                        duration_minutes=event.duration_minutes,
                        location=event.location if include_location else None,
                    )
                )
        return changes

    def collect_deletions(self) -> list[str]:
        """Ids present in a snapshot but no longer queued."""
        if self.session is None:
            return []
        removed = []
        for teacher_id in self._pending_in_board_order():
            queue = self.queues[teacher_id]
            removed.extend(
                event.id for event in self.session.snapshots.get(teacher_id, []) if event.id not in queue
            )
        return removed

    def has_changes(self) -> bool:
        return bool(self.collect_changes(include_location=True) or self.collect_deletions())

    def time_difference(self, teacher_id: str, event_id: str) -> int | None:
        if self.session is None:
            return None
        queue = self.queues.get(teacher_id)
        event = queue.get(event_id) if queue is not None else None
        original = next(
            (item for item in self.session.snapshots.get(teacher_id, []) if item.id == event_id),
            None,
        )
        if event is None or original is None:
            return None
        return event.start_minutes - original.start_minutes

    # ---- status ----

    def time_lock_status(self) -> TimeLockStatus:
        session = self.session
        if session is None:
            return TimeLockStatus(is_synchronized=False, lock_count=0, total_teachers=0)
        starts = [self.queues[teacher_id].earliest_start for teacher_id in session.pending_teacher_ids]
        lock_count = sum(1 for start in starts if start is not None and start == session.target_time)
        return TimeLockStatus(
            is_synchronized=bool(starts) and lock_count == len(starts),
            lock_count=lock_count,
            total_teachers=len(starts),
        )

    def location_lock_status(self) -> LocationLockStatus:
        session = self.session
        if session is None:
            return LocationLockStatus(
                is_synchronized=False,
                synchronized_events=0,
                total_events=0,
                synchronized_teachers=0,
                total_teachers=0,
            )
        synchronized_events = 0
        total_events = 0
        synchronized_teachers = 0
        for teacher_id in session.pending_teacher_ids:
            events = self.queues[teacher_id].all_events()
            matching = sum(1 for event in events if event.location == session.target_location)
            synchronized_events += matching
            total_events += len(events)
            if events and matching == len(events):
                synchronized_teachers += 1
        return LocationLockStatus(
            is_synchronized=total_events > 0 and synchronized_events == total_events,
            synchronized_events=synchronized_events,
            total_events=total_events,
            synchronized_teachers=synchronized_teachers,
            total_teachers=len(session.pending_teacher_ids),
        )

    def optimisation_stats(self) -> OptimisationStats:
        if self.session is None:
            return OptimisationStats(optimised=0, total=0)
        gap = self.settings.required_gap_minutes
        pending = self.session.pending_teacher_ids
        return OptimisationStats(
            optimised=sum(1 for teacher_id in pending if self.queues[teacher_id].is_optimised(gap)),
            total=len(pending),
        )

    def optimise_all(self) -> list[str]:
        session = self.session
        if session is None:
            return []
        moved: list[str] = []
        for teacher_id in self._pending_in_board_order():
            moved.extend(self._editor(teacher_id).optimise())
        session.is_locked = True
        session.is_location_locked = True
        logger.info("Optimised pending queues | teachers=%s moved=%s", len(session.pending_teacher_ids), len(moved))
        self._notify()
        return moved

    # ---- refresh ----

    def replace_queue(self, queue: EventQueue) -> None:
        """Take a queue pushed by the server.

        A pending teacher keeps the locally edited queue unless the pushed one
        has different events or a different order; then the teacher is opted
        out and the pushed queue wins.
        """
        teacher_id = queue.teacher_id
        if self.session is None or teacher_id not in self.session.pending_teacher_ids:
            self.queues[teacher_id] = queue
            self._notify()
            return
        if self.queues[teacher_id].ids() == queue.ids():
            logger.debug("Kept edited queue of teacher %s over refresh", teacher_id)
            return
        logger.warning("Queue of teacher %s changed on the server during adjustment; opting out", teacher_id)
        self.queues[teacher_id] = queue
        self.opt_out(teacher_id)

    def change_date(self, queues: Iterable[EventQueue]) -> None:
        self.exit_adjustment_mode(discard=True)
        self.queues = {queue.teacher_id: queue for queue in queues}
        self._notify()

    # ---- internals ----

    def _apply_time(self, new_time: int) -> list[EventChange]:
        changes: list[EventChange] = []
        for teacher_id in self._pending_in_board_order():
            earliest = self.queues[teacher_id].earliest_start
            if earliest is None or earliest > new_time:
                continue
            changes.extend(self._editor(teacher_id).set_first_event_time(new_time))
        self.session.target_time = new_time
        logger.info(
            "Applied batch time | target_time=%s events_moved=%s",
            minutes_to_time(new_time),
            len(changes),
        )
        return changes

    def _apply_location(self, location: str) -> list[EventChange]:
        changes: list[EventChange] = []
        for teacher_id in self._pending_in_board_order():
            changes.extend(self._editor(teacher_id).set_all_locations(location))
        self.session.target_location = location
        return changes

    def _editor(self, teacher_id: str) -> QueueEditor:
        return QueueEditor(self.queues[teacher_id], self.settings)

    def _pending_in_board_order(self) -> list[str]:
        pending = self.session.pending_teacher_ids if self.session else set()
        return [teacher_id for teacher_id in self.queues if teacher_id in pending]

    def _most_frequent_location(self, teacher_ids: Iterable[str]) -> str | None:
        counts = Counter(
            event.location
            for teacher_id in teacher_ids
            for event in self.queues[teacher_id]
            if event.location
        )
        if not counts:
            return None
        # max keeps the first key with the top count, which is the first seen.
        return max(counts, key=counts.get)

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
