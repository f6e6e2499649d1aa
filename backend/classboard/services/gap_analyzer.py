from __future__ import annotations

from collections.abc import Sequence

from classboard.schemas.event import Event
from classboard.schemas.queue import GapReport, GapState


def is_contiguous(previous: Event, current: Event) -> bool:
    return current.start_minutes == previous.end_minutes


def classify(previous: Event, current: Event, required_gap_minutes: int) -> GapReport:
    """Classify the space between two adjacent events.

    An actual overlap reports the overlapping minutes. A gap shorter than the
    required one is reported as an overlap of the required buffer, sized by the
    shortfall. A gap longer than required reports the excess minutes.
    """
    actual = current.start_minutes - previous.end_minutes
    if actual < 0:
        return GapReport(
            state=GapState.overlap,
            magnitude_minutes=-actual,
            actual_gap_minutes=actual,
            required_gap_minutes=required_gap_minutes,
        )
    if actual < required_gap_minutes:
        return GapReport(
            state=GapState.overlap,
            magnitude_minutes=required_gap_minutes - actual,
            actual_gap_minutes=actual,
            required_gap_minutes=required_gap_minutes,
        )
    if actual == required_gap_minutes:
        return GapReport(
            state=GapState.exact,
            magnitude_minutes=0,
            actual_gap_minutes=actual,
            required_gap_minutes=required_gap_minutes,
        )
    return GapReport(
        state=GapState.gap,
        magnitude_minutes=actual - required_gap_minutes,
        actual_gap_minutes=actual,
        required_gap_minutes=required_gap_minutes,
    )


def classify_before(events: Sequence[Event], index: int, required_gap_minutes: int) -> GapReport | None:
    if index <= 0 or index >= len(events):
        return None
    return classify(events[index - 1], events[index], required_gap_minutes)


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    return start_a < end_b and end_a > start_b
