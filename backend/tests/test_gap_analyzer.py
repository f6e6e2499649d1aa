from classboard.schemas.event import Event
from classboard.schemas.queue import GapState
from classboard.services.gap_analyzer import classify, classify_before, is_contiguous, overlaps
from classboard.services.time_arithmetic import time_to_minutes


def lesson(event_id, start, duration=60):
    return Event(id=event_id, teacher_id="t1", start_minutes=time_to_minutes(start), duration_minutes=duration)


def test_overlap_reports_overlapping_minutes():
    report = classify(lesson("a", "10:00"), lesson("b", "10:30"), 0)
    assert report.state == GapState.overlap
    assert report.magnitude_minutes == 30
    assert report.actual_gap_minutes == -30


def test_exact_fit_for_contiguous_events_without_gap_requirement():
    report = classify(lesson("a", "10:00"), lesson("b", "11:00"), 0)
    assert report.state == GapState.exact
    assert report.magnitude_minutes == 0


def test_exact_fit_when_gap_matches_requirement():
    report = classify(lesson("a", "10:00"), lesson("b", "11:15"), 15)
    assert report.state == GapState.exact
    assert report.adjustment_minutes == 0


def test_gap_reports_excess_over_requirement():
    report = classify(lesson("a", "10:00"), lesson("b", "11:45"), 15)
    assert report.state == GapState.gap
    assert report.magnitude_minutes == 30
    assert report.adjustment_minutes == -30


def test_gap_shorter_than_requirement_counts_as_overlap():
    report = classify(lesson("a", "10:00"), lesson("b", "11:10"), 15)
    assert report.state == GapState.overlap
    assert report.magnitude_minutes == 5
    assert report.adjustment_minutes == 5


def test_classify_before_skips_head_and_out_of_range():
    events = [lesson("a", "09:00"), lesson("b", "10:30")]
    assert classify_before(events, 0, 0) is None
    assert classify_before(events, 2, 0) is None
    assert classify_before(events, 1, 0).state == GapState.gap


def test_contiguity_and_interval_overlap():
    assert is_contiguous(lesson("a", "09:00"), lesson("b", "10:00"))
    assert not is_contiguous(lesson("a", "09:00"), lesson("b", "10:05"))
    assert overlaps(540, 600, 570, 630)
    assert not overlaps(540, 600, 600, 660)
    assert not overlaps(600, 660, 540, 600)
