import pytest

from classboard.schemas.controller import ControllerSettings
from classboard.schemas.queue import InsertionPosition
from classboard.services.slot_finder import duration_for_capacity, find_insertion_slot


def test_empty_queue_takes_anchor_at_tail(make_queue):
    slot = find_insertion_slot(make_queue([]), 540, 60, 0)
    assert (slot.time, slot.position) == (540, InsertionPosition.tail)


def test_free_anchor_before_head_goes_to_head(make_queue):
    queue = make_queue([("a", "10:00", 30)])
    slot = find_insertion_slot(queue, 540, 30, 15)
    assert (slot.time, slot.position) == (540, InsertionPosition.head)


def test_occupied_anchor_falls_back_after_tail(make_queue):
    queue = make_queue([("a", "10:00", 30)])
    slot = find_insertion_slot(queue, 585, 30, 15)
    assert (slot.time, slot.position) == (645, InsertionPosition.tail)


def test_head_slot_needs_the_required_gap(make_queue):
    queue = make_queue([("a", "10:00", 30)])
    slot = find_insertion_slot(queue, 570, 30, 15)
    assert (slot.time, slot.position) == (645, InsertionPosition.tail)


def test_free_anchor_after_tail_is_kept(make_queue):
    queue = make_queue([("a", "10:00", 30)])
    slot = find_insertion_slot(queue, 660, 30, 15)
    assert (slot.time, slot.position) == (660, InsertionPosition.tail)


def test_anchor_too_close_to_tail_falls_back(make_queue):
    queue = make_queue([("a", "10:00", 30)])
    slot = find_insertion_slot(queue, 635, 30, 15)
    assert (slot.time, slot.position) == (645, InsertionPosition.tail)


def test_middle_of_queue_is_never_searched(make_queue):
    queue = make_queue([("a", "09:00", 60), ("b", "12:00", 60)])
    slot = find_insertion_slot(queue, 630, 30, 0)
    assert (slot.time, slot.position) == (780, InsertionPosition.tail)


def test_anchor_running_past_midnight_falls_back(make_queue):
    queue = make_queue([("a", "22:00", 60)])
    slot = find_insertion_slot(queue, 1410, 60, 0)
    assert (slot.time, slot.position) == (1380, InsertionPosition.tail)
    assert slot.fits_in_day


def test_fallback_slot_may_not_fit_in_day(make_queue):
    queue = make_queue([("a", "22:00", 105)])
    slot = find_insertion_slot(queue, 1350, 60, 0)
    assert slot.time == 1425
    assert not slot.fits_in_day


@pytest.mark.parametrize("capacity,expected", [(0, 60), (1, 60), (2, 90), (3, 120), (8, 120)])
def test_duration_for_capacity(capacity, expected):
    assert duration_for_capacity(capacity, ControllerSettings()) == expected
