"""
Unit tests for TimeSlotGenerator: horizon expansion, calendar collisions,
de-duplication and ordering.
"""

from __future__ import annotations

from datetime import datetime

from planner.scheduling.models import CalendarEvent, ProductivityWindow, TimeOfDay
from planner.scheduling.slots import TimeSlotGenerator
from planner.scheduling.windows import default_windows

MONDAY = datetime(2026, 10, 19, 7, 0)
SATURDAY = datetime(2026, 10, 24, 7, 0)


def _hours(slots):
    return [(s.start.day, s.start.hour) for s in slots]


def test_single_day_default_windows():
    slots = TimeSlotGenerator(default_windows(), horizon_days=1).generate(MONDAY)
    assert _hours(slots) == [(19, 9), (19, 10), (19, 14), (19, 15), (19, 19), (19, 20)]
    assert all(s.available for s in slots)


def test_slots_are_one_hour_on_the_hour():
    slots = TimeSlotGenerator(default_windows(), horizon_days=2).generate(MONDAY)
    for s in slots:
        assert s.start.minute == 0
        assert (s.end - s.start).total_seconds() == 3600


def test_slots_that_already_ended_are_skipped():
    now = datetime(2026, 10, 19, 15, 30)
    slots = TimeSlotGenerator(default_windows(), horizon_days=1).generate(now)
    assert _hours(slots) == [(19, 15), (19, 19), (19, 20)]


def test_event_overlap_removes_slots():
    event = CalendarEvent("e1", "Lecture", datetime(2026, 10, 19, 9, 30), datetime(2026, 10, 19, 10, 30))
    slots = TimeSlotGenerator(default_windows(), [event], horizon_days=1).generate(MONDAY)
    assert (19, 9) not in _hours(slots)
    assert (19, 10) not in _hours(slots)
    assert (19, 14) in _hours(slots)


def test_event_touching_slot_boundary_does_not_block():
    event = CalendarEvent("e1", "Lunch", datetime(2026, 10, 19, 11, 0), datetime(2026, 10, 19, 14, 0))
    slots = TimeSlotGenerator(default_windows(), [event], horizon_days=1).generate(MONDAY)
    assert (19, 10) in _hours(slots)
    assert (19, 14) in _hours(slots)


def test_overlapping_windows_keep_first_slot():
    windows = [ProductivityWindow(9, 11, 0.9), ProductivityWindow(10, 12, 0.5)]
    slots = TimeSlotGenerator(windows, horizon_days=1).generate(MONDAY)
    assert [(s.start.hour, s.efficiency) for s in slots] == [(9, 0.9), (10, 0.9), (11, 0.5)]


def test_sorted_by_efficiency_then_chronologically():
    slots = TimeSlotGenerator(default_windows(), horizon_days=3).generate(MONDAY)
    effs = [s.efficiency for s in slots]
    assert effs == sorted(effs, reverse=True)
    top = [s for s in slots if s.efficiency == 0.8]
    assert [s.start for s in top] == sorted(s.start for s in top)
    assert _hours(top) == [(19, 9), (19, 10), (20, 9), (20, 10), (21, 9), (21, 10)]


def test_weekends_skipped_on_request():
    gen = TimeSlotGenerator(default_windows(), horizon_days=2, skip_weekends=True)
    assert gen.generate(SATURDAY) == []


def test_weekends_included_by_default():
    slots = TimeSlotGenerator(default_windows(), horizon_days=2).generate(SATURDAY)
    assert {s.start.weekday() for s in slots} == {5, 6}


def test_day_specific_window():
    windows = [ProductivityWindow(9, 10, 0.8, day_of_week=1)]
    slots = TimeSlotGenerator(windows, horizon_days=7).generate(MONDAY)
    assert [s.start for s in slots] == [datetime(2026, 10, 20, 9)]


def test_time_of_day_labels():
    windows = [ProductivityWindow(9, 10, 0.8), ProductivityWindow(13, 14, 0.7),
               ProductivityWindow(19, 20, 0.6), ProductivityWindow(23, 24, 0.5)]
    slots = TimeSlotGenerator(windows, horizon_days=1).generate(MONDAY)
    labels = {s.start.hour: s.time_of_day for s in slots}
    assert labels == {
        9: TimeOfDay.MORNING,
        13: TimeOfDay.AFTERNOON,
        19: TimeOfDay.EVENING,
        23: TimeOfDay.LATE_NIGHT,
    }


def test_empty_windows_yield_no_slots():
    assert TimeSlotGenerator([], horizon_days=7).generate(MONDAY) == []
