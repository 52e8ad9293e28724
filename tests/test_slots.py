"""Tests for slot generation and availability filtering."""

import random

import pytest

from appointment_engine.scheduling.models import TimeRange, WorkingWindow
from appointment_engine.scheduling.slots import available_starts, generate_slots, merge_intervals
from appointment_engine.scheduling.timeutils import parse_time, ranges_overlap


def _window(start: str, end: str) -> WorkingWindow:
    return WorkingWindow.of("res-1", 2, start, end)


def _brute_force(window, busy, duration, granularity):
    return [
        s for s in generate_slots(window, granularity)
        if s + duration <= window.end
        and not any(ranges_overlap(s, s + duration, b.start, b.end) for b in busy)
    ]


class TestGenerateSlots:
    def test_fixed_granularity(self):
        slots = list(generate_slots(_window("09:00", "10:00"), 15))
        assert slots == [540, 555, 570, 585]

    def test_never_offers_closing_time(self):
        slots = list(generate_slots(_window("09:00", "10:00"), 30))
        assert 600 not in slots

    def test_restarts_on_each_call(self):
        window = _window("09:00", "12:00")
        assert list(generate_slots(window, 10)) == list(generate_slots(window, 10))

    def test_rejects_non_positive_granularity(self):
        with pytest.raises(ValueError):
            list(generate_slots(_window("09:00", "10:00"), 0))


class TestMergeIntervals:
    def test_merges_overlapping_and_touching(self):
        merged = merge_intervals([
            TimeRange(700, 710), TimeRange(620, 650), TimeRange(600, 630), TimeRange(650, 660),
        ])
        assert merged == [TimeRange(600, 660), TimeRange(700, 710)]

    def test_empty(self):
        assert merge_intervals([]) == []


class TestAvailableStarts:
    def test_single_booking_blocks_overlapping_starts(self):
        window = _window("09:00", "18:00")
        busy = [TimeRange(parse_time("10:00"), parse_time("10:30"))]
        starts = available_starts(window, busy, 30, 10)

        assert parse_time("09:00") in starts
        assert parse_time("09:30") in starts
        assert parse_time("09:40") not in starts
        assert parse_time("10:20") not in starts
        assert parse_time("10:30") in starts

    def test_last_start_fits_before_close(self):
        starts = available_starts(_window("09:00", "18:00"), [], 30, 10)
        assert starts[-1] == parse_time("17:30")
        assert len(starts) == 52

    def test_duration_longer_than_window(self):
        assert available_starts(_window("09:00", "10:00"), [], 90, 10) == []

    def test_rejects_non_positive_duration(self):
        with pytest.raises(ValueError):
            available_starts(_window("09:00", "10:00"), [], 0, 10)

    def test_matches_pairwise_check(self):
        rng = random.Random(20261103)
        window = _window("08:00", "20:00")
        for _ in range(50):
            busy = []
            for _ in range(rng.randint(0, 6)):
                start = rng.randrange(480, 1200, 5)
                busy.append(TimeRange(start, start + rng.choice([15, 20, 30, 60, 90])))
            duration = rng.choice([10, 20, 30, 45, 50, 120])
            granularity = rng.choice([5, 10, 15, 30])
            assert available_starts(window, busy, duration, granularity) == \
                _brute_force(window, busy, duration, granularity)
