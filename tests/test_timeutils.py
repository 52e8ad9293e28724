"""Tests for time-of-day parsing and arithmetic."""

from datetime import date, time

import pytest

from appointment_engine.errors import InvalidTimeFormat
from appointment_engine.scheduling.timeutils import (
    add_minutes,
    calculate_duration,
    day_name,
    day_number,
    format_time,
    is_valid_time_format,
    parse_time,
    ranges_overlap,
    to_time,
    weekday_of,
)


class TestParseTime:
    def test_parses_hh_mm(self):
        assert parse_time("09:30") == 570

    def test_parses_single_digit_hour(self):
        assert parse_time("9:05") == 545

    def test_accepts_time_object(self):
        assert parse_time(time(18, 0)) == 1080

    def test_passes_through_minutes(self):
        assert parse_time(600) == 600

    @pytest.mark.parametrize("value", ["24:00", "9:5", "abc", "12:60", ""])
    def test_rejects_malformed_strings(self, value):
        with pytest.raises(InvalidTimeFormat):
            parse_time(value)

    @pytest.mark.parametrize("value", [-1, 1441, True])
    def test_rejects_out_of_range_values(self, value):
        with pytest.raises(InvalidTimeFormat):
            parse_time(value)

    def test_is_valid_time_format(self):
        assert is_valid_time_format("23:59")
        assert not is_valid_time_format("7pm")


class TestFormatting:
    def test_format_pads(self):
        assert format_time(570) == "09:30"
        assert format_time(0) == "00:00"

    def test_to_time(self):
        assert to_time(615) == time(10, 15)

    def test_to_time_rejects_end_of_day(self):
        with pytest.raises(InvalidTimeFormat):
            to_time(1440)


class TestArithmetic:
    def test_add_minutes(self):
        assert add_minutes("09:00", 45) == 585

    def test_calculate_duration(self):
        assert calculate_duration("09:00", "10:30") == 90

    def test_touching_ranges_do_not_overlap(self):
        assert not ranges_overlap(600, 630, 630, 660)
        assert not ranges_overlap(630, 660, 600, 630)

    def test_partial_overlap(self):
        assert ranges_overlap(600, 630, 620, 660)

    def test_containment_overlaps(self):
        assert ranges_overlap(540, 1080, 600, 630)


class TestWeekdays:
    def test_sunday_is_zero(self):
        assert weekday_of(date(2026, 11, 8)) == 0

    def test_tuesday_is_two(self):
        assert weekday_of(date(2026, 11, 3)) == 2

    def test_day_name(self):
        assert day_name(0) == "sunday"
        assert day_name(6) == "saturday"

    def test_day_name_out_of_range(self):
        with pytest.raises(ValueError):
            day_name(7)

    def test_day_number_is_case_insensitive(self):
        assert day_number("Saturday") == 6

    def test_day_number_unknown(self):
        with pytest.raises(ValueError, match="Unknown day"):
            day_number("funday")
