"""Time-of-day arithmetic on minutes since midnight."""

import re
from datetime import date, time
from typing import Union

from appointment_engine.errors import InvalidTimeFormat

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

# 0 = Sunday, matching the stored weekday numbering
DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

TimeLike = Union[str, time, int]


def is_valid_time_format(value: str) -> bool:
    """Check ``value`` is an ``H:MM`` / ``HH:MM`` 24-hour time."""
    return bool(_TIME_RE.match(value.strip()))


def parse_time(value: TimeLike) -> int:
    """Convert ``"HH:MM"``, a ``datetime.time`` or minutes to minutes since midnight.

    Examples:
        >>> parse_time("09:30")
        570
        >>> parse_time(time(18, 0))
        1080
    """
    if isinstance(value, bool):
        raise InvalidTimeFormat(f"Cannot interpret {value!r} as a time of day")
    if isinstance(value, int):
        if not 0 <= value <= MINUTES_PER_DAY:
            raise InvalidTimeFormat(f"Minute offset out of range: {value}")
        return value
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if isinstance(value, str):
        match = _TIME_RE.match(value.strip())
        if not match:
            raise InvalidTimeFormat(f"Time must be in format HH:MM, got {value!r}")
        return int(match.group(1)) * 60 + int(match.group(2))
    raise InvalidTimeFormat(f"Cannot interpret {type(value).__name__} as a time of day")


def format_time(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM``."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def to_time(minutes: int) -> time:
    """Convert minutes since midnight to ``datetime.time`` (same-day only)."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeFormat(f"Minute offset not within one day: {minutes}")
    return time(minutes // 60, minutes % 60)


def add_minutes(start: TimeLike, duration: int) -> int:
    return parse_time(start) + duration


def calculate_duration(start: TimeLike, end: TimeLike) -> int:
    """Minutes between two times of day (negative when end precedes start)."""
    return parse_time(end) - parse_time(start)


def ranges_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval overlap: ``[a_start, a_end)`` vs ``[b_start, b_end)``.

    Touching intervals (one ends exactly where the other starts) do not overlap.
    """
    return a_start < b_end and b_start < a_end


def weekday_of(day: date) -> int:
    """Weekday number with 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def day_name(weekday: int) -> str:
    if not 0 <= weekday <= 6:
        raise ValueError(f"Weekday must be 0..6, got {weekday}")
    return DAY_NAMES[weekday]


def day_number(name: str) -> int:
    try:
        return DAY_NAMES.index(name.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown day name: {name!r}") from None
