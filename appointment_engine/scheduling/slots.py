"""
Slot generation and availability filtering.

``generate_slots`` yields candidate start times across a window at a
fixed granularity; ``available_starts`` keeps the candidates where a
block of the requested duration fits inside the window without touching
any busy interval. Both are pure functions of their inputs.
"""

from typing import Iterable, Iterator

from appointment_engine.scheduling.models import TimeRange, WorkingWindow


def generate_slots(window: WorkingWindow, granularity: int) -> Iterator[int]:
    """Yield ``start, start+g, start+2g, ...`` strictly before ``window.end``.

    A slot beginning exactly at closing time is never offered. Calling the
    function again restarts the sequence.
    """
    if granularity <= 0:
        raise ValueError(f"Slot granularity must be positive, got {granularity}")
    current = window.start
    while current < window.end:
        yield current
        current += granularity


def merge_intervals(intervals: Iterable[TimeRange]) -> list[TimeRange]:
    """Sort and merge overlapping or touching intervals."""
    ordered = sorted(intervals, key=lambda r: (r.start, r.end))
    merged: list[TimeRange] = []
    for current in ordered:
        if merged and current.start <= merged[-1].end:
            if current.end > merged[-1].end:
                merged[-1] = TimeRange(merged[-1].start, current.end)
        else:
            merged.append(current)
    return merged


def available_starts(window: WorkingWindow, busy: Iterable[TimeRange],
                     duration: int, granularity: int) -> list[int]:
    """Candidate starts ``s`` with ``s + duration <= window.end`` and no busy overlap.

    Busy intervals are merged once and swept with a single cursor, which
    gives the same answer as testing every candidate against every interval.
    For several services on one resource pass their summed duration.
    """
    if duration <= 0:
        raise ValueError(f"Duration must be positive, got {duration}")

    blocks = merge_intervals(busy)
    result: list[int] = []
    idx = 0
    for start in generate_slots(window, granularity):
        end = start + duration
        if end > window.end:
            break
        # blocks ending at or before this start can never overlap later candidates
        while idx < len(blocks) and blocks[idx].end <= start:
            idx += 1
        if idx < len(blocks) and blocks[idx].start < end:
            continue
        result.append(start)
    return result
