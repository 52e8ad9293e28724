"""
Schedule-constraint validation shared by working-hours management and booking.

Three independent checks, each raising a distinct error code:
1. window sanity:     start before end, shift length within bounds
2. containment:       window inside the owner's opening hours
3. overlap freedom:   no clash with sibling windows on the same weekday

Catalog checks for service duration and price live here as well.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from appointment_engine.config import settings
from appointment_engine.errors import (
    DuplicateWeekday,
    DurationOutOfBounds,
    ExceedsParentEnd,
    ExceedsParentStart,
    InvalidRange,
    InvalidServiceDuration,
    InvalidServicePrice,
    OutsideParentHours,
    ScheduleOverlap,
)
from appointment_engine.scheduling.models import WorkingWindow
from appointment_engine.scheduling.timeutils import day_name, format_time, ranges_overlap

logger = logging.getLogger(__name__)

MIN_SERVICE_MINUTES = 5
MAX_SERVICE_MINUTES = 480
SERVICE_DURATION_STEP = 5
MAX_SERVICE_PRICE = Decimal("9999999.99")


class ScheduleConstraintValidator:
    """Validates a candidate working window against itself, its parent and its siblings."""

    def __init__(self, min_shift_minutes: Optional[int] = None,
                 max_shift_minutes: Optional[int] = None) -> None:
        self.min_shift_minutes = (
            settings.shifts.min_shift_minutes if min_shift_minutes is None else min_shift_minutes
        )
        self.max_shift_minutes = (
            settings.shifts.max_shift_minutes if max_shift_minutes is None else max_shift_minutes
        )

    def validate_window(self, window: WorkingWindow) -> None:
        if window.start >= window.end:
            raise InvalidRange(
                f"Start time ({format_time(window.start)}) must be before "
                f"end time ({format_time(window.end)})"
            )
        duration = window.end - window.start
        if duration < self.min_shift_minutes:
            raise DurationOutOfBounds(
                f"Shift must be at least {self.min_shift_minutes // 60} hours long "
                f"({self.min_shift_minutes} minutes), got {duration} minutes"
            )
        if duration > self.max_shift_minutes:
            raise DurationOutOfBounds(
                f"Shift cannot exceed {self.max_shift_minutes // 60} hours "
                f"({self.max_shift_minutes} minutes), got {duration} minutes"
            )

    def validate_containment(self, window: WorkingWindow,
                             parent: Optional[WorkingWindow]) -> None:
        day = day_name(window.weekday)
        if parent is None:
            raise OutsideParentHours(f"No operating hours defined for {day}")
        if not parent.active:
            raise OutsideParentHours(f"Business is closed on {day}")
        if window.start < parent.start:
            raise ExceedsParentStart(
                f"Start time ({format_time(window.start)}) is before opening "
                f"({format_time(parent.start)}) on {day}"
            )
        if window.end > parent.end:
            raise ExceedsParentEnd(
                f"End time ({format_time(window.end)}) is after closing "
                f"({format_time(parent.end)}) on {day}"
            )

    def detect_overlaps(self, window: WorkingWindow,
                        existing: Iterable[WorkingWindow]) -> None:
        conflicts = []
        for other in existing:
            if other.weekday != window.weekday:
                continue
            # the window being updated is compared against its old self
            if window.id is not None and other.id == window.id:
                continue
            if ranges_overlap(window.start, window.end, other.start, other.end):
                conflicts.append(f"{format_time(other.start)} - {format_time(other.end)}")
        if conflicts:
            raise ScheduleOverlap(
                f"Overlaps with existing schedule on {day_name(window.weekday)}: "
                + ", ".join(conflicts),
                conflicts=conflicts,
            )

    def validate(self, window: WorkingWindow, parent: Optional[WorkingWindow],
                 existing: Iterable[WorkingWindow] = ()) -> None:
        """Run all three checks in order; the first failure is raised."""
        self.validate_window(window)
        self.validate_containment(window, parent)
        self.detect_overlaps(window, existing)

    def validate_weekly_schedule(self, windows: list[WorkingWindow]) -> None:
        """Reject duplicate weekdays and invalid ranges in a full weekly schedule."""
        seen: set[int] = set()
        for window in windows:
            if window.weekday in seen:
                raise DuplicateWeekday(
                    f"Work schedule contains duplicate day: {day_name(window.weekday)}"
                )
            seen.add(window.weekday)
            self.validate_window(window)


def validate_service_duration(duration: int) -> None:
    if duration < MIN_SERVICE_MINUTES:
        raise InvalidServiceDuration(
            f"Service duration must be at least {MIN_SERVICE_MINUTES} minutes"
        )
    if duration > MAX_SERVICE_MINUTES:
        raise InvalidServiceDuration(
            f"Service duration cannot exceed {MAX_SERVICE_MINUTES // 60} hours "
            f"({MAX_SERVICE_MINUTES} minutes)"
        )
    if duration % SERVICE_DURATION_STEP != 0:
        raise InvalidServiceDuration(
            f"Service duration must be in {SERVICE_DURATION_STEP}-minute increments"
        )


def validate_service_price(price: Union[Decimal, int, float, str]) -> None:
    try:
        amount = Decimal(str(price))
    except InvalidOperation:
        raise InvalidServicePrice(f"Invalid service price: {price!r}") from None
    if amount <= 0:
        raise InvalidServicePrice("Service price must be greater than zero")
    if amount > MAX_SERVICE_PRICE:
        raise InvalidServicePrice("Service price is too high")
