"""Occupancy lookup and single-interval conflict detection."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Optional

from appointment_engine.scheduling.models import Booking, TimeRange
from appointment_engine.scheduling.timeutils import ranges_overlap

if TYPE_CHECKING:
    from appointment_engine.repositories.base import BookingRepository

logger = logging.getLogger(__name__)


class OccupancyIndex:
    """Active-booking intervals of a resource on a date (unsorted, unmerged)."""

    def __init__(self, bookings: BookingRepository) -> None:
        self._bookings = bookings

    def active_bookings(self, resource_id: str, day: date,
                        exclude_booking_id: Optional[str] = None) -> list[Booking]:
        return [
            b for b in self._bookings.list_active(resource_id, day)
            if b.is_active and b.id != exclude_booking_id
        ]

    def busy_intervals(self, resource_id: str, day: date,
                       exclude_booking_id: Optional[str] = None) -> list[TimeRange]:
        return [b.interval for b in self.active_bookings(resource_id, day, exclude_booking_id)]


class ConflictDetector:
    """Tests one proposed interval against a resource's existing bookings."""

    def __init__(self, occupancy: OccupancyIndex) -> None:
        self._occupancy = occupancy

    def find_conflicts(self, resource_id: str, day: date, start: int, end: int,
                       exclude_booking_id: Optional[str] = None) -> list[Booking]:
        return [
            b for b in self._occupancy.active_bookings(resource_id, day, exclude_booking_id)
            if ranges_overlap(start, end, b.start_time, b.end_time)
        ]

    def has_conflict(self, resource_id: str, day: date, start: int, end: int,
                     exclude_booking_id: Optional[str] = None) -> bool:
        conflicts = self.find_conflicts(resource_id, day, start, end, exclude_booking_id)
        if conflicts:
            logger.debug(
                "Conflict on %s %s: %d overlapping booking(s)",
                resource_id, day, len(conflicts),
            )
        return bool(conflicts)
