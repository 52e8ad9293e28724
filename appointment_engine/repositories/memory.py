"""
In-memory stores implementing the repository protocols.

Used by the demo CLI and the test-suite. In production these would be
backed by a relational database where the booking exclusion constraint
is a ``EXCLUDE USING gist`` (or equivalent) over resource/date/time range.
"""

import logging
import threading
import uuid
from dataclasses import replace
from datetime import date
from typing import Optional

from appointment_engine.errors import (
    UniquenessViolation,
    WindowNotFound,
)
from appointment_engine.scheduling.models import (
    Booking,
    OwnerConfig,
    Resource,
    Service,
    WorkingWindow,
)
from appointment_engine.scheduling.timeutils import format_time, ranges_overlap
from appointment_engine.scheduling.validators import (
    validate_service_duration,
    validate_service_price,
)

logger = logging.getLogger(__name__)


class InMemoryResourceRepository:
    """Resources kept in creation order; that order drives auto-assignment."""

    def __init__(self) -> None:
        self._resources: dict[str, Resource] = {}
        self._windows: dict[str, WorkingWindow] = {}

    def add(self, resource: Resource) -> Resource:
        self._resources[resource.id] = resource
        return resource

    def get(self, resource_id: str) -> Optional[Resource]:
        return self._resources.get(resource_id)

    def get_window(self, resource_id: str, weekday: int) -> Optional[WorkingWindow]:
        candidates = [
            w for w in self._windows.values()
            if w.resource_id == resource_id and w.weekday == weekday and w.active
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda w: w.start)

    def list_windows(self, resource_id: str) -> list[WorkingWindow]:
        return sorted(
            (w for w in self._windows.values() if w.resource_id == resource_id),
            key=lambda w: (w.weekday, w.start),
        )

    def list_capable(self, service_id: str, owner_id: str) -> list[str]:
        return [
            r.id for r in self._resources.values()
            if r.owner_id == owner_id and r.active and r.can_perform(service_id)
        ]

    def save_window(self, window: WorkingWindow) -> WorkingWindow:
        if window.id is None:
            window = replace(window, id=f"WIN-{uuid.uuid4().hex[:8]}")
        self._windows[window.id] = window
        return window

    def delete_window(self, window_id: str) -> None:
        if self._windows.pop(window_id, None) is None:
            raise WindowNotFound(f"Working window {window_id} not found")

    def reset(self) -> None:
        self._resources.clear()
        self._windows.clear()


class InMemoryBookingRepository:
    """
    Thread-safe booking store enforcing the exclusion constraint.

    Two active bookings on the same resource and date may not overlap;
    an insert or update that would break this raises
    ``UniquenessViolation`` regardless of what the caller checked before.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bookings: dict[str, Booking] = {}

    def get(self, booking_id: str) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            return booking.copy() if booking else None

    def list_active(self, resource_id: str, day: date) -> list[Booking]:
        with self._lock:
            return [
                b.copy() for b in self._bookings.values()
                if b.resource_id == resource_id and b.date == day and b.is_active
            ]

    def list_by_group(self, reservation_group_id: str) -> list[Booking]:
        with self._lock:
            return sorted(
                (b.copy() for b in self._bookings.values()
                 if b.reservation_group_id == reservation_group_id),
                key=lambda b: b.start_time,
            )

    def insert(self, booking: Booking) -> Booking:
        with self._lock:
            if booking.id in self._bookings:
                raise UniquenessViolation(f"Booking id {booking.id} already exists")
            self._check_exclusion(booking)
            self._bookings[booking.id] = booking.copy()
            return booking.copy()

    def update(self, booking: Booking) -> Booking:
        with self._lock:
            if booking.id not in self._bookings:
                raise UniquenessViolation(f"Booking id {booking.id} does not exist")
            self._check_exclusion(booking)
            self._bookings[booking.id] = booking.copy()
            return booking.copy()

    def delete(self, booking_id: str) -> None:
        with self._lock:
            self._bookings.pop(booking_id, None)

    def all(self) -> list[Booking]:
        with self._lock:
            return [b.copy() for b in self._bookings.values()]

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        with self._lock:
            self._bookings.clear()

    def _check_exclusion(self, booking: Booking) -> None:
        if not booking.is_active:
            return
        for other in self._bookings.values():
            if (
                other.id != booking.id
                and other.is_active
                and other.resource_id == booking.resource_id
                and other.date == booking.date
                and ranges_overlap(booking.start_time, booking.end_time,
                                   other.start_time, other.end_time)
            ):
                logger.warning(
                    "Exclusion constraint violated on %s %s: %s-%s overlaps booking %s",
                    booking.resource_id, booking.date,
                    format_time(booking.start_time), format_time(booking.end_time), other.id,
                )
                raise UniquenessViolation(
                    f"Resource {booking.resource_id} already booked on {booking.date} "
                    f"{format_time(other.start_time)}-{format_time(other.end_time)}"
                )


class InMemoryServiceCatalog:
    def __init__(self) -> None:
        self._services: dict[str, Service] = {}

    def add(self, service: Service) -> Service:
        validate_service_duration(service.duration_minutes)
        validate_service_price(service.price)
        self._services[service.id] = service
        return service

    def get(self, service_id: str) -> Optional[Service]:
        return self._services.get(service_id)

    def reset(self) -> None:
        self._services.clear()


class InMemoryOwnerConfigRepository:
    def __init__(self) -> None:
        self._configs: dict[str, OwnerConfig] = {}

    def add(self, config: OwnerConfig) -> OwnerConfig:
        self._configs[config.owner_id] = config
        return config

    def get(self, owner_id: str) -> Optional[OwnerConfig]:
        return self._configs.get(owner_id)

    def reset(self) -> None:
        self._configs.clear()
