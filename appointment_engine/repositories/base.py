"""
Persistence contracts consumed by the engine.

The engine never talks to a database directly; any store that satisfies
these protocols can back it. ``BookingRepository.insert`` must enforce an
exclusion constraint over ``(resource_id, date, time range)`` for active
bookings and raise ``UniquenessViolation`` when it is broken.
"""

from datetime import date
from typing import Optional, Protocol

from appointment_engine.scheduling.models import (
    Booking,
    OwnerConfig,
    Resource,
    Service,
    WorkingWindow,
)


class ResourceRepository(Protocol):
    """Resources, their capability tags and weekly working windows."""

    def get(self, resource_id: str) -> Optional[Resource]:  # pragma: no cover - interface only
        ...

    def get_window(self, resource_id: str, weekday: int) -> Optional[WorkingWindow]:  # pragma: no cover
        ...

    def list_windows(self, resource_id: str) -> list[WorkingWindow]:  # pragma: no cover
        ...

    def list_capable(self, service_id: str, owner_id: str) -> list[str]:  # pragma: no cover
        """Ids of active resources able to perform ``service_id``, in creation order."""
        ...

    def save_window(self, window: WorkingWindow) -> WorkingWindow:  # pragma: no cover
        ...

    def delete_window(self, window_id: str) -> None:  # pragma: no cover
        ...


class BookingRepository(Protocol):
    """The shared, mutable booking set."""

    def get(self, booking_id: str) -> Optional[Booking]:  # pragma: no cover - interface only
        ...

    def list_active(self, resource_id: str, day: date) -> list[Booking]:  # pragma: no cover
        ...

    def list_by_group(self, reservation_group_id: str) -> list[Booking]:  # pragma: no cover
        ...

    def insert(self, booking: Booking) -> Booking:  # pragma: no cover
        """Persist a booking or raise ``UniquenessViolation``."""
        ...

    def update(self, booking: Booking) -> Booking:  # pragma: no cover
        ...

    def delete(self, booking_id: str) -> None:  # pragma: no cover
        ...


class ServiceCatalog(Protocol):
    def get(self, service_id: str) -> Optional[Service]:  # pragma: no cover - interface only
        ...


class OwnerConfigRepository(Protocol):
    def get(self, owner_id: str) -> Optional[OwnerConfig]:  # pragma: no cover - interface only
        ...
