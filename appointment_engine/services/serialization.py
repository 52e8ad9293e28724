"""
Per-resource serialization of concurrent booking attempts.

The engine itself takes no locks. Async callers that want conflicts to
surface as clean validation errors rather than storage violations can
funnel attempts through a ``ResourceSerializer``: attempts touching the
same resource run one after another, others run in parallel.
"""

import asyncio
import logging
from collections import defaultdict

from appointment_engine.scheduling.models import Booking
from appointment_engine.schemas.booking_schema import CreateBookingRequest
from appointment_engine.services.booking import BookingService

logger = logging.getLogger(__name__)


class ResourceSerializer:
    """Holds one ``asyncio.Lock`` per resource (or per owner for auto-assignment)."""

    def __init__(self, booking_service: BookingService) -> None:
        self._service = booking_service
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @staticmethod
    def lock_keys(request: CreateBookingRequest) -> list[str]:
        """Sorted lock keys; a request with any unpinned service locks the whole owner."""
        if any(s.resource_id is None for s in request.services):
            return [f"owner:{request.owner_id}"]
        return sorted({f"resource:{s.resource_id}" for s in request.services})

    async def create_booking(self, request: CreateBookingRequest) -> list[Booking]:
        keys = self.lock_keys(request)
        # keys are sorted; always acquire in that order
        acquired: list[asyncio.Lock] = []
        try:
            for key in keys:
                lock = self._locks[key]
                await lock.acquire()
                acquired.append(lock)
            logger.debug("Serialized booking attempt holding %s", keys)
            return await asyncio.to_thread(self._service.create_booking, request)
        finally:
            for lock in reversed(acquired):
                lock.release()
