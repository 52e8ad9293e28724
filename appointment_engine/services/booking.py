"""
Booking creation and lifecycle operations.

``create_booking`` plans the reservation, then hands the plan to the
atomic ``BookingTransaction``. A storage-level conflict (``BookingFailed``)
is retried a bounded number of times with exponential backoff, re-planning
each time since availability may have shifted.
"""

import random
import time
from datetime import date
from typing import Callable, Optional

from appointment_engine.config import RetryConfig, settings
from appointment_engine.errors import (
    BookingFailed,
    BookingNotFound,
    ResourceUnavailable,
    UniquenessViolation,
)
from appointment_engine.logging_context import get_request_logger, new_request_id
from appointment_engine.scheduling.models import Booking, ServiceRequest
from appointment_engine.scheduling.status import (
    BookingStatus,
    BookingStatusMachine,
    StatusTrigger,
    trigger_for,
)
from appointment_engine.scheduling.timeutils import TimeLike, format_time, parse_time
from appointment_engine.scheduling.transaction import check_temporal_policy
from appointment_engine.schemas.booking_schema import CreateBookingRequest
from appointment_engine.services.context import EngineContext

logger = get_request_logger(__name__)


class BookingService:
    """Creates reservations and drives booking status changes."""

    def __init__(self, context: EngineContext, retry: Optional[RetryConfig] = None,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self._ctx = context
        self._retry = retry or settings.retry
        self._sleep = sleep

    def create_booking(self, request: CreateBookingRequest) -> list[Booking]:
        """
        Create one booking per requested service, all or nothing.

        Raises:
            ResourceUnavailable / NoResourceAvailable / ResourceMismatch: planning failed.
            InThePast / TooSoon / TooFarAhead: temporal policy rejected the start.
            BookingFailed: storage kept rejecting the reservation after all retries.
        """
        new_request_id()
        owner = self._ctx.require_owner(request.owner_id)
        # duration and price are snapshotted here; later catalog edits do not apply
        requests = [
            ServiceRequest.from_service(
                self._ctx.require_service(item.service_id, owner.owner_id),
                item.resource_id,
            )
            for item in request.services
        ]
        start = parse_time(request.start_time)
        logger.info(
            "Booking %d service(s) for %s on %s at %s",
            len(requests), request.customer.name,
            request.appointment_date, request.start_time,
        )

        attempt = 1
        while True:
            plan = self._ctx.planner.plan(requests, start, request.appointment_date, owner)
            try:
                return self._ctx.transaction.execute(
                    plan, owner, request.customer, request.notes,
                )
            except BookingFailed as exc:
                if exc.orphaned_booking_ids:
                    logger.error(
                        "Rollback left rows %s behind; not retrying", exc.orphaned_booking_ids,
                    )
                    raise
                if attempt >= self._retry.max_attempts:
                    logger.warning("Giving up after %d attempt(s): %s", attempt, exc)
                    raise
                delay = self._backoff_delay(attempt)
                logger.info(
                    "Storage conflict on attempt %d; retrying in %.3fs", attempt, delay,
                )
                self._sleep(delay)
                attempt += 1

    def _backoff_delay(self, attempt: int) -> float:
        jitter = random.uniform(0.8, 1.2)
        delay = self._retry.base_delay_sec * (2 ** (attempt - 1)) * jitter
        return min(delay, self._retry.max_delay_sec)

    def get_booking(self, booking_id: str) -> Booking:
        booking = self._ctx.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFound(f"Booking with ID {booking_id} not found")
        return booking

    def list_reservation(self, reservation_group_id: str) -> list[Booking]:
        return self._ctx.bookings.list_by_group(reservation_group_id)

    def update_booking_status(self, booking_id: str, status: BookingStatus,
                              reason: Optional[str] = None) -> Booking:
        """Move a booking along the status table; invalid moves raise."""
        booking = self.get_booking(booking_id)
        target = BookingStatus(status)
        trigger = trigger_for(booking.status, target)
        return self._apply(booking, trigger, reason)

    def cancel_booking(self, booking_id: str, reason: Optional[str] = None) -> Booking:
        booking = self.get_booking(booking_id)
        return self._apply(booking, StatusTrigger.CANCEL, reason)

    def cancel_reservation(self, reservation_group_id: str,
                           reason: Optional[str] = None) -> list[Booking]:
        """Cancel every still-cancellable booking of a reservation."""
        cancelled = []
        for booking in self.list_reservation(reservation_group_id):
            if StatusTrigger.CANCEL in BookingStatusMachine(booking.status).get_valid_triggers():
                cancelled.append(self._apply(booking, StatusTrigger.CANCEL, reason))
        return cancelled

    def reschedule_booking(self, booking_id: str, new_date: date,
                           new_start: TimeLike) -> Booking:
        """
        Move one active booking to a new date/time on the same resource.

        The booking itself is excluded from the conflict check.
        """
        booking = self.get_booking(booking_id)
        if not booking.is_active:
            raise ResourceUnavailable(
                f"Booking {booking_id} is {booking.status.value} and cannot be rescheduled",
                service_id=booking.service_id, resource_id=booking.resource_id,
            )
        owner = self._ctx.require_owner(booking.owner_id)
        start = parse_time(new_start)
        end = start + booking.duration_minutes

        if not self._ctx.windows.admits(booking.resource_id, new_date, start, end, owner):
            raise ResourceUnavailable(
                f"Time {format_time(start)}-{format_time(end)} on {new_date} is outside "
                f"working hours of resource {booking.resource_id}",
                service_id=booking.service_id, resource_id=booking.resource_id,
            )
        check_temporal_policy(owner, new_date, start, self._ctx.clock())
        if self._ctx.conflicts.has_conflict(
            booking.resource_id, new_date, start, end, exclude_booking_id=booking.id,
        ):
            raise ResourceUnavailable(
                "New time slot conflicts with existing appointment",
                service_id=booking.service_id, resource_id=booking.resource_id,
            )

        moved = booking.copy(date=new_date, start_time=start, end_time=end)
        try:
            moved = self._ctx.bookings.update(moved)
        except UniquenessViolation as exc:
            raise BookingFailed(f"Could not reschedule booking {booking_id}: {exc}") from exc
        logger.info(
            "Booking %s rescheduled to %s %s", booking_id, new_date, format_time(start),
        )
        return moved

    def _apply(self, booking: Booking, trigger: StatusTrigger,
               reason: Optional[str]) -> Booking:
        machine = BookingStatusMachine(booking.status)
        new_status = machine.transition(trigger, reason)
        changes = {"status": new_status}
        if new_status == BookingStatus.CANCELLED:
            changes["cancellation_reason"] = reason
        updated = self._ctx.bookings.update(booking.copy(**changes))
        logger.info(
            "Booking %s: %s -> %s", booking.id, booking.status.value, new_status.value,
        )
        return updated
