"""
Atomic persistence of a planned reservation.

Temporal policy is checked once for the whole reservation; then one
booking row per planned service is inserted. If any insert fails the
rows already written for this reservation are deleted again, so a
reservation is either fully present or fully absent.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable, Optional

import pytz

from appointment_engine.errors import BookingFailed, InThePast, TooFarAhead, TooSoon
from appointment_engine.logging_context import get_request_logger
from appointment_engine.scheduling.models import Booking, OwnerConfig, ReservationPlan
from appointment_engine.scheduling.status import initial_status
from appointment_engine.scheduling.timeutils import format_time, to_time
from appointment_engine.schemas.customer_schema import CustomerInfo

if TYPE_CHECKING:
    from appointment_engine.repositories.base import BookingRepository

logger = get_request_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def localize(owner: OwnerConfig, day: date, minutes: int) -> datetime:
    """Interpret a date and time of day in the owner's fixed timezone."""
    tz = pytz.timezone(owner.timezone)
    return tz.localize(datetime.combine(day, to_time(minutes)))


def check_temporal_policy(owner: OwnerConfig, day: date, start: int, now: datetime) -> None:
    """
    Reject reservations starting in the past, too soon, or too far ahead.

    Raises:
        InThePast: The start is not strictly in the future.
        TooSoon: Less notice than ``min_advance_hours``.
        TooFarAhead: More than ``max_advance_days`` ahead.
    """
    start_at = localize(owner, day, start)
    gap = start_at - now
    if gap <= timedelta(0):
        raise InThePast(f"Cannot book appointments in the past ({day} {format_time(start)})")
    if gap < timedelta(hours=owner.min_advance_hours):
        raise TooSoon(
            f"Appointments must be booked at least {owner.min_advance_hours:g} hours in advance"
        )
    if gap > timedelta(days=owner.max_advance_days):
        raise TooFarAhead(
            f"Appointments can only be booked up to {owner.max_advance_days:g} days in advance"
        )


class BookingTransaction:
    """Validates temporal policy and persists all sub-bookings or none."""

    def __init__(self, bookings: BookingRepository, clock: Optional[Clock] = None) -> None:
        self._bookings = bookings
        self._clock = clock or utc_now

    def execute(self, plan: ReservationPlan, owner: OwnerConfig, customer: CustomerInfo,
                notes: Optional[str] = None) -> list[Booking]:
        check_temporal_policy(owner, plan.date, plan.start, self._clock())

        group_id = f"RSV-{uuid.uuid4().hex[:8].upper()}"
        status = initial_status(owner.requires_approval)
        inserted: list[Booking] = []

        for item in plan.items:
            booking = Booking(
                id=f"BK-{uuid.uuid4().hex[:8].upper()}",
                owner_id=owner.owner_id,
                resource_id=item.resource_id,
                service_id=item.request.service_id,
                date=plan.date,
                start_time=item.start,
                end_time=item.end,
                duration_minutes=item.request.duration_minutes,
                price=item.request.price,
                status=status,
                reservation_group_id=group_id,
                customer_name=customer.name,
                customer_phone=customer.phone,
                customer_email=customer.email,
                notes=notes,
            )
            try:
                inserted.append(self._bookings.insert(booking))
            except Exception as exc:
                logger.warning(
                    "Insert failed for %s on %s %s-%s (%s); rolling back %d row(s)",
                    group_id, item.resource_id, format_time(item.start),
                    format_time(item.end), exc, len(inserted),
                )
                orphaned = self._compensate(inserted)
                raise BookingFailed(
                    f"Could not persist reservation {group_id}: {exc}",
                    reservation_group_id=group_id,
                    orphaned_booking_ids=orphaned,
                ) from exc

        logger.info(
            "Reservation %s created: %d booking(s) on %s from %s (%s)",
            group_id, len(inserted), plan.date, format_time(plan.start), status.value,
        )
        return inserted

    def _compensate(self, inserted: list[Booking]) -> list[str]:
        """Delete the rows written so far, newest first.

        Every row is attempted even when a delete fails; failed deletes get
        one more pass. Returns the ids that could still not be removed.
        """
        pending = [b.id for b in reversed(inserted)]
        for attempt in (1, 2):
            failed = []
            for booking_id in pending:
                try:
                    self._bookings.delete(booking_id)
                except Exception as exc:
                    logger.warning(
                        "Compensating delete failed for booking %s (pass %d): %s",
                        booking_id, attempt, exc,
                    )
                    failed.append(booking_id)
            pending = failed
            if not pending:
                break
        if pending:
            logger.error("Reservation rollback left %d orphaned row(s): %s", len(pending), pending)
        return pending
