"""Shared test fixtures and helpers."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional, Union

import pytest

from appointment_engine.config import RetryConfig
from appointment_engine.scheduling.models import AssignmentMode, Booking
from appointment_engine.scheduling.status import BookingStatus
from appointment_engine.scheduling.timeutils import parse_time
from appointment_engine.schemas.booking_schema import CreateBookingRequest, ServiceBooking
from appointment_engine.schemas.customer_schema import CustomerInfo
from appointment_engine.seed import DEMO_OWNER_ID, build_demo_context
from appointment_engine.services import (
    AvailabilityService,
    BookingService,
    ScheduleService,
)

# Monday 2026-11-02, 09:00 in America/Sao_Paulo (UTC-3)
FIXED_NOW = datetime(2026, 11, 2, 12, 0, tzinfo=timezone.utc)
MONDAY = date(2026, 11, 2)
TUESDAY = date(2026, 11, 3)
SATURDAY = date(2026, 11, 7)
SUNDAY = date(2026, 11, 8)

# Tuesday shifts in the demo shop: joao 09-18, maria 10-17, pedro 12-19
HAIRCUT = "svc-haircut"   # 30 min
BEARD = "svc-beard"       # 20 min
COLORING = "svc-coloring"  # 60 min


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def context():
    return build_demo_context(clock=fixed_clock)


@pytest.fixture
def per_service_context():
    return build_demo_context(clock=fixed_clock, assignment_mode=AssignmentMode.PER_SERVICE)


@pytest.fixture
def owner(context):
    return context.require_owner(DEMO_OWNER_ID)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def booking_service(context, sleeps):
    retry = RetryConfig(max_attempts=3, base_delay_sec=0.1, max_delay_sec=1.0)
    return BookingService(context, retry=retry, sleep=sleeps.append)


@pytest.fixture
def availability_service(context):
    return AvailabilityService(context)


@pytest.fixture
def schedule_service(context):
    return ScheduleService(context)


@pytest.fixture
def customer():
    return CustomerInfo(name="Ana Souza", phone="+55 11 99999-0000", email="ana@example.com")


def make_request(
    services: list[Union[str, tuple[str, str]]],
    start: str = "10:00",
    day: date = TUESDAY,
    customer: Optional[CustomerInfo] = None,
) -> CreateBookingRequest:
    """Build a booking request; a ``(service_id, resource_id)`` tuple pins a resource."""
    items = []
    for entry in services:
        if isinstance(entry, tuple):
            items.append(ServiceBooking(service_id=entry[0], resource_id=entry[1]))
        else:
            items.append(ServiceBooking(service_id=entry))
    return CreateBookingRequest(
        owner_id=DEMO_OWNER_ID,
        services=items,
        appointment_date=day,
        start_time=start,
        customer=customer or CustomerInfo(name="Ana Souza", phone="+55 11 99999-0000"),
    )


_counter = iter(range(1, 1_000_000))


def make_booking(
    resource_id: str,
    start: str,
    end: str,
    day: date = TUESDAY,
    status: BookingStatus = BookingStatus.CONFIRMED,
    booking_id: Optional[str] = None,
    service_id: str = HAIRCUT,
) -> Booking:
    """Helper to create a booking row with sensible defaults."""
    start_min, end_min = parse_time(start), parse_time(end)
    return Booking(
        id=booking_id or f"BK-TEST{next(_counter):04d}",
        owner_id=DEMO_OWNER_ID,
        resource_id=resource_id,
        service_id=service_id,
        date=day,
        start_time=start_min,
        end_time=end_min,
        duration_minutes=end_min - start_min,
        price=Decimal("45.00"),
        status=status,
        reservation_group_id="RSV-TEST",
        customer_name="Existing Client",
    )
