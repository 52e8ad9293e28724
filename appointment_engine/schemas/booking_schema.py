"""Booking and availability request/response models."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from appointment_engine.scheduling.models import Booking
from appointment_engine.scheduling.timeutils import format_time, is_valid_time_format
from appointment_engine.schemas.customer_schema import CustomerInfo


def _check_time(value: str) -> str:
    if not is_valid_time_format(value):
        raise ValueError("time must be in format HH:MM")
    return value.strip()


class ServiceBooking(BaseModel):
    """One service of a reservation; no resource means auto-assignment."""
    service_id: str
    resource_id: Optional[str] = None


class CreateBookingRequest(BaseModel):
    """Validated reservation request."""
    owner_id: str
    services: list[ServiceBooking] = Field(min_length=1)
    appointment_date: date
    start_time: str
    customer: CustomerInfo
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("start_time")
    @classmethod
    def _valid_start(cls, value: str) -> str:
        return _check_time(value)


class RescheduleRequest(BaseModel):
    appointment_date: date
    start_time: str

    @field_validator("start_time")
    @classmethod
    def _valid_start(cls, value: str) -> str:
        return _check_time(value)


class BookingResponse(BaseModel):
    """Outward view of a persisted booking."""
    id: str
    owner_id: str
    resource_id: str
    service_id: str
    appointment_date: date
    start_time: str
    end_time: str
    duration_minutes: int
    price: str
    status: str
    reservation_group_id: str
    customer_name: str
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            owner_id=booking.owner_id,
            resource_id=booking.resource_id,
            service_id=booking.service_id,
            appointment_date=booking.date,
            start_time=format_time(booking.start_time),
            end_time=format_time(booking.end_time),
            duration_minutes=booking.duration_minutes,
            price=f"{booking.price:.2f}",
            status=booking.status.value,
            reservation_group_id=booking.reservation_group_id,
            customer_name=booking.customer_name,
            cancellation_reason=booking.cancellation_reason,
            created_at=booking.created_at,
        )


class ResourceAvailability(BaseModel):
    """Available start times for one resource."""
    resource_id: str
    resource_name: str = ""
    starts: list[str] = Field(default_factory=list)


class AvailabilityCheck(BaseModel):
    """Result of checking one specific start time."""
    available: bool
    reason: Optional[str] = None
