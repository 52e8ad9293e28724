"""
Exception hierarchy for the scheduling engine.

Every error carries a stable ``code`` (e.g. ``"TooSoon"``) so callers at
the request boundary can map failures without parsing messages.

- ScheduleValidationError: rejected input, never retried.
- BookingRejected: booking-time rejections naming the offending
  service or resource.
- BookingFailed: persistence failure after compensating rollback;
  the caller may retry the whole reservation.
- NotFoundError: referenced entity does not exist.
"""

from typing import Optional


class SchedulingError(Exception):
    """Base class for all engine errors."""

    code = "SchedulingError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


# --- Validation-time ---

class ScheduleValidationError(SchedulingError):
    code = "ScheduleValidationError"


class InvalidTimeFormat(ScheduleValidationError):
    code = "InvalidTimeFormat"


class InvalidRange(ScheduleValidationError):
    code = "InvalidRange"


class DurationOutOfBounds(ScheduleValidationError):
    code = "DurationOutOfBounds"


class OutsideParentHours(ScheduleValidationError):
    code = "OutsideParentHours"


class ExceedsParentStart(ScheduleValidationError):
    code = "ExceedsParentStart"


class ExceedsParentEnd(ScheduleValidationError):
    code = "ExceedsParentEnd"


class ScheduleOverlap(ScheduleValidationError):
    code = "ScheduleOverlap"

    def __init__(self, message: str, conflicts: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.conflicts = conflicts or []


class DuplicateWeekday(ScheduleValidationError):
    code = "DuplicateWeekday"


class InvalidServiceDuration(ScheduleValidationError):
    code = "InvalidServiceDuration"


class InvalidServicePrice(ScheduleValidationError):
    code = "InvalidServicePrice"


# --- Booking-time ---

class BookingRejected(SchedulingError):
    code = "BookingRejected"


class ResourceUnavailable(BookingRejected):
    code = "ResourceUnavailable"

    def __init__(self, message: str, service_id: Optional[str] = None,
                 resource_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.service_id = service_id
        self.resource_id = resource_id


class NoResourceAvailable(BookingRejected):
    code = "NoResourceAvailable"

    def __init__(self, message: str, service_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.service_id = service_id


class ResourceMismatch(BookingRejected):
    code = "ResourceMismatch"


class InThePast(BookingRejected):
    code = "InThePast"


class TooSoon(BookingRejected):
    code = "TooSoon"


class TooFarAhead(BookingRejected):
    code = "TooFarAhead"


# --- Persistence-time ---

class UniquenessViolation(SchedulingError):
    """Raised by a booking store when an insert breaks its exclusion constraint."""

    code = "UniquenessViolation"


class BookingFailed(SchedulingError):
    code = "BookingFailed"

    def __init__(self, message: str, reservation_group_id: Optional[str] = None,
                 orphaned_booking_ids: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.reservation_group_id = reservation_group_id
        # rows a failed rollback could not remove
        self.orphaned_booking_ids = list(orphaned_booking_ids or [])


# --- Lookup ---

class NotFoundError(SchedulingError):
    code = "NotFound"


class ResourceNotFound(NotFoundError):
    code = "ResourceNotFound"


class ServiceNotFound(NotFoundError):
    code = "ServiceNotFound"


class BookingNotFound(NotFoundError):
    code = "BookingNotFound"


class OwnerNotFound(NotFoundError):
    code = "OwnerNotFound"


class WindowNotFound(NotFoundError):
    code = "WindowNotFound"


class ResourceNotCapable(SchedulingError):
    code = "ResourceNotCapable"


class InvalidStatusTransition(SchedulingError):
    """Raised when a booking status change is not in the transition table."""

    code = "InvalidStatusTransition"
