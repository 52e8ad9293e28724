from appointment_engine.scheduling.models import (
    AssignmentMode,
    Booking,
    DayHours,
    OperatingHours,
    OwnerConfig,
    Resource,
    Service,
    ServiceRequest,
    TimeRange,
    WorkingWindow,
)
from appointment_engine.scheduling.slots import available_starts, generate_slots
from appointment_engine.scheduling.status import (
    ACTIVE_STATUSES,
    BookingStatus,
    BookingStatusMachine,
    StatusTrigger,
)
from appointment_engine.scheduling.timeutils import format_time, parse_time, ranges_overlap
from appointment_engine.scheduling.validators import ScheduleConstraintValidator

__all__ = [
    "AssignmentMode",
    "Booking",
    "DayHours",
    "OperatingHours",
    "OwnerConfig",
    "Resource",
    "Service",
    "ServiceRequest",
    "TimeRange",
    "WorkingWindow",
    "generate_slots",
    "available_starts",
    "BookingStatus",
    "BookingStatusMachine",
    "StatusTrigger",
    "ACTIVE_STATUSES",
    "format_time",
    "parse_time",
    "ranges_overlap",
    "ScheduleConstraintValidator",
]
