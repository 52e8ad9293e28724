from appointment_engine.services.availability import AvailabilityService
from appointment_engine.services.booking import BookingService
from appointment_engine.services.context import EngineContext
from appointment_engine.services.schedules import ScheduleService
from appointment_engine.services.serialization import ResourceSerializer

__all__ = [
    "EngineContext",
    "AvailabilityService",
    "BookingService",
    "ScheduleService",
    "ResourceSerializer",
]
