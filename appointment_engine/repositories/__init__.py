from appointment_engine.repositories.base import (
    BookingRepository,
    OwnerConfigRepository,
    ResourceRepository,
    ServiceCatalog,
)
from appointment_engine.repositories.memory import (
    InMemoryBookingRepository,
    InMemoryOwnerConfigRepository,
    InMemoryResourceRepository,
    InMemoryServiceCatalog,
)

__all__ = [
    "ResourceRepository",
    "BookingRepository",
    "ServiceCatalog",
    "OwnerConfigRepository",
    "InMemoryResourceRepository",
    "InMemoryBookingRepository",
    "InMemoryServiceCatalog",
    "InMemoryOwnerConfigRepository",
]
