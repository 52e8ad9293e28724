"""Wiring of repositories and engine components shared by the service layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from appointment_engine.errors import (
    OwnerNotFound,
    ResourceNotFound,
    ServiceNotFound,
)
from appointment_engine.scheduling.models import OwnerConfig, Resource, Service
from appointment_engine.scheduling.occupancy import ConflictDetector, OccupancyIndex
from appointment_engine.scheduling.planner import AutoAssignmentResolver, SequentialBookingPlanner
from appointment_engine.scheduling.transaction import BookingTransaction, Clock, utc_now
from appointment_engine.scheduling.validators import ScheduleConstraintValidator
from appointment_engine.scheduling.windows import WorkingWindowResolver

if TYPE_CHECKING:
    from appointment_engine.repositories.base import (
        BookingRepository,
        OwnerConfigRepository,
        ResourceRepository,
        ServiceCatalog,
    )


@dataclass
class EngineContext:
    """Repositories plus the engine components built on top of them."""

    resources: ResourceRepository
    bookings: BookingRepository
    catalog: ServiceCatalog
    owners: OwnerConfigRepository
    clock: Clock = utc_now
    validator: ScheduleConstraintValidator = field(default_factory=ScheduleConstraintValidator)

    def __post_init__(self) -> None:
        self.windows = WorkingWindowResolver(self.resources)
        self.occupancy = OccupancyIndex(self.bookings)
        self.conflicts = ConflictDetector(self.occupancy)
        self.resolver = AutoAssignmentResolver(self.resources, self.windows, self.conflicts)
        self.planner = SequentialBookingPlanner(self.resources, self.resolver)
        self.transaction = BookingTransaction(self.bookings, self.clock)

    def require_owner(self, owner_id: str) -> OwnerConfig:
        owner = self.owners.get(owner_id)
        if owner is None:
            raise OwnerNotFound(f"Owner with ID {owner_id} not found")
        return owner

    def require_resource(self, resource_id: str, owner_id: Optional[str] = None) -> Resource:
        resource = self.resources.get(resource_id)
        if resource is None or (owner_id is not None and resource.owner_id != owner_id):
            raise ResourceNotFound(f"Resource with ID {resource_id} not found")
        return resource

    def require_service(self, service_id: str, owner_id: Optional[str] = None) -> Service:
        service = self.catalog.get(service_id)
        if service is None or not service.active:
            raise ServiceNotFound(f"Service with ID {service_id} not found")
        if owner_id is not None and service.owner_id != owner_id:
            raise ServiceNotFound(f"Service {service_id} does not belong to owner {owner_id}")
        return service
