"""
Sequential multi-service planning with automatic resource assignment.

The planner lays the requested services back-to-back from one overall
start time and resolves each sub-interval to a resource. It only reads
repositories; nothing is persisted until ``BookingTransaction`` runs.

Assignment follows the owner's ``AssignmentMode``:
- shared_resource: every service of the reservation goes to one resource
- per_service:     each service is assigned independently
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Optional, Sequence

from appointment_engine.errors import (
    NoResourceAvailable,
    ResourceMismatch,
    ResourceNotFound,
    ResourceUnavailable,
)
from appointment_engine.scheduling.models import (
    AssignmentMode,
    OwnerConfig,
    PlannedService,
    ReservationPlan,
    ServiceRequest,
)
from appointment_engine.scheduling.occupancy import ConflictDetector
from appointment_engine.scheduling.timeutils import MINUTES_PER_DAY, format_time
from appointment_engine.scheduling.windows import WorkingWindowResolver

if TYPE_CHECKING:
    from appointment_engine.repositories.base import ResourceRepository

logger = logging.getLogger(__name__)


class AutoAssignmentResolver:
    """Finds the first capable resource, in creation order, free for a sub-interval."""

    def __init__(self, resources: ResourceRepository, windows: WorkingWindowResolver,
                 conflicts: ConflictDetector) -> None:
        self._resources = resources
        self._windows = windows
        self._conflicts = conflicts

    def resource_admits(self, resource_id: str, owner: OwnerConfig, day: date,
                        start: int, end: int) -> bool:
        """Window containment plus conflict freedom for one resource."""
        if not self._windows.admits(resource_id, day, start, end, owner):
            return False
        return not self._conflicts.has_conflict(resource_id, day, start, end)

    def find_resource(self, service_id: str, owner: OwnerConfig, day: date,
                      start: int, end: int) -> Optional[str]:
        for resource_id in self._resources.list_capable(service_id, owner.owner_id):
            if self.resource_admits(resource_id, owner, day, start, end):
                logger.debug(
                    "Auto-assigned %s to %s at %s-%s",
                    service_id, resource_id, format_time(start), format_time(end),
                )
                return resource_id
        return None

    def find_resource_for_all(self, service_ids: Sequence[str], owner: OwnerConfig,
                              day: date, start: int, end: int) -> Optional[str]:
        """First resource able to perform every service and free for the whole span."""
        for resource_id in self.capable_of_all(service_ids, owner):
            if self.resource_admits(resource_id, owner, day, start, end):
                return resource_id
        return None

    def capable_of_all(self, service_ids: Sequence[str], owner: OwnerConfig) -> list[str]:
        if not service_ids:
            return []
        candidates = self._resources.list_capable(service_ids[0], owner.owner_id)
        others = set(service_ids[1:])
        result = []
        for resource_id in candidates:
            resource = self._resources.get(resource_id)
            if resource is not None and all(resource.can_perform(s) for s in others):
                result.append(resource_id)
        return result


class SequentialBookingPlanner:
    """Resolves an ordered list of service requests into a ``ReservationPlan``."""

    def __init__(self, resources: ResourceRepository, resolver: AutoAssignmentResolver) -> None:
        self._resources = resources
        self._resolver = resolver

    def plan(self, requests: Sequence[ServiceRequest], overall_start: int, day: date,
             owner: OwnerConfig) -> ReservationPlan:
        """
        Lay services back-to-back from ``overall_start`` on ``day``.

        Raises:
            ResourceUnavailable: A pinned resource cannot take its sub-interval, or
                the reservation would run past midnight.
            NoResourceAvailable: No capable resource is free for an unpinned service.
            ResourceMismatch: Shared-resource mode with different pinned resources.
        """
        if not requests:
            raise ValueError("At least one service is required")

        self._check_same_day(requests, overall_start, day)

        if owner.assignment_mode == AssignmentMode.SHARED_RESOURCE:
            requests = self._pin_shared_resource(list(requests), overall_start, day, owner)

        items: list[PlannedService] = []
        cursor = overall_start
        for request in requests:
            sub_end = cursor + request.duration_minutes
            if request.resource_id is not None:
                self._check_pinned(request, owner, day, cursor, sub_end)
                resource_id = request.resource_id
            else:
                resource_id = self._resolver.find_resource(
                    request.service_id, owner, day, cursor, sub_end,
                )
                if resource_id is None:
                    raise NoResourceAvailable(
                        f"No resource available for service '{request.label}' "
                        f"at {format_time(cursor)}-{format_time(sub_end)} on {day}",
                        service_id=request.service_id,
                    )
            items.append(PlannedService(request, resource_id, cursor, sub_end))
            cursor = sub_end

        logger.debug(
            "Planned %d service(s) on %s %s-%s across %s",
            len(items), day, format_time(overall_start), format_time(cursor),
            sorted(set(item.resource_id for item in items)),
        )
        return ReservationPlan(date=day, items=tuple(items))

    def _pin_shared_resource(self, requests: list[ServiceRequest], overall_start: int,
                             day: date, owner: OwnerConfig) -> list[ServiceRequest]:
        pinned = {r.resource_id for r in requests if r.resource_id is not None}
        if len(pinned) > 1:
            raise ResourceMismatch(
                "All services of a reservation must use the same resource; "
                f"got {sorted(pinned)}"
            )
        if pinned:
            resource_id = pinned.pop()
        else:
            total = sum(r.duration_minutes for r in requests)
            service_ids = [r.service_id for r in requests]
            resource_id = self._resolver.find_resource_for_all(
                service_ids, owner, day, overall_start, overall_start + total,
            )
            if resource_id is None:
                labels = ", ".join(r.label for r in requests)
                raise NoResourceAvailable(
                    f"No single resource available for services [{labels}] "
                    f"at {format_time(overall_start)}-{format_time(overall_start + total)} "
                    f"on {day}",
                    service_id=requests[0].service_id,
                )
        return [
            ServiceRequest(r.service_id, r.duration_minutes, resource_id, r.price, r.service_name)
            for r in requests
        ]

    def _check_pinned(self, request: ServiceRequest, owner: OwnerConfig, day: date,
                      start: int, end: int) -> None:
        resource = self._resources.get(request.resource_id)
        if resource is None or resource.owner_id != owner.owner_id:
            raise ResourceNotFound(f"Resource {request.resource_id} not found")
        if not resource.active:
            raise ResourceUnavailable(
                f"Resource {resource.name or resource.id} is inactive",
                service_id=request.service_id, resource_id=resource.id,
            )
        if not resource.can_perform(request.service_id):
            raise ResourceUnavailable(
                f"Resource {resource.name or resource.id} cannot perform service "
                f"'{request.label}'",
                service_id=request.service_id, resource_id=resource.id,
            )
        if not self._resolver.resource_admits(resource.id, owner, day, start, end):
            raise ResourceUnavailable(
                f"Resource {resource.name or resource.id} is not available for service "
                f"'{request.label}' at {format_time(start)}-{format_time(end)} on {day}",
                service_id=request.service_id, resource_id=resource.id,
            )

    @staticmethod
    def _check_same_day(requests: Sequence[ServiceRequest], overall_start: int,
                        day: date) -> None:
        cursor = overall_start
        for request in requests:
            cursor += request.duration_minutes
            if cursor > MINUTES_PER_DAY:
                raise ResourceUnavailable(
                    f"Service '{request.label}' would run past midnight on {day}",
                    service_id=request.service_id, resource_id=request.resource_id,
                )
