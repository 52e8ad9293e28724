"""
Availability queries over the scheduling engine.

``compute_availability`` answers "which start times can take these
services on this date" for one resource or for every capable resource,
following the owner's assignment mode so the answer matches what
``create_booking`` would accept.
"""

import logging
from datetime import date
from typing import Optional, Sequence, Union

from appointment_engine.errors import BookingRejected, ResourceNotCapable, SchedulingError
from appointment_engine.scheduling.models import (
    AssignmentMode,
    OwnerConfig,
    Service,
    ServiceRequest,
)
from appointment_engine.scheduling.slots import available_starts, generate_slots
from appointment_engine.scheduling.timeutils import TimeLike, format_time, parse_time
from appointment_engine.schemas.booking_schema import AvailabilityCheck, ResourceAvailability
from appointment_engine.services.context import EngineContext

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Read-only availability answers; an empty list is a valid answer."""

    def __init__(self, context: EngineContext) -> None:
        self._ctx = context

    def compute_availability(
        self,
        owner_id: str,
        resource_id: Optional[str],
        service_ids: Sequence[str],
        day: date,
    ) -> Union[list[str], list[ResourceAvailability]]:
        """
        Available ``HH:MM`` starts for the given services on ``day``.

        Returns:
            With a resource: the starts on that resource for the summed duration.
            Without one, in shared_resource mode: one ``ResourceAvailability``
            per resource capable of every service, in creation order.
            Without one, in per_service mode: the starts for which a complete
            auto-assigned plan exists.

        Raises:
            OwnerNotFound, ResourceNotFound, ServiceNotFound, ResourceNotCapable
        """
        if not service_ids:
            raise ValueError("At least one service ID is required")

        owner = self._ctx.require_owner(owner_id)
        services = [self._ctx.require_service(sid, owner_id) for sid in service_ids]
        total = sum(s.duration_minutes for s in services)

        if resource_id is not None:
            resource = self._ctx.require_resource(resource_id, owner_id)
            for service in services:
                if not resource.can_perform(service.id):
                    raise ResourceNotCapable(
                        f"Resource {resource.name or resource.id} cannot perform "
                        f"service: {service.name}"
                    )
            return [format_time(s) for s in self._starts_on(resource_id, owner, day, total)]

        if owner.assignment_mode == AssignmentMode.SHARED_RESOURCE:
            result = []
            for rid in self._ctx.resolver.capable_of_all(list(service_ids), owner):
                resource = self._ctx.resources.get(rid)
                starts = self._starts_on(rid, owner, day, total)
                result.append(ResourceAvailability(
                    resource_id=rid,
                    resource_name=resource.name if resource else "",
                    starts=[format_time(s) for s in starts],
                ))
            return result

        return [format_time(s) for s in self._per_service_starts(services, owner, day)]

    def check_availability(
        self,
        owner_id: str,
        resource_id: str,
        service_id: str,
        day: date,
        start_time: TimeLike,
    ) -> AvailabilityCheck:
        """Whether one specific start is offered; failures become a reason."""
        try:
            start = format_time(parse_time(start_time))
            starts = self.compute_availability(owner_id, resource_id, [service_id], day)
        except SchedulingError as exc:
            return AvailabilityCheck(available=False, reason=exc.message)

        available = start in starts
        return AvailabilityCheck(
            available=available,
            reason=None if available else "Time slot is not available",
        )

    def _starts_on(self, resource_id: str, owner: OwnerConfig, day: date,
                   duration: int) -> list[int]:
        resource = self._ctx.resources.get(resource_id)
        if resource is None or not resource.active:
            logger.debug("Resource %s is inactive; no starts offered", resource_id)
            return []
        window = self._ctx.windows.resolve_for_date(resource_id, day, owner)
        if window is None:
            logger.debug("Resource %s does not work on %s", resource_id, day)
            return []
        busy = self._ctx.occupancy.busy_intervals(resource_id, day)
        return available_starts(window, busy, duration, owner.slot_granularity_minutes)

    def _per_service_starts(self, services: list[Service], owner: OwnerConfig,
                            day: date) -> list[int]:
        # candidate grid: slots of every resource able to start the first service
        candidates: set[int] = set()
        for rid in self._ctx.resources.list_capable(services[0].id, owner.owner_id):
            window = self._ctx.windows.resolve_for_date(rid, day, owner)
            if window is not None:
                candidates.update(generate_slots(window, owner.slot_granularity_minutes))

        requests = [ServiceRequest.from_service(s) for s in services]
        starts = []
        for start in sorted(candidates):
            try:
                self._ctx.planner.plan(requests, start, day, owner)
            except BookingRejected:
                continue
            starts.append(start)
        return starts
