"""Domain records shared by the scheduling engine.

Times of day are stored as minutes since midnight; ``format_time`` turns
them back into ``HH:MM`` at the boundary.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from appointment_engine.config import SchedulingDefaults, settings
from appointment_engine.scheduling.status import BookingStatus, is_active
from appointment_engine.scheduling.timeutils import (
    TimeLike,
    format_time,
    parse_time,
    ranges_overlap,
)


class AssignmentMode(str, Enum):
    """How the services of one reservation are spread over resources."""

    SHARED_RESOURCE = "shared_resource"
    PER_SERVICE = "per_service"


@dataclass(frozen=True)
class TimeRange:
    """Half-open time-of-day interval ``[start, end)`` in minutes."""

    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "TimeRange") -> bool:
        return ranges_overlap(self.start, self.end, other.start, other.end)

    def contains(self, start: int, end: int) -> bool:
        return self.start <= start and end <= self.end

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


@dataclass(frozen=True)
class WorkingWindow:
    """A resource's (or owner's) time-of-day window on one weekday."""

    resource_id: str
    weekday: int
    start: int
    end: int
    active: bool = True
    id: Optional[str] = None

    @classmethod
    def of(cls, resource_id: str, weekday: int, start: TimeLike, end: TimeLike,
           active: bool = True, id: Optional[str] = None) -> "WorkingWindow":
        return cls(resource_id, weekday, parse_time(start), parse_time(end), active, id)

    @property
    def range(self) -> TimeRange:
        return TimeRange(self.start, self.end)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def admits(self, start: int, end: int) -> bool:
        """True when ``[start, end)`` lies fully inside an active window."""
        return self.active and self.start <= start and end <= self.end

    def __str__(self) -> str:
        return f"{format_time(self.start)} - {format_time(self.end)}"


@dataclass(frozen=True)
class DayHours:
    """Owner opening hours for one weekday."""

    open: Optional[int] = None
    close: Optional[int] = None
    closed: bool = False

    @classmethod
    def of(cls, open: TimeLike, close: TimeLike) -> "DayHours":
        return cls(parse_time(open), parse_time(close), False)

    @classmethod
    def closed_day(cls) -> "DayHours":
        return cls(closed=True)


@dataclass(frozen=True)
class OperatingHours:
    """Weekly opening hours of the owning business, keyed by weekday (0 = Sunday)."""

    days: dict[int, DayHours] = field(default_factory=dict)

    def window_for(self, owner_id: str, weekday: int) -> Optional[WorkingWindow]:
        """Parent window for ``weekday``; inactive when the owner is closed, None if undefined."""
        hours = self.days.get(weekday)
        if hours is None:
            return None
        if hours.closed or hours.open is None or hours.close is None:
            return WorkingWindow(owner_id, weekday, 0, 0, active=False)
        return WorkingWindow(owner_id, weekday, hours.open, hours.close)


@dataclass(frozen=True)
class Resource:
    """A schedulable entity (staff member). ``services`` are capability tags."""

    id: str
    owner_id: str
    name: str
    services: tuple[str, ...] = ()
    active: bool = True

    def can_perform(self, service_id: str) -> bool:
        return service_id in self.services


@dataclass(frozen=True)
class Service:
    """Catalog entry; duration and price are copied into bookings at request time."""

    id: str
    owner_id: str
    name: str
    duration_minutes: int
    price: Decimal
    active: bool = True


@dataclass(frozen=True)
class ServiceRequest:
    """One requested service with its catalog snapshot and optional pinned resource."""

    service_id: str
    duration_minutes: int
    resource_id: Optional[str] = None
    price: Decimal = Decimal("0")
    service_name: str = ""

    @classmethod
    def from_service(cls, service: Service, resource_id: Optional[str] = None) -> "ServiceRequest":
        return cls(
            service_id=service.id,
            duration_minutes=service.duration_minutes,
            resource_id=resource_id,
            price=service.price,
            service_name=service.name,
        )

    @property
    def label(self) -> str:
        return self.service_name or self.service_id


@dataclass(frozen=True)
class PlannedService:
    """A request resolved to a resource and a concrete sub-interval."""

    request: ServiceRequest
    resource_id: str
    start: int
    end: int


@dataclass(frozen=True)
class ReservationPlan:
    """Ordered, back-to-back sub-intervals of one reservation."""

    date: date
    items: tuple[PlannedService, ...]

    @property
    def start(self) -> int:
        return self.items[0].start

    @property
    def end(self) -> int:
        return self.items[-1].end

    @property
    def resource_ids(self) -> list[str]:
        return [item.resource_id for item in self.items]


@dataclass
class Booking:
    """Persisted booking row; one per service of a reservation."""

    id: str
    owner_id: str
    resource_id: str
    service_id: str
    date: date
    start_time: int
    end_time: int
    duration_minutes: int
    price: Decimal
    status: BookingStatus
    reservation_group_id: str
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: Optional[str] = None
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_active(self) -> bool:
        return is_active(self.status)

    @property
    def interval(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    def copy(self, **changes) -> "Booking":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "resource_id": self.resource_id,
            "service_id": self.service_id,
            "date": self.date.isoformat(),
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
            "duration_minutes": self.duration_minutes,
            "price": str(self.price),
            "status": self.status.value,
            "reservation_group_id": self.reservation_group_id,
            "customer_name": self.customer_name,
            "cancellation_reason": self.cancellation_reason,
        }


@dataclass(frozen=True)
class OwnerConfig:
    """Per-owner scheduling settings, passed explicitly into every engine call."""

    owner_id: str
    slot_granularity_minutes: int = 10
    min_advance_hours: float = 2
    max_advance_days: float = 90
    requires_approval: bool = False
    timezone: str = "America/Sao_Paulo"
    assignment_mode: AssignmentMode = AssignmentMode.SHARED_RESOURCE
    operating_hours: OperatingHours = field(default_factory=OperatingHours)

    @classmethod
    def from_defaults(cls, owner_id: str, defaults: Optional[SchedulingDefaults] = None,
                      **overrides) -> "OwnerConfig":
        """Build an owner config from the application defaults plus explicit overrides."""
        defaults = defaults or settings.scheduling
        values = dict(
            slot_granularity_minutes=defaults.slot_granularity_minutes,
            min_advance_hours=defaults.min_advance_hours,
            max_advance_days=defaults.max_advance_days,
            requires_approval=defaults.requires_approval,
            timezone=defaults.timezone,
            assignment_mode=AssignmentMode(defaults.assignment_mode),
        )
        values.update(overrides)
        values["assignment_mode"] = AssignmentMode(values["assignment_mode"])
        return cls(owner_id=owner_id, **values)

    def parent_window(self, weekday: int) -> Optional[WorkingWindow]:
        return self.operating_hours.window_for(self.owner_id, weekday)
