"""
Demo data: one barbershop with three barbers and a small service menu.

Everything is kept in the in-memory repositories, so the CLI and the
test-suite can run a full booking flow without a database.
"""

from decimal import Decimal
from typing import Optional

from appointment_engine.scheduling.models import (
    DayHours,
    OperatingHours,
    OwnerConfig,
    Resource,
    Service,
    WorkingWindow,
)
from appointment_engine.repositories.memory import (
    InMemoryBookingRepository,
    InMemoryOwnerConfigRepository,
    InMemoryResourceRepository,
    InMemoryServiceCatalog,
)
from appointment_engine.scheduling.transaction import Clock
from appointment_engine.services.context import EngineContext

DEMO_OWNER_ID = "barbearia-moderna"

# 0 = Sunday
DEMO_HOURS = OperatingHours(days={
    0: DayHours.closed_day(),
    1: DayHours.of("09:00", "19:00"),
    2: DayHours.of("09:00", "19:00"),
    3: DayHours.of("09:00", "19:00"),
    4: DayHours.of("09:00", "19:00"),
    5: DayHours.of("09:00", "20:00"),
    6: DayHours.of("09:00", "17:00"),
})

DEMO_SERVICES = [
    Service("svc-haircut", DEMO_OWNER_ID, "Corte de cabelo", 30, Decimal("45.00")),
    Service("svc-beard", DEMO_OWNER_ID, "Barba", 20, Decimal("30.00")),
    Service("svc-coloring", DEMO_OWNER_ID, "Coloração", 60, Decimal("120.00")),
]

DEMO_RESOURCES = [
    Resource("res-joao", DEMO_OWNER_ID, "João", ("svc-haircut", "svc-beard")),
    Resource("res-maria", DEMO_OWNER_ID, "Maria", ("svc-haircut", "svc-coloring")),
    Resource("res-pedro", DEMO_OWNER_ID, "Pedro", ("svc-beard",)),
]

# (resource, weekdays, start, end)
DEMO_SHIFTS = [
    ("res-joao", (1, 2, 3, 4, 5), "09:00", "18:00"),
    ("res-joao", (6,), "09:00", "13:00"),
    ("res-maria", (2, 3, 4, 5, 6), "10:00", "17:00"),
    ("res-pedro", (1, 2, 3, 4, 5), "12:00", "19:00"),
]


def demo_owner(**overrides) -> OwnerConfig:
    return OwnerConfig.from_defaults(DEMO_OWNER_ID, operating_hours=DEMO_HOURS, **overrides)


def build_demo_context(clock: Optional[Clock] = None, **owner_overrides) -> EngineContext:
    """Fresh in-memory repositories seeded with the demo barbershop."""
    resources = InMemoryResourceRepository()
    catalog = InMemoryServiceCatalog()
    owners = InMemoryOwnerConfigRepository()

    owners.add(demo_owner(**owner_overrides))
    for service in DEMO_SERVICES:
        catalog.add(service)
    for resource in DEMO_RESOURCES:
        resources.add(resource)
    for resource_id, weekdays, start, end in DEMO_SHIFTS:
        for weekday in weekdays:
            resources.save_window(WorkingWindow.of(resource_id, weekday, start, end))

    kwargs = {"clock": clock} if clock is not None else {}
    return EngineContext(
        resources=resources,
        bookings=InMemoryBookingRepository(),
        catalog=catalog,
        owners=owners,
        **kwargs,
    )
