"""Tests for availability queries across both assignment modes."""

from dataclasses import replace

import pytest

from appointment_engine.errors import ResourceNotCapable, ResourceNotFound
from appointment_engine.schemas.booking_schema import ResourceAvailability
from appointment_engine.seed import DEMO_OWNER_ID
from appointment_engine.services import AvailabilityService
from tests.conftest import BEARD, HAIRCUT, SUNDAY, TUESDAY, make_booking


class TestSingleResource:
    def test_full_day(self, availability_service):
        starts = availability_service.compute_availability(DEMO_OWNER_ID, "res-joao", [HAIRCUT], TUESDAY)
        assert starts[0] == "09:00"
        assert starts[-1] == "17:30"
        assert len(starts) == 52

    def test_existing_booking_blocks_overlaps(self, availability_service, context):
        context.bookings.insert(make_booking("res-joao", "10:00", "10:30"))
        starts = availability_service.compute_availability(DEMO_OWNER_ID, "res-joao", [HAIRCUT], TUESDAY)

        assert "09:30" in starts
        assert "09:40" not in starts
        assert "10:00" not in starts
        assert "10:30" in starts

    def test_summed_duration(self, availability_service):
        starts = availability_service.compute_availability(
            DEMO_OWNER_ID, "res-joao", [HAIRCUT, BEARD], TUESDAY,
        )
        assert starts[-1] == "17:10"

    def test_day_off_is_empty(self, availability_service):
        assert availability_service.compute_availability(DEMO_OWNER_ID, "res-joao", [HAIRCUT], SUNDAY) == []

    def test_inactive_resource_offers_nothing(self, availability_service, context):
        context.resources.add(replace(context.resources.get("res-joao"), active=False))
        assert availability_service.compute_availability(DEMO_OWNER_ID, "res-joao", [HAIRCUT], TUESDAY) == []

    def test_resource_not_capable(self, availability_service):
        with pytest.raises(ResourceNotCapable, match="Barba"):
            availability_service.compute_availability(DEMO_OWNER_ID, "res-maria", [BEARD], TUESDAY)

    def test_unknown_resource(self, availability_service):
        with pytest.raises(ResourceNotFound):
            availability_service.compute_availability(DEMO_OWNER_ID, "res-ghost", [HAIRCUT], TUESDAY)

    def test_requires_services(self, availability_service):
        with pytest.raises(ValueError):
            availability_service.compute_availability(DEMO_OWNER_ID, "res-joao", [], TUESDAY)


class TestSharedResourceMode:
    def test_grouped_by_capable_resource(self, availability_service):
        result = availability_service.compute_availability(DEMO_OWNER_ID, None, [HAIRCUT], TUESDAY)

        assert all(isinstance(r, ResourceAvailability) for r in result)
        assert [r.resource_id for r in result] == ["res-joao", "res-maria"]
        assert result[1].resource_name == "Maria"
        assert result[1].starts[0] == "10:00"

    def test_only_resources_capable_of_every_service(self, availability_service):
        result = availability_service.compute_availability(DEMO_OWNER_ID, None, [HAIRCUT, BEARD], TUESDAY)
        assert [r.resource_id for r in result] == ["res-joao"]
        assert "17:30" not in result[0].starts


class TestPerServiceMode:
    @pytest.fixture
    def service(self, per_service_context):
        return AvailabilityService(per_service_context)

    def test_starts_with_split_assignment(self, service):
        starts = service.compute_availability(DEMO_OWNER_ID, None, [HAIRCUT, BEARD], TUESDAY)
        # haircut with joao until 18:00, beard with pedro who works until 19:00
        assert "17:30" in starts
        assert "17:40" not in starts
        assert starts[0] == "09:00"

    def test_agrees_with_planner(self, service, per_service_context):
        per_service_context.bookings.insert(make_booking("res-joao", "09:00", "12:00"))
        starts = service.compute_availability(DEMO_OWNER_ID, None, [HAIRCUT, BEARD], TUESDAY)
        # haircut goes to maria from 10:00, beard needs joao (busy) or pedro (from 12:00)
        assert "10:00" not in starts
        assert "11:30" in starts
        assert "09:00" not in starts


class TestCheckAvailability:
    def test_available(self, availability_service):
        check = availability_service.check_availability(
            DEMO_OWNER_ID, "res-joao", HAIRCUT, TUESDAY, "10:00",
        )
        assert check.available
        assert check.reason is None

    def test_taken(self, availability_service, context):
        context.bookings.insert(make_booking("res-joao", "10:00", "10:30"))
        check = availability_service.check_availability(
            DEMO_OWNER_ID, "res-joao", HAIRCUT, TUESDAY, "10:00",
        )
        assert not check.available
        assert check.reason == "Time slot is not available"

    def test_inactive_resource_not_available(self, availability_service, context):
        context.resources.add(replace(context.resources.get("res-joao"), active=False))
        check = availability_service.check_availability(
            DEMO_OWNER_ID, "res-joao", HAIRCUT, TUESDAY, "10:00",
        )
        assert not check.available

    def test_error_becomes_reason(self, availability_service):
        check = availability_service.check_availability(
            DEMO_OWNER_ID, "res-maria", BEARD, TUESDAY, "10:00",
        )
        assert not check.available
        assert "cannot perform" in check.reason

    def test_bad_time(self, availability_service):
        check = availability_service.check_availability(
            DEMO_OWNER_ID, "res-joao", HAIRCUT, TUESDAY, "25:00",
        )
        assert not check.available
        assert "HH:MM" in check.reason
