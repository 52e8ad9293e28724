"""Tests for occupancy lookup, conflict detection and the store constraint."""

import pytest

from appointment_engine.errors import UniquenessViolation
from appointment_engine.repositories.memory import InMemoryBookingRepository
from appointment_engine.scheduling.models import TimeRange
from appointment_engine.scheduling.occupancy import ConflictDetector, OccupancyIndex
from appointment_engine.scheduling.status import BookingStatus
from appointment_engine.scheduling.timeutils import parse_time
from tests.conftest import TUESDAY, SATURDAY, make_booking


@pytest.fixture
def store():
    repo = InMemoryBookingRepository()
    repo.insert(make_booking("res-joao", "10:00", "10:30", booking_id="BK-A"))
    repo.insert(make_booking("res-joao", "11:00", "11:45", booking_id="BK-B"))
    repo.insert(make_booking("res-joao", "12:00", "12:30", booking_id="BK-C",
                             status=BookingStatus.CANCELLED))
    repo.insert(make_booking("res-maria", "10:00", "11:00", booking_id="BK-D"))
    repo.insert(make_booking("res-joao", "10:00", "10:30", day=SATURDAY, booking_id="BK-E"))
    return repo


@pytest.fixture
def detector(store):
    return ConflictDetector(OccupancyIndex(store))


class TestOccupancyIndex:
    def test_only_active_bookings_of_resource_and_date(self, store):
        busy = OccupancyIndex(store).busy_intervals("res-joao", TUESDAY)
        assert sorted(busy, key=lambda r: r.start) == [TimeRange(600, 630), TimeRange(660, 705)]

    def test_exclude_booking(self, store):
        busy = OccupancyIndex(store).busy_intervals("res-joao", TUESDAY, exclude_booking_id="BK-A")
        assert busy == [TimeRange(660, 705)]

    def test_empty_day(self, store):
        assert OccupancyIndex(store).busy_intervals("res-pedro", TUESDAY) == []


class TestConflictDetector:
    def test_touching_is_not_a_conflict(self, detector):
        assert not detector.has_conflict("res-joao", TUESDAY, parse_time("10:30"), parse_time("11:00"))

    def test_overlap_is_a_conflict(self, detector):
        conflicts = detector.find_conflicts(
            "res-joao", TUESDAY, parse_time("10:20"), parse_time("10:50"),
        )
        assert [b.id for b in conflicts] == ["BK-A"]

    def test_cancelled_booking_frees_time(self, detector):
        assert not detector.has_conflict("res-joao", TUESDAY, parse_time("12:00"), parse_time("12:30"))

    def test_excluded_booking_is_ignored(self, detector):
        assert not detector.has_conflict(
            "res-joao", TUESDAY, parse_time("10:10"), parse_time("10:40"), exclude_booking_id="BK-A",
        )


class TestExclusionConstraint:
    def test_overlapping_insert_rejected(self, store):
        with pytest.raises(UniquenessViolation):
            store.insert(make_booking("res-joao", "10:15", "10:45"))

    def test_duplicate_id_rejected(self, store):
        with pytest.raises(UniquenessViolation, match="already exists"):
            store.insert(make_booking("res-pedro", "14:00", "14:30", booking_id="BK-A"))

    def test_cancelled_rows_may_overlap(self, store):
        store.insert(make_booking("res-joao", "10:00", "10:30", status=BookingStatus.CANCELLED))

    def test_update_into_overlap_rejected(self, store):
        moved = store.get("BK-B").copy(start_time=parse_time("10:15"), end_time=parse_time("11:00"))
        with pytest.raises(UniquenessViolation):
            store.update(moved)

    def test_reads_return_copies(self, store):
        booking = store.get("BK-A")
        booking.status = BookingStatus.CANCELLED
        assert store.get("BK-A").status == BookingStatus.CONFIRMED

    def test_list_by_group_sorted_by_start(self, store):
        rows = store.list_by_group("RSV-TEST")
        assert [r.start_time for r in rows] == sorted(r.start_time for r in rows)
