"""Tests for TimeSlotService against the in-memory store."""

import pytest

from quickcourt.errors import BadRequestError, ConflictError, NotFoundError
from quickcourt.models import TimeSlotCreate, TimeSlotUpdate
from quickcourt.services.time_slots import TimeSlotService
from tests.mocks.models import make_time_slot
from tests.mocks.store import InMemoryTimeSlots


@pytest.fixture()
def service() -> TimeSlotService:
    return TimeSlotService(
        InMemoryTimeSlots(
            [
                make_time_slot(id=1, court_id=1, day_of_week=1, start_time="09:00", end_time="10:00"),
                make_time_slot(id=2, court_id=2, day_of_week=1, start_time="09:00", end_time="10:00"),
            ]
        )
    )


class TestCreate:
    async def test_create(self, service):
        slot = await service.create(1, 1, TimeSlotCreate(day_of_week=3, start_time="7:30", end_time="08:30"))
        assert slot.start_time == "07:30"
        assert slot.day_name == "Wednesday"
        assert slot.is_available

    async def test_exact_duplicate_is_rejected(self, service):
        with pytest.raises(ConflictError):
            await service.create(1, 1, TimeSlotCreate(day_of_week=1, start_time="09:00", end_time="10:00"))

    async def test_overlapping_template_is_allowed(self, service):
        slot = await service.create(1, 1, TimeSlotCreate(day_of_week=1, start_time="09:30", end_time="10:30"))
        assert slot.id > 2

    async def test_bulk_create_skips_duplicates(self, service):
        created = await service.create_many(
            1,
            1,
            [
                TimeSlotCreate(day_of_week=1, start_time="09:00", end_time="10:00"),
                TimeSlotCreate(day_of_week=1, start_time="10:00", end_time="11:00"),
                TimeSlotCreate(day_of_week=2, start_time="10:00", end_time="11:00"),
            ],
        )
        assert created == 2


class TestGet:
    async def test_get(self, service):
        assert (await service.get(1)).id == 1

    async def test_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.get(99)

    async def test_slot_of_another_court(self, service):
        with pytest.raises(NotFoundError):
            await service.get(2, court_id=1)


class TestUpdate:
    async def test_update_times(self, service):
        slot = await service.update(1, TimeSlotUpdate(start_time="08:00"))
        assert (slot.start_time, slot.end_time) == ("08:00", "10:00")

    async def test_empty_update(self, service):
        with pytest.raises(BadRequestError) as exc:
            await service.update(1, TimeSlotUpdate())
        assert exc.value.message == "No valid fields to update"

    async def test_update_that_inverts_window(self, service):
        with pytest.raises(BadRequestError):
            await service.update(1, TimeSlotUpdate(start_time="11:00"))

    async def test_update_into_duplicate(self, service):
        slot = await service.create(1, 1, TimeSlotCreate(day_of_week=1, start_time="10:00", end_time="11:00"))
        with pytest.raises(ConflictError):
            await service.update(slot.id, TimeSlotUpdate(start_time="09:00", end_time="10:00"))

    async def test_update_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.update(99, TimeSlotUpdate(is_available=False))


class TestAvailability:
    async def test_set_availability_is_idempotent(self, service):
        first = await service.set_availability(1, False)
        second = await service.set_availability(1, False)
        assert first.is_available is False
        assert second.is_available is False

    async def test_toggle_twice_restores(self, service):
        assert (await service.toggle_availability(1)).is_available is False
        assert (await service.toggle_availability(1)).is_available is True

    async def test_toggle_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.toggle_availability(99)


class TestDelete:
    async def test_delete(self, service):
        await service.delete(1)
        with pytest.raises(NotFoundError):
            await service.get(1)

    async def test_delete_missing(self, service):
        with pytest.raises(NotFoundError):
            await service.delete(99)

    async def test_delete_by_court(self, service):
        assert await service.delete_by_court(2) == 1
        assert await service.delete_by_court(2) == 0

    async def test_delete_by_venue(self, service):
        assert await service.delete_by_venue(1) == 2
