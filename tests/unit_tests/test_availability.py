"""Tests for the availability projector (weekly templates minus bookings)."""

from datetime import date, timedelta

import pytest

from quickcourt.errors import BadRequestError
from quickcourt.models import BookingStatus
from quickcourt.services.availability import AvailabilityProjector, day_of_week
from tests.mocks.models import make_booking, make_time_slot
from tests.mocks.store import InMemoryBookings, InMemoryTimeSlots

MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)


@pytest.fixture()
def slots() -> InMemoryTimeSlots:
    return InMemoryTimeSlots(
        [
            make_time_slot(id=1, day_of_week=1, start_time="09:00", end_time="10:00"),
            make_time_slot(id=2, day_of_week=1, start_time="10:00", end_time="11:00"),
            make_time_slot(id=3, day_of_week=1, start_time="11:00", end_time="12:00", is_available=False),
            make_time_slot(id=4, day_of_week=2, start_time="18:00", end_time="19:00"),
            make_time_slot(id=5, day_of_week=2, start_time="19:00", end_time="21:00"),
            make_time_slot(id=6, court_id=2, day_of_week=1, start_time="09:00", end_time="10:00"),
        ]
    )


def _projector(slots, bookings=None, today=MONDAY) -> AvailabilityProjector:
    return AvailabilityProjector(slots, InMemoryBookings(bookings), today=lambda: today)


class TestDayOfWeek:
    def test_sunday_is_zero(self):
        assert day_of_week(date(2026, 3, 1)) == 0

    def test_monday_and_saturday(self):
        assert day_of_week(MONDAY) == 1
        assert day_of_week(date(2026, 3, 7)) == 6

    def test_same_weekday_a_week_later(self):
        for offset in range(7):
            d = MONDAY + timedelta(days=offset)
            assert day_of_week(d) == day_of_week(d + timedelta(days=7))


class TestAvailableSlots:
    async def test_returns_available_templates_for_the_weekday(self, slots):
        result = await _projector(slots).get_available_slots(1, MONDAY)
        assert [s.id for s in result] == [1, 2]

    async def test_accepts_iso_string(self, slots):
        result = await _projector(slots).get_available_slots(1, "2026-03-03")
        assert [s.start_time for s in result] == ["18:00", "19:00"]

    async def test_invalid_date(self, slots):
        with pytest.raises(BadRequestError) as exc:
            await _projector(slots).get_available_slots(1, "03/02/2026")
        assert exc.value.message == "Invalid date format. Use YYYY-MM-DD"

    async def test_day_without_templates(self, slots):
        assert await _projector(slots).get_available_slots(1, date(2026, 3, 4)) == []

    async def test_booked_template_is_excluded(self, slots):
        bookings = [make_booking(booking_date=MONDAY, start_time="09:00", end_time="10:00")]
        result = await _projector(slots, bookings).get_available_slots(1, MONDAY)
        assert [s.id for s in result] == [2]

    async def test_partial_overlap_blocks_both_templates(self, slots):
        bookings = [make_booking(booking_date=MONDAY, start_time="09:30", end_time="10:30")]
        assert await _projector(slots, bookings).get_available_slots(1, MONDAY) == []

    async def test_touching_booking_does_not_block(self, slots):
        bookings = [make_booking(booking_date=MONDAY, start_time="08:00", end_time="09:00")]
        result = await _projector(slots, bookings).get_available_slots(1, MONDAY)
        assert [s.id for s in result] == [1, 2]

    async def test_cancelled_booking_does_not_block(self, slots):
        bookings = [make_booking(booking_date=MONDAY, status=BookingStatus.CANCELLED)]
        result = await _projector(slots, bookings).get_available_slots(1, MONDAY)
        assert [s.id for s in result] == [1, 2]

    async def test_pending_booking_blocks(self, slots):
        bookings = [make_booking(booking_date=MONDAY, status=BookingStatus.PENDING)]
        result = await _projector(slots, bookings).get_available_slots(1, MONDAY)
        assert [s.id for s in result] == [2]

    async def test_booking_on_other_court_is_ignored(self, slots):
        bookings = [make_booking(court_id=2, booking_date=MONDAY)]
        result = await _projector(slots, bookings).get_available_slots(1, MONDAY)
        assert [s.id for s in result] == [1, 2]

    async def test_booking_on_other_date_is_ignored(self, slots):
        bookings = [make_booking(booking_date=MONDAY + timedelta(days=7))]
        result = await _projector(slots, bookings).get_available_slots(1, MONDAY)
        assert [s.id for s in result] == [1, 2]

    async def test_idempotent(self, slots):
        projector = _projector(slots, [make_booking(booking_date=MONDAY)])
        first = await projector.get_available_slots(1, MONDAY)
        second = await projector.get_available_slots(1, MONDAY)
        assert first == second


class TestWeeklyViews:
    async def test_slots_by_day_includes_unavailable(self, slots):
        by_day = await _projector(slots).get_slots_by_day(1)
        assert sorted(by_day) == [1, 2]
        assert [s.id for s in by_day[1]] == [1, 2, 3]
        assert [s.id for s in by_day[2]] == [4, 5]

    async def test_slots_by_day_partitions_all_templates(self, slots):
        by_day = await _projector(slots).get_slots_by_day(1)
        all_ids = [s.id for day in by_day.values() for s in day]
        assert sorted(all_ids) == [1, 2, 3, 4, 5]

    async def test_court_stats(self, slots):
        stats = await _projector(slots).get_court_stats(1)
        assert list(stats) == ["Monday", "Tuesday"]
        assert (stats["Monday"].total, stats["Monday"].available, stats["Monday"].blocked) == (3, 2, 1)
        assert (stats["Tuesday"].total, stats["Tuesday"].available, stats["Tuesday"].blocked) == (2, 2, 0)

    async def test_stats_add_up(self, slots):
        for day in (await _projector(slots).get_court_stats(1)).values():
            assert day.total == day.available + day.blocked

    async def test_court_without_templates(self, slots):
        projector = _projector(slots)
        assert await projector.get_slots_by_day(99) == {}
        assert await projector.get_court_stats(99) == {}


class TestUpcomingSlots:
    async def test_always_returns_requested_number_of_days(self, slots):
        upcoming = await _projector(slots).get_upcoming_slots(1, 5)
        assert len(upcoming) == 5
        assert [d.date for d in upcoming] == [MONDAY + timedelta(days=i) for i in range(5)]

    async def test_day_metadata(self, slots):
        upcoming = await _projector(slots).get_upcoming_slots(1, 2)
        assert (upcoming[0].day_of_week, upcoming[0].day_name) == (1, "Monday")
        assert (upcoming[1].day_of_week, upcoming[1].day_name) == (2, "Tuesday")

    async def test_empty_days_are_kept(self, slots):
        upcoming = await _projector(slots).get_upcoming_slots(1, 7)
        assert upcoming[2].slots == []

    async def test_booked_templates_are_excluded(self, slots):
        bookings = [make_booking(booking_date=TUESDAY, start_time="18:00", end_time="19:00")]
        upcoming = await _projector(slots, bookings).get_upcoming_slots(1, 2)
        assert [s.id for s in upcoming[1].slots] == [5]


class TestNextAvailableSlot:
    async def test_first_free_slot_on_requested_day(self, slots):
        found = await _projector(slots).find_next_available_slot(1, MONDAY, "09:00", "10:00")
        assert found is not None
        assert (found.date, found.start_time, found.end_time) == (MONDAY, "09:00", "10:00")
        assert found.price == 20.0

    async def test_skips_slots_that_are_too_short(self, slots):
        found = await _projector(slots).find_next_available_slot(1, MONDAY, "18:00", "20:00")
        assert found is not None
        assert (found.date, found.start_time) == (TUESDAY, "19:00")
        assert found.price == 40.0

    async def test_rolls_over_to_later_days(self, slots):
        bookings = [
            make_booking(id=1, booking_date=MONDAY, start_time="09:00", end_time="11:00"),
        ]
        found = await _projector(slots, bookings).find_next_available_slot(1, MONDAY, "09:00", "10:00")
        assert found is not None
        assert found.date == TUESDAY

    async def test_nothing_within_search_window(self, slots):
        assert await _projector(slots).find_next_available_slot(1, MONDAY, "06:00", "12:00") is None


class TestCourtFree:
    async def test_free_without_bookings(self, slots):
        assert await _projector(slots).is_court_free(1, MONDAY, "09:00", "10:00")

    async def test_overlapping_booking(self, slots):
        bookings = [make_booking(booking_date=MONDAY, start_time="09:30", end_time="10:30")]
        assert not await _projector(slots, bookings).is_court_free(1, MONDAY, "10:00", "11:00")

    async def test_adjacent_booking(self, slots):
        bookings = [make_booking(booking_date=MONDAY, start_time="09:00", end_time="10:00")]
        assert await _projector(slots, bookings).is_court_free(1, MONDAY, "10:00", "11:00")
