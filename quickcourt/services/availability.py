"""
Availability projection.

Weekly templates say *when a court is normally open*; bookings say *what is
already taken on a given calendar day*.  The projector combines the two:

  • date → day-of-week index (0 = Sunday, matching ``DAY_NAMES``)
  • templates for that day that are marked available
  • minus any template overlapping a non-cancelled booking on that date

No timezone handling: dates are plain calendar days and "today" is the
server's local date.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, timedelta
from typing import Callable

from quickcourt.errors import BadRequestError
from quickcourt.models import (
    DAY_NAMES,
    Booking,
    DaySlots,
    DayStats,
    NextAvailableSlot,
    TimeSlot,
    day_name,
    duration_hours,
)
from quickcourt.repositories.base import BookingLookup, TimeSlotRepository

logger = logging.getLogger(__name__)

# How far past the requested day find_next_available_slot looks
NEXT_SLOT_SEARCH_DAYS = 7


def day_of_week(d: date) -> int:
    """Sunday-based weekday index (Python's weekday() is Monday-based)."""
    return (d.weekday() + 1) % 7


def parse_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError):
        raise BadRequestError("Invalid date format. Use YYYY-MM-DD", f"Invalid date: {raw!r}") from None


def _is_blocked(slot: TimeSlot, bookings: list[Booking]) -> bool:
    return any(slot.overlaps(b.start_time, b.end_time) for b in bookings)


class AvailabilityProjector:
    def __init__(
        self,
        slots: TimeSlotRepository,
        bookings: BookingLookup,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.slots = slots
        self.bookings = bookings
        self.today = today

    async def find_by_court(
        self,
        court_id: int,
        day_of_week: int | None = None,
        include_unavailable: bool = False,
    ) -> list[TimeSlot]:
        return await self.slots.find_by_court(court_id, day_of_week, include_unavailable)

    async def get_available_slots(self, court_id: int, target: date | str) -> list[TimeSlot]:
        """Free templates for one concrete calendar date, ordered by start time."""
        if isinstance(target, str):
            target = parse_date(target)

        templates = await self.slots.find_by_court(court_id, day_of_week(target))
        if not templates:
            return []

        booked = await self.bookings.find_blocking(court_id, target)
        return [s for s in templates if not _is_blocked(s, booked)]

    async def get_slots_by_day(self, court_id: int) -> dict[int, list[TimeSlot]]:
        """All templates (available or not) grouped by day index. Empty days are omitted."""
        grouped: dict[int, list[TimeSlot]] = OrderedDict()
        for slot in await self.slots.find_by_court(court_id, include_unavailable=True):
            grouped.setdefault(slot.day_of_week, []).append(slot)
        return grouped

    async def get_court_stats(self, court_id: int) -> dict[str, DayStats]:
        """Per day name: how many templates exist, are open and are blocked."""
        stats: dict[str, DayStats] = OrderedDict()
        for slot in await self.slots.find_by_court(court_id, include_unavailable=True):
            day = stats.setdefault(day_name(slot.day_of_week), DayStats())
            day.total += 1
            if slot.is_available:
                day.available += 1
            else:
                day.blocked += 1
        return stats

    async def get_upcoming_slots(self, court_id: int, num_days: int = 7) -> list[DaySlots]:
        """One entry per calendar day starting today, always ``num_days`` long."""
        start = self.today()
        upcoming: list[DaySlots] = []
        for offset in range(num_days):
            current = start + timedelta(days=offset)
            dow = day_of_week(current)
            upcoming.append(
                DaySlots(
                    date=current,
                    day_of_week=dow,
                    day_name=DAY_NAMES[dow],
                    slots=await self.get_available_slots(court_id, current),
                )
            )
        return upcoming

    async def find_next_available_slot(
        self,
        court_id: int,
        target: date,
        start_time: str,
        end_time: str,
    ) -> NextAvailableSlot | None:
        """First free template, from ``target`` onwards, at least as long as the requested window."""
        wanted = duration_hours(start_time, end_time)
        for offset in range(NEXT_SLOT_SEARCH_DAYS + 1):
            current = target + timedelta(days=offset)
            for slot in await self.get_available_slots(court_id, current):
                if slot.duration_hours >= wanted:
                    return NextAvailableSlot(
                        date=current,
                        start_time=slot.start_time,
                        end_time=slot.end_time,
                        price=slot.price,
                    )
        return None

    async def is_court_free(self, court_id: int, target: date, start_time: str, end_time: str) -> bool:
        """True if no non-cancelled booking overlaps the window."""
        booked = await self.bookings.find_blocking(court_id, target)
        return not any(b.start_time < end_time and b.end_time > start_time for b in booked)
