"""
Storage interfaces used by the services.

The SQLite repositories in this package implement these protocols; tests
swap in the in-memory fake from ``tests/mocks/store.py`` so the availability
logic can be exercised without a database.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol

from quickcourt.models import Booking, BookingStatus, Court, TimeSlot, TimeSlotCreate, Venue


class TimeSlotRepository(Protocol):
    """Weekly availability templates, keyed by court and day of week."""

    async def create(
        self,
        venue_id: int,
        court_id: int,
        day_of_week: int,
        start_time: str,
        end_time: str,
        is_available: bool = True,
    ) -> TimeSlot:
        """Insert one template. Raises ConflictError on an exact duplicate."""
        ...

    async def create_many(self, venue_id: int, court_id: int, slots: list[TimeSlotCreate]) -> int:
        """Insert templates, skipping exact duplicates. Returns the number inserted."""
        ...

    async def get(self, slot_id: int) -> TimeSlot | None: ...

    async def find_by_court(
        self,
        court_id: int,
        day_of_week: int | None = None,
        include_unavailable: bool = False,
    ) -> list[TimeSlot]:
        """Templates of a court ordered by day, then start time."""
        ...

    async def update(self, slot_id: int, fields: dict[str, Any]) -> TimeSlot | None: ...

    async def set_availability(self, slot_id: int, is_available: bool) -> TimeSlot | None: ...

    async def toggle_availability(self, slot_id: int) -> TimeSlot | None: ...

    async def delete(self, slot_id: int) -> bool: ...

    async def delete_by_court(self, court_id: int) -> int: ...

    async def delete_by_venue(self, venue_id: int) -> int: ...


class BookingLookup(Protocol):
    """The read side of bookings the availability projector needs."""

    async def find_blocking(
        self,
        court_id: int,
        booking_date: date,
        exclude_booking_id: int | None = None,
    ) -> list[Booking]:
        """Non-cancelled bookings of a court on one calendar day."""
        ...


class BookingRepository(BookingLookup, Protocol):
    async def get(self, booking_id: int) -> Booking | None: ...

    async def create_if_free(
        self,
        user_id: int,
        court_id: int,
        venue_id: int,
        booking_date: date,
        start_time: str,
        end_time: str,
        total_amount: float,
        notes: str | None = None,
    ) -> Booking:
        """Check for overlaps and insert atomically. Raises ConflictError."""
        ...

    async def reschedule_if_free(
        self,
        booking_id: int,
        court_id: int,
        new_date: date,
        start_time: str,
        end_time: str,
        total_amount: float,
    ) -> Booking: ...

    async def set_status(
        self,
        booking_id: int,
        status: BookingStatus,
        reason: str | None = None,
    ) -> Booking | None: ...


class CourtLookup(Protocol):
    async def get(self, court_id: int) -> Court | None: ...


class VenueLookup(Protocol):
    async def get(self, venue_id: int) -> Venue | None: ...
