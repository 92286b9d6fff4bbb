"""
Booking lifecycle: create, cancel, reschedule and venue-side status changes.

Ownership is checked by the routers; this service enforces the booking rules
themselves (court/venue state, time window, overlap, cancellation policy).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable

from quickcourt.errors import BadRequestError, NotFoundError
from quickcourt.models import (
    Booking,
    BookingCreate,
    BookingReschedule,
    BookingStatus,
    Court,
    Venue,
    duration_hours,
)
from quickcourt.repositories.base import BookingRepository, CourtLookup, VenueLookup

logger = logging.getLogger(__name__)

# Cancellation policy
MIN_HOURS_BEFORE_CANCEL = 2
FULL_REFUND_HOURS = 24
PARTIAL_REFUND_RATE = 0.5

OPEN_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


@dataclass
class Refund:
    eligible: bool
    amount: float


def starts_at(booking_date: date, start_time: str) -> datetime:
    return datetime.combine(booking_date, datetime.strptime(start_time, "%H:%M").time())


def booking_amount(court: Court, start_time: str, end_time: str) -> float:
    return round(duration_hours(start_time, end_time) * court.price_per_hour, 2)


class BookingService:
    def __init__(
        self,
        bookings: BookingRepository,
        courts: CourtLookup,
        venues: VenueLookup,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.bookings = bookings
        self.courts = courts
        self.venues = venues
        self.now = now

    async def get(self, booking_id: int) -> Booking:
        booking = await self.bookings.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    async def _bookable_court(self, court_id: int) -> tuple[Court, Venue]:
        court = await self.courts.get(court_id)
        if court is None or not court.is_active:
            raise NotFoundError("Court not found or not available")
        venue = await self.venues.get(court.venue_id)
        if venue is None or not venue.is_approved:
            raise NotFoundError("Venue not available for booking")
        return court, venue

    def _ensure_future(self, booking_date: date, start_time: str, message: str) -> None:
        if starts_at(booking_date, start_time) <= self.now():
            raise BadRequestError(message)

    async def create(self, user_id: int, body: BookingCreate) -> Booking:
        court, venue = await self._bookable_court(body.court_id)
        self._ensure_future(body.booking_date, body.start_time, "Cannot book for past dates and times")

        amount = booking_amount(court, body.start_time, body.end_time)
        return await self.bookings.create_if_free(
            user_id=user_id,
            court_id=court.id,
            venue_id=venue.id,
            booking_date=body.booking_date,
            start_time=body.start_time,
            end_time=body.end_time,
            total_amount=amount,
            notes=body.notes,
        )

    def can_cancel(self, booking: Booking) -> bool:
        return booking.status in OPEN_STATUSES

    def can_reschedule(self, booking: Booking) -> bool:
        return booking.status in OPEN_STATUSES

    def refund_for(self, booking: Booking) -> Refund:
        hours = (starts_at(booking.booking_date, booking.start_time) - self.now()).total_seconds() / 3600
        if hours >= FULL_REFUND_HOURS:
            return Refund(eligible=True, amount=booking.total_amount)
        return Refund(eligible=False, amount=round(booking.total_amount * PARTIAL_REFUND_RATE, 2))

    async def cancel(self, booking: Booking, reason: str | None = None) -> tuple[Booking, Refund]:
        if booking.status == BookingStatus.CANCELLED:
            raise BadRequestError("Booking is already cancelled")
        if booking.status == BookingStatus.COMPLETED:
            raise BadRequestError("Cannot cancel completed booking")

        hours = (starts_at(booking.booking_date, booking.start_time) - self.now()).total_seconds() / 3600
        if hours < MIN_HOURS_BEFORE_CANCEL:
            raise BadRequestError("Cannot cancel booking less than 2 hours before start time")

        refund = self.refund_for(booking)
        cancelled = await self.bookings.set_status(booking.id, BookingStatus.CANCELLED, reason)
        assert cancelled is not None
        logger.info("Booking %d cancelled by customer (refund %.2f)", booking.id, refund.amount)
        return cancelled, refund

    async def reschedule(self, booking: Booking, body: BookingReschedule) -> tuple[Booking, float]:
        """Move a booking to a new date/time on the same court.

        Returns the updated booking and the price difference.
        """
        if booking.status not in OPEN_STATUSES:
            raise BadRequestError("Only confirmed or pending bookings can be rescheduled")
        self._ensure_future(body.new_date, body.new_start_time, "Cannot reschedule to past dates and times")

        court = await self.courts.get(booking.court_id)
        if court is None or not court.is_active:
            raise NotFoundError("Court not available")

        amount = booking_amount(court, body.new_start_time, body.new_end_time)
        updated = await self.bookings.reschedule_if_free(
            booking.id,
            booking.court_id,
            body.new_date,
            body.new_start_time,
            body.new_end_time,
            amount,
        )
        return updated, round(amount - booking.total_amount, 2)

    async def set_status(self, booking: Booking, status: BookingStatus, reason: str | None = None) -> Booking:
        """Venue-side confirm / cancel."""
        if booking.status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED):
            raise BadRequestError(f"Cannot change status of a {booking.status.value} booking")
        if booking.status == status:
            raise BadRequestError(f"Booking is already {status.value}")

        updated = await self.bookings.set_status(booking.id, status, reason)
        assert updated is not None
        logger.info("Booking %d set to %s", booking.id, status.value)
        return updated
