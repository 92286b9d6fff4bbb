"""
Booking endpoints – customers' own bookings and venue-side booking management.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from quickcourt.dependencies import BookingFlow, Bookings, CurrentUser, PaginationParams, Venues
from quickcourt.errors import BadRequestError, handler_errors
from quickcourt.models import (
    Booking,
    BookingCancel,
    BookingCreate,
    BookingCreated,
    BookingDetails,
    BookingReschedule,
    BookingStatus,
    BookingStatusUpdate,
    CancelResult,
    Envelope,
    Page,
    RescheduleResult,
    Role,
    UserInfo,
)
from quickcourt.policy import Action, authorize, owned_venue, require_permission
from quickcourt.services.email import send_booking_status_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])
owner_router = APIRouter(prefix="/api/owner/bookings", tags=["owner"])


def _check_range(start_date: date | None, end_date: date | None) -> None:
    if start_date and end_date and start_date > end_date:
        raise BadRequestError("Validation failed", "startDate must not be after endDate")


@router.get(
    "",
    response_model=Envelope[Page[Booking]],
    operation_id="listMyBookings",
    summary="Bookings of the current user",
)
async def list_my_bookings(
    bookings: Bookings,
    user: UserInfo = Depends(require_permission(Action.BOOKING_VIEW)),
    pagination: PaginationParams = Depends(PaginationParams),
    status_filter: BookingStatus | None = Query(None, alias="status"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    upcoming: bool = Query(False, description="Only non-cancelled bookings from today on"),
):
    _check_range(start_date, end_date)
    with handler_errors("Failed to fetch bookings"):
        items, total = await bookings.list_for_user(
            user.id,
            status=status_filter,
            start_date=start_date,
            end_date=end_date,
            upcoming_from=date.today() if upcoming else None,
            limit=pagination.limit,
            offset=pagination.offset,
        )
    return Envelope(data=Page(items=items, pagination=pagination.meta(total)))


@router.post(
    "",
    response_model=Envelope[BookingCreated],
    status_code=status.HTTP_201_CREATED,
    operation_id="createBooking",
    summary="Book a court for a date and time window",
)
async def create_booking(
    body: BookingCreate,
    flow: BookingFlow,
    user: UserInfo = Depends(require_permission(Action.BOOKING_CREATE)),
):
    with handler_errors("Failed to create booking"):
        booking = await flow.create(user.id, body)
    return Envelope(
        message="Booking created successfully",
        data=BookingCreated(booking=booking, payment_amount=booking.total_amount),
    )


@router.get(
    "/{booking_id}",
    response_model=Envelope[BookingDetails],
    operation_id="getBookingDetails",
    summary="One booking with what the customer may still do with it",
)
async def get_booking_details(booking_id: int, user: CurrentUser, flow: BookingFlow):
    booking = await flow.get(booking_id)
    authorize(user, Action.BOOKING_VIEW, booking, "You can only view your own bookings")
    return Envelope(
        data=BookingDetails(
            booking=booking,
            can_cancel=flow.can_cancel(booking),
            can_reschedule=flow.can_reschedule(booking),
        )
    )


@router.patch(
    "/{booking_id}/cancel",
    response_model=Envelope[CancelResult],
    operation_id="cancelBooking",
    summary="Cancel an own booking",
)
async def cancel_booking(booking_id: int, body: BookingCancel, user: CurrentUser, flow: BookingFlow):
    booking = await flow.get(booking_id)
    authorize(user, Action.BOOKING_CANCEL, booking, "You can only cancel your own bookings")
    with handler_errors("Failed to cancel booking"):
        cancelled, refund = await flow.cancel(booking, body.reason)
    return Envelope(
        message="Booking cancelled successfully",
        data=CancelResult(booking_id=cancelled.id, refund_eligible=refund.eligible, refund_amount=refund.amount),
    )


@router.patch(
    "/{booking_id}/reschedule",
    response_model=Envelope[RescheduleResult],
    operation_id="rescheduleBooking",
    summary="Move an own booking to another date or time",
)
async def reschedule_booking(booking_id: int, body: BookingReschedule, user: CurrentUser, flow: BookingFlow):
    booking = await flow.get(booking_id)
    authorize(user, Action.BOOKING_RESCHEDULE, booking, "You can only reschedule your own bookings")
    with handler_errors("Failed to reschedule booking"):
        updated, difference = await flow.reschedule(booking, body)
    return Envelope(
        message="Booking rescheduled successfully",
        data=RescheduleResult(booking=updated, price_difference=difference),
    )


# ── Owner ──────────────────────────────────────────────────────────────────


@owner_router.get(
    "",
    response_model=Envelope[Page[Booking]],
    operation_id="listVenueBookings",
    summary="Bookings across the current owner's venues",
)
async def list_venue_bookings(
    bookings: Bookings,
    venues: Venues,
    user: UserInfo = Depends(require_permission(Action.BOOKING_MANAGE)),
    pagination: PaginationParams = Depends(PaginationParams),
    status_filter: BookingStatus | None = Query(None, alias="status"),
    venue_id: int | None = Query(None, alias="venueId"),
    court_id: int | None = Query(None, alias="courtId"),
    booking_date: date | None = Query(None, alias="date"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
):
    _check_range(start_date, end_date)
    if venue_id is not None:
        await owned_venue(venues, user, venue_id, Action.BOOKING_MANAGE)

    with handler_errors("Failed to fetch bookings"):
        items, total = await bookings.list_for_owner(
            None if user.role == Role.ADMIN else user.id,
            status=status_filter,
            venue_id=venue_id,
            court_id=court_id,
            booking_date=booking_date,
            start_date=start_date,
            end_date=end_date,
            limit=pagination.limit,
            offset=pagination.offset,
        )
    return Envelope(data=Page(items=items, pagination=pagination.meta(total)))


@owner_router.patch(
    "/{booking_id}/status",
    response_model=Envelope[Booking],
    operation_id="updateBookingStatus",
    summary="Confirm or cancel a booking at one of the owner's venues",
)
async def update_booking_status(
    booking_id: int,
    body: BookingStatusUpdate,
    user: CurrentUser,
    venues: Venues,
    flow: BookingFlow,
):
    booking = await flow.get(booking_id)
    await owned_venue(venues, user, booking.venue_id, Action.BOOKING_MANAGE)

    new_status = BookingStatus(body.status)
    with handler_errors("Failed to update booking status"):
        updated = await flow.set_status(booking, new_status, body.reason)

    try:
        await send_booking_status_email(updated, body.reason)
    except Exception:
        logger.warning("Status email for booking %d was not sent", booking.id, exc_info=True)

    return Envelope(message=f"Booking {new_status.value} successfully", data=updated)
