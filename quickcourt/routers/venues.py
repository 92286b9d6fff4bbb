"""
Venue endpoints – statistics and an owner's venue management.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from quickcourt.dependencies import Bookings, Courts, CurrentUser, TimeSlots, Venues
from quickcourt.errors import BadRequestError, handler_errors
from quickcourt.models import (
    Envelope,
    MessageResponse,
    OwnerDashboard,
    UserInfo,
    Venue,
    VenueCreate,
    VenueListItem,
    VenueStats,
    VenueUpdate,
)
from quickcourt.policy import Action, owned_venue, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/venues", tags=["venues"])
owner_router = APIRouter(prefix="/api/owner", tags=["owner"])


@router.get(
    "/{venue_id}/stats",
    response_model=Envelope[VenueStats],
    operation_id="getVenueStats",
    summary="Booking counts and earnings of a venue",
)
async def get_venue_stats(
    venue_id: int,
    user: CurrentUser,
    venues: Venues,
    bookings: Bookings,
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
):
    if start_date and end_date and start_date > end_date:
        raise BadRequestError("Validation failed", "startDate must not be after endDate")
    await owned_venue(venues, user, venue_id, Action.VENUE_STATS)
    with handler_errors("Failed to fetch venue statistics"):
        stats = await bookings.venue_stats(venue_id, start_date, end_date)
    return Envelope(data=stats)


# ── Owner ──────────────────────────────────────────────────────────────────


@owner_router.get(
    "/dashboard",
    response_model=Envelope[OwnerDashboard],
    operation_id="getOwnerDashboard",
    summary="Venue, court and booking totals of the current owner",
)
async def get_owner_dashboard(
    venues: Venues,
    courts: Courts,
    bookings: Bookings,
    user: UserInfo = Depends(require_permission(Action.VENUE_MANAGE)),
):
    with handler_errors("Failed to fetch dashboard data"):
        counts = await venues.statistics(owner_id=user.id)
        total_courts, active_courts = await courts.counts_for_owner(user.id)
        totals = await bookings.owner_totals(user.id)
        recent, _ = await bookings.list_for_owner(user.id, limit=5)

    return Envelope(
        data=OwnerDashboard(
            total_venues=counts.total,
            approved_venues=counts.approved,
            pending_venues=counts.pending,
            total_courts=total_courts,
            active_courts=active_courts,
            total_bookings=totals["total"],
            confirmed_bookings=totals["confirmed"],
            total_revenue=totals["revenue"],
            recent_bookings=recent,
        )
    )


@owner_router.get(
    "/venues",
    response_model=Envelope[list[VenueListItem]],
    operation_id="listOwnerVenues",
    summary="Venues of the current owner, any approval state",
)
async def list_owner_venues(
    venues: Venues,
    user: UserInfo = Depends(require_permission(Action.VENUE_MANAGE)),
):
    with handler_errors("Failed to fetch venues"):
        items = await venues.list_by_owner(user.id)
    return Envelope(data=items)


@owner_router.post(
    "/venues",
    response_model=Envelope[Venue],
    status_code=status.HTTP_201_CREATED,
    operation_id="createVenue",
    summary="Create a venue (pending admin approval)",
)
async def create_venue(
    body: VenueCreate,
    venues: Venues,
    user: UserInfo = Depends(require_permission(Action.VENUE_CREATE)),
):
    with handler_errors("Failed to create venue"):
        venue = await venues.create(user.id, body)
    return Envelope(message="Venue created successfully. It will be visible once approved.", data=venue)


@owner_router.get(
    "/venues/{venue_id}",
    response_model=Envelope[Venue],
    operation_id="getOwnerVenue",
    summary="Get one of the current owner's venues",
)
async def get_owner_venue(venue_id: int, user: CurrentUser, venues: Venues):
    venue = await owned_venue(venues, user, venue_id)
    return Envelope(data=venue)


@owner_router.put(
    "/venues/{venue_id}",
    response_model=Envelope[Venue],
    operation_id="updateVenue",
    summary="Update a venue",
)
async def update_venue(venue_id: int, body: VenueUpdate, user: CurrentUser, venues: Venues):
    await owned_venue(venues, user, venue_id)
    fields = body.model_dump(exclude_none=True)
    if not fields:
        raise BadRequestError("No valid fields to update")
    with handler_errors("Failed to update venue"):
        venue = await venues.update(venue_id, fields)
    return Envelope(message="Venue updated successfully", data=venue)


@owner_router.delete(
    "/venues/{venue_id}",
    response_model=MessageResponse,
    operation_id="deleteVenue",
    summary="Delete a venue with its courts and time slots",
)
async def delete_venue(venue_id: int, user: CurrentUser, venues: Venues, time_slots: TimeSlots):
    await owned_venue(venues, user, venue_id)
    with handler_errors("Failed to delete venue"):
        await time_slots.delete_by_venue(venue_id)
        await venues.delete(venue_id)
    logger.info("Venue %d deleted by user %d", venue_id, user.id)
    return MessageResponse(message="Venue deleted successfully")
