"""
Court endpoints – an owner's courts within one venue.
"""

import logging

from fastapi import APIRouter, status

from quickcourt.dependencies import Courts, CurrentUser, TimeSlots, Venues
from quickcourt.errors import BadRequestError, handler_errors
from quickcourt.models import Court, CourtCreate, CourtUpdate, Envelope, MessageResponse
from quickcourt.policy import Action, owned_court, owned_venue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/owner/venues/{venue_id}/courts", tags=["courts"])


@router.get(
    "",
    response_model=Envelope[list[Court]],
    operation_id="listVenueCourts",
    summary="List the courts of a venue",
)
async def list_courts(venue_id: int, user: CurrentUser, venues: Venues, courts: Courts):
    await owned_venue(venues, user, venue_id, Action.COURT_MANAGE)
    with handler_errors("Failed to fetch courts"):
        items = await courts.list_by_venue(venue_id)
    return Envelope(data=items)


@router.post(
    "",
    response_model=Envelope[Court],
    status_code=status.HTTP_201_CREATED,
    operation_id="createCourt",
    summary="Add a court to a venue",
)
async def create_court(venue_id: int, body: CourtCreate, user: CurrentUser, venues: Venues, courts: Courts):
    await owned_venue(venues, user, venue_id, Action.COURT_MANAGE)
    with handler_errors("Failed to create court"):
        court = await courts.create(venue_id, body)
    logger.info("Court %d added to venue %d", court.id, venue_id)
    return Envelope(message="Court created successfully", data=court)


@router.get(
    "/{court_id}",
    response_model=Envelope[Court],
    operation_id="getCourt",
    summary="Get one court",
)
async def get_court(venue_id: int, court_id: int, user: CurrentUser, venues: Venues, courts: Courts):
    _venue, court = await owned_court(venues, courts, user, venue_id, court_id)
    return Envelope(data=court)


@router.put(
    "/{court_id}",
    response_model=Envelope[Court],
    operation_id="updateCourt",
    summary="Update a court",
)
async def update_court(
    venue_id: int,
    court_id: int,
    body: CourtUpdate,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
):
    await owned_court(venues, courts, user, venue_id, court_id)
    fields = body.model_dump(exclude_none=True)
    if not fields:
        raise BadRequestError("No valid fields to update")
    with handler_errors("Failed to update court"):
        court = await courts.update(court_id, fields)
    return Envelope(message="Court updated successfully", data=court)


@router.patch(
    "/{court_id}/toggle-status",
    response_model=Envelope[Court],
    operation_id="toggleCourtStatus",
    summary="Activate or deactivate a court",
)
async def toggle_court_status(venue_id: int, court_id: int, user: CurrentUser, venues: Venues, courts: Courts):
    await owned_court(venues, courts, user, venue_id, court_id)
    with handler_errors("Failed to toggle court status"):
        court = await courts.toggle_active(court_id)
    state = "activated" if court.is_active else "deactivated"
    return Envelope(message=f"Court {state} successfully", data=court)


@router.delete(
    "/{court_id}",
    response_model=MessageResponse,
    operation_id="deleteCourt",
    summary="Delete a court and its time slots",
)
async def delete_court(
    venue_id: int,
    court_id: int,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    time_slots: TimeSlots,
):
    await owned_court(venues, courts, user, venue_id, court_id)
    with handler_errors("Failed to delete court"):
        await time_slots.delete_by_court(court_id)
        await courts.delete(court_id)
    logger.info("Court %d deleted from venue %d", court_id, venue_id)
    return MessageResponse(message="Court deleted successfully")
