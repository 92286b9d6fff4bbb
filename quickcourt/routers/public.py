"""
Public catalog endpoints – no login required.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query

from quickcourt.dependencies import Courts, PaginationParams, Projector, Venues
from quickcourt.errors import BadRequestError, NotFoundError, handler_errors
from quickcourt.models import (
    HHMM,
    CourtsBySportResponse,
    DaySlots,
    Envelope,
    Page,
    SportSummary,
    TimeSlot,
    VenueDetails,
    VenueListItem,
)
from quickcourt.services import catalog
from quickcourt.services.availability import parse_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["public"])


@router.get(
    "/venues",
    response_model=Envelope[Page[VenueListItem]],
    operation_id="listVenues",
    summary="List approved venues",
)
async def list_venues(
    venues: Venues,
    pagination: PaginationParams = Depends(PaginationParams),
    search: str | None = Query(None, description="Match name, description or city"),
    city: str | None = Query(None),
    sport_type: str | None = Query(None, alias="sportType"),
    min_rating: float | None = Query(None, alias="minRating", ge=0, le=5),
    sort_by: Literal["rating", "price", "name"] = Query("rating", alias="sortBy"),
):
    with handler_errors("Failed to fetch venues"):
        items, total = await venues.list_public(
            search=search,
            city=city,
            sport_type=sport_type,
            min_rating=min_rating,
            sort_by=sort_by,
            limit=pagination.limit,
            offset=pagination.offset,
        )
    return Envelope(data=Page(items=items, pagination=pagination.meta(total)))


@router.get(
    "/venues/{venue_id}",
    response_model=Envelope[VenueDetails],
    operation_id="getVenueDetails",
    summary="Venue with its active courts (and free slots when a date is given)",
)
async def get_venue_details(
    venue_id: int,
    venues: Venues,
    courts: Courts,
    projector: Projector,
    date_str: str | None = Query(None, alias="date", description="YYYY-MM-DD"),
):
    target = parse_date(date_str) if date_str else None
    with handler_errors("Failed to fetch venue details"):
        details = await catalog.venue_details(venues, courts, projector, venue_id, target)
    return Envelope(data=details)


@router.get(
    "/sports",
    response_model=Envelope[list[SportSummary]],
    operation_id="listSports",
    summary="Sports offered by approved venues",
)
async def list_sports(courts: Courts):
    with handler_errors("Failed to fetch available sports"):
        sports = await catalog.list_sports(courts)
    return Envelope(data=sports)


@router.get(
    "/courts/{sport_type}",
    response_model=Envelope[CourtsBySportResponse],
    operation_id="getCourtsBySport",
    summary="Active courts of approved venues for one sport",
)
async def get_courts_by_sport(
    sport_type: str,
    courts: Courts,
    projector: Projector,
    pagination: PaginationParams = Depends(PaginationParams),
    city: str | None = Query(None, alias="location", description="Case-insensitive city match"),
    max_price: float | None = Query(None, alias="maxPrice", ge=0),
    date_str: str | None = Query(None, alias="date", description="YYYY-MM-DD"),
    start_time: HHMM | None = Query(None, alias="startTime"),
    end_time: HHMM | None = Query(None, alias="endTime"),
):
    target = parse_date(date_str) if date_str else None
    if start_time and end_time and start_time >= end_time:
        raise BadRequestError("Validation failed", "startTime must be before endTime")

    with handler_errors("Failed to fetch courts"):
        listings, total = await courts.search_by_sport(
            sport_type,
            city=city,
            max_price=max_price,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        if target and start_time and end_time:
            await catalog.annotate_availability(projector, listings, target, start_time, end_time)

    return Envelope(
        data=CourtsBySportResponse(
            sport_type=sport_type,
            courts=listings,
            filters={
                "location": city,
                "maxPrice": max_price,
                "date": target.isoformat() if target else None,
                "startTime": start_time,
                "endTime": end_time,
            },
            pagination=pagination.meta(total),
        )
    )


async def _active_court(courts: Courts, court_id: int):
    court = await courts.get(court_id)
    if court is None or not court.is_active:
        raise NotFoundError("Court not found")
    return court


@router.get(
    "/courts/{court_id}/available-slots",
    response_model=Envelope[list[TimeSlot]],
    operation_id="getAvailableSlots",
    summary="Free time slots of a court on one date",
)
async def get_available_slots(
    court_id: int,
    courts: Courts,
    projector: Projector,
    date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
):
    target = parse_date(date_str)
    await _active_court(courts, court_id)
    with handler_errors("Failed to fetch available slots"):
        slots = await projector.get_available_slots(court_id, target)
    return Envelope(data=slots)


@router.get(
    "/courts/{court_id}/upcoming-slots",
    response_model=Envelope[list[DaySlots]],
    operation_id="getUpcomingSlots",
    summary="Free time slots of a court for the next N days",
)
async def get_upcoming_slots(
    court_id: int,
    courts: Courts,
    projector: Projector,
    days: int = Query(7, ge=1, le=30),
):
    await _active_court(courts, court_id)
    with handler_errors("Failed to fetch upcoming slots"):
        upcoming = await projector.get_upcoming_slots(court_id, days)
    return Envelope(data=upcoming)
