"""
Public catalog queries: courts by sport, sports summary, venue details.
"""

from __future__ import annotations

import logging
from datetime import date

from quickcourt.errors import NotFoundError
from quickcourt.models import CourtListing, CourtWithSlots, SportSummary, VenueDetails
from quickcourt.repositories.courts import SqliteCourtRepository
from quickcourt.repositories.venues import SqliteVenueRepository
from quickcourt.services.availability import AvailabilityProjector

logger = logging.getLogger(__name__)

SPORT_DESCRIPTIONS: dict[str, str] = {
    "badminton": "Indoor racquet sport with shuttlecock",
    "tennis": "Racquet sport on court",
    "football": "Team sport played with feet",
    "cricket": "Bat and ball sport with wickets",
    "swimming": "Aquatic sport and exercise",
    "table_tennis": "Indoor paddle sport",
    "table tennis": "Indoor paddle sport",
    "basketball": "Team sport with hoops",
    "volleyball": "Team sport with net",
    "squash": "Indoor racquet sport against a wall",
}


def sport_description(sport: str) -> str:
    return SPORT_DESCRIPTIONS.get(sport.lower(), "Popular sport activity")


async def annotate_availability(
    projector: AvailabilityProjector,
    courts: list[CourtListing],
    target: date,
    start_time: str,
    end_time: str,
) -> list[CourtListing]:
    """Mark each court free or busy for the window and suggest the next free slot."""
    for court in courts:
        court.is_available = await projector.is_court_free(court.id, target, start_time, end_time)
        if not court.is_available:
            court.next_available_slot = await projector.find_next_available_slot(
                court.id, target, start_time, end_time
            )
    return courts


async def list_sports(courts: SqliteCourtRepository) -> list[SportSummary]:
    return [
        SportSummary(
            name=row["name"],
            courts_count=row["courts_count"],
            venues_count=row["venues_count"],
            min_price=row["min_price"],
            avg_price=round(row["avg_price"], 2) if row["avg_price"] is not None else None,
            max_price=row["max_price"],
            description=sport_description(row["name"]),
        )
        for row in await courts.sports_summary()
    ]


async def venue_details(
    venues: SqliteVenueRepository,
    courts: SqliteCourtRepository,
    projector: AvailabilityProjector,
    venue_id: int,
    target: date | None = None,
) -> VenueDetails:
    venue = await venues.get(venue_id)
    if venue is None or not venue.is_approved:
        raise NotFoundError("Venue not found or not available")

    result = []
    for court in await courts.list_by_venue(venue_id, active_only=True):
        slots = await projector.get_available_slots(court.id, target) if target else None
        result.append(CourtWithSlots(**court.model_dump(), available_slots=slots))

    return VenueDetails(venue=venue, courts=result, requested_date=target)
