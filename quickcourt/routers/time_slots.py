"""
Time slot endpoints – weekly availability templates of an owner's court.
"""

import logging

from fastapi import APIRouter, Query, status

from quickcourt.dependencies import Courts, CurrentUser, Projector, TimeSlots, Venues
from quickcourt.errors import handler_errors
from quickcourt.models import (
    AvailabilityUpdate,
    BulkCreateResult,
    DayStats,
    DeleteResult,
    Envelope,
    MessageResponse,
    TimeSlot,
    TimeSlotBulkCreate,
    TimeSlotCreate,
    TimeSlotUpdate,
)
from quickcourt.policy import Action, owned_court

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/owner/venues/{venue_id}/courts/{court_id}/time-slots",
    tags=["time-slots"],
)


@router.get(
    "",
    response_model=Envelope[list[TimeSlot]],
    operation_id="listTimeSlots",
    summary="List time slot templates of a court",
)
async def list_time_slots(
    venue_id: int,
    court_id: int,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    projector: Projector,
    day_of_week: int | None = Query(None, alias="dayOfWeek", ge=0, le=6),
    include_unavailable: bool = Query(True, alias="includeUnavailable"),
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    with handler_errors("Failed to fetch time slots"):
        slots = await projector.find_by_court(court_id, day_of_week, include_unavailable)
    return Envelope(data=slots)


@router.post(
    "",
    response_model=Envelope[TimeSlot],
    status_code=status.HTTP_201_CREATED,
    operation_id="createTimeSlot",
    summary="Create a time slot template",
)
async def create_time_slot(
    venue_id: int,
    court_id: int,
    body: TimeSlotCreate,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    service: TimeSlots,
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    with handler_errors("Failed to create time slot"):
        slot = await service.create(venue_id, court_id, body)
    return Envelope(message="Time slot created successfully", data=slot)


@router.post(
    "/bulk",
    response_model=Envelope[BulkCreateResult],
    status_code=status.HTTP_201_CREATED,
    operation_id="createTimeSlotsBulk",
    summary="Create many templates at once; exact duplicates are skipped",
)
async def create_time_slots_bulk(
    venue_id: int,
    court_id: int,
    body: TimeSlotBulkCreate,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    service: TimeSlots,
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    with handler_errors("Failed to create time slots"):
        created = await service.create_many(venue_id, court_id, body.slots)
    return Envelope(
        message=f"{created} time slots created successfully",
        data=BulkCreateResult(requested=len(body.slots), created=created),
    )


@router.get(
    "/by-day",
    response_model=Envelope[dict[int, list[TimeSlot]]],
    operation_id="getTimeSlotsByDay",
    summary="All templates grouped by day of week (0 = Sunday)",
)
async def get_time_slots_by_day(
    venue_id: int,
    court_id: int,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    projector: Projector,
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    with handler_errors("Failed to fetch time slots"):
        grouped = await projector.get_slots_by_day(court_id)
    return Envelope(data=grouped)


@router.get(
    "/stats",
    response_model=Envelope[dict[str, DayStats]],
    operation_id="getTimeSlotStats",
    summary="Per-day counts of total, available and blocked templates",
)
async def get_time_slot_stats(
    venue_id: int,
    court_id: int,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    projector: Projector,
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    with handler_errors("Failed to fetch time slot statistics"):
        stats = await projector.get_court_stats(court_id)
    return Envelope(data=stats)


@router.patch(
    "/{slot_id}",
    response_model=Envelope[TimeSlot],
    operation_id="updateTimeSlot",
    summary="Change day, times or availability of a template",
)
async def update_time_slot(
    venue_id: int,
    court_id: int,
    slot_id: int,
    body: TimeSlotUpdate,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    service: TimeSlots,
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    await service.get(slot_id, court_id)
    with handler_errors("Failed to update time slot"):
        slot = await service.update(slot_id, body)
    return Envelope(message="Time slot updated successfully", data=slot)


@router.patch(
    "/{slot_id}/availability",
    response_model=Envelope[TimeSlot],
    operation_id="setTimeSlotAvailability",
    summary="Open or block a template",
)
async def set_time_slot_availability(
    venue_id: int,
    court_id: int,
    slot_id: int,
    body: AvailabilityUpdate,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    service: TimeSlots,
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    await service.get(slot_id, court_id)
    with handler_errors("Failed to update time slot availability"):
        slot = await service.set_availability(slot_id, body.is_available)
    return Envelope(data=slot)


@router.post(
    "/{slot_id}/toggle",
    response_model=Envelope[TimeSlot],
    operation_id="toggleTimeSlot",
    summary="Flip a template between open and blocked",
)
async def toggle_time_slot(
    venue_id: int,
    court_id: int,
    slot_id: int,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    service: TimeSlots,
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    await service.get(slot_id, court_id)
    with handler_errors("Failed to toggle time slot"):
        slot = await service.toggle_availability(slot_id)
    return Envelope(data=slot)


@router.delete(
    "/{slot_id}",
    response_model=MessageResponse,
    operation_id="deleteTimeSlot",
    summary="Delete one template",
)
async def delete_time_slot(
    venue_id: int,
    court_id: int,
    slot_id: int,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    service: TimeSlots,
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    await service.get(slot_id, court_id)
    with handler_errors("Failed to delete time slot"):
        await service.delete(slot_id)
    return MessageResponse(message="Time slot deleted successfully")


@router.delete(
    "",
    response_model=Envelope[DeleteResult],
    operation_id="deleteCourtTimeSlots",
    summary="Delete every template of a court",
)
async def delete_court_time_slots(
    venue_id: int,
    court_id: int,
    user: CurrentUser,
    venues: Venues,
    courts: Courts,
    service: TimeSlots,
):
    await owned_court(venues, courts, user, venue_id, court_id, Action.TIMESLOT_MANAGE)
    with handler_errors("Failed to delete time slots"):
        deleted = await service.delete_by_court(court_id)
    return Envelope(message=f"{deleted} time slots deleted", data=DeleteResult(deleted=deleted))
