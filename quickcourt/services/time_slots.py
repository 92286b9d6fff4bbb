"""
Time-slot template operations on top of a TimeSlotRepository.
"""

from __future__ import annotations

import logging

from quickcourt.errors import BadRequestError, NotFoundError
from quickcourt.models import TimeSlot, TimeSlotCreate, TimeSlotUpdate
from quickcourt.repositories.base import TimeSlotRepository

logger = logging.getLogger(__name__)


class TimeSlotService:
    def __init__(self, slots: TimeSlotRepository) -> None:
        self.slots = slots

    async def create(self, venue_id: int, court_id: int, body: TimeSlotCreate) -> TimeSlot:
        slot = await self.slots.create(
            venue_id,
            court_id,
            body.day_of_week,
            body.start_time,
            body.end_time,
            body.is_available,
        )
        logger.info("Time slot %d created for court %d (%s %s-%s)", slot.id, court_id, slot.day_name, slot.start_time, slot.end_time)
        return slot

    async def create_many(self, venue_id: int, court_id: int, slots: list[TimeSlotCreate]) -> int:
        return await self.slots.create_many(venue_id, court_id, slots)

    async def get(self, slot_id: int, court_id: int | None = None) -> TimeSlot:
        """Fetch one template; with ``court_id`` it must also belong to that court."""
        slot = await self.slots.get(slot_id)
        if slot is None or (court_id is not None and slot.court_id != court_id):
            raise NotFoundError("Time slot not found")
        return slot

    async def update(self, slot_id: int, body: TimeSlotUpdate) -> TimeSlot:
        fields = body.model_dump(exclude_none=True)
        if not fields:
            raise BadRequestError("No valid fields to update")

        current = await self.get(slot_id)
        start = fields.get("start_time", current.start_time)
        end = fields.get("end_time", current.end_time)
        if start >= end:
            raise BadRequestError("Validation failed", "startTime must be before endTime")

        slot = await self.slots.update(slot_id, fields)
        if slot is None:
            raise NotFoundError("Time slot not found")
        return slot

    async def set_availability(self, slot_id: int, is_available: bool) -> TimeSlot:
        slot = await self.slots.set_availability(slot_id, is_available)
        if slot is None:
            raise NotFoundError("Time slot not found")
        return slot

    async def toggle_availability(self, slot_id: int) -> TimeSlot:
        slot = await self.slots.toggle_availability(slot_id)
        if slot is None:
            raise NotFoundError("Time slot not found")
        return slot

    async def delete(self, slot_id: int) -> None:
        if not await self.slots.delete(slot_id):
            raise NotFoundError("Time slot not found")

    async def delete_by_court(self, court_id: int) -> int:
        deleted = await self.slots.delete_by_court(court_id)
        logger.info("Deleted %d time slots of court %d", deleted, court_id)
        return deleted

    async def delete_by_venue(self, venue_id: int) -> int:
        deleted = await self.slots.delete_by_venue(venue_id)
        logger.info("Deleted %d time slots of venue %d", deleted, venue_id)
        return deleted
