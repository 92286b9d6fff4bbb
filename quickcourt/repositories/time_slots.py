"""
SQLite storage for weekly time-slot templates.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

import aiosqlite

from quickcourt.db import Database, now_iso
from quickcourt.errors import ConflictError
from quickcourt.models import TimeSlot, TimeSlotCreate

logger = logging.getLogger(__name__)

# Columns that may be changed through update()
UPDATABLE_FIELDS = ("day_of_week", "start_time", "end_time", "is_available")

_SELECT = """
SELECT ts.*, c.name AS court_name, c.sport_type, c.price_per_hour, v.name AS venue_name
FROM time_slots ts
JOIN courts c ON c.id = ts.court_id
JOIN venues v ON v.id = ts.venue_id
"""


def _row_to_time_slot(row: aiosqlite.Row) -> TimeSlot:
    return TimeSlot(
        id=row["id"],
        venue_id=row["venue_id"],
        court_id=row["court_id"],
        day_of_week=row["day_of_week"],
        start_time=row["start_time"],
        end_time=row["end_time"],
        is_available=bool(row["is_available"]),
        created_at=row["created_at"],
        court_name=row["court_name"],
        sport_type=row["sport_type"],
        price_per_hour=row["price_per_hour"],
        venue_name=row["venue_name"],
    )


class SqliteTimeSlotRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def create(
        self,
        venue_id: int,
        court_id: int,
        day_of_week: int,
        start_time: str,
        end_time: str,
        is_available: bool = True,
    ) -> TimeSlot:
        try:
            cur = await self.db.execute(
                """
                INSERT INTO time_slots
                    (venue_id, court_id, day_of_week, start_time, end_time, is_available, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (venue_id, court_id, day_of_week, start_time, end_time, int(is_available), now_iso()),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError("Time slot already exists for this court", str(e)) from e

        slot = await self.get(cur.lastrowid)
        assert slot is not None
        return slot

    async def create_many(self, venue_id: int, court_id: int, slots: list[TimeSlotCreate]) -> int:
        if not slots:
            return 0
        created_at = now_iso()
        cur = await self.db.conn.executemany(
            """
            INSERT OR IGNORE INTO time_slots
                (venue_id, court_id, day_of_week, start_time, end_time, is_available, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (venue_id, court_id, s.day_of_week, s.start_time, s.end_time, int(s.is_available), created_at)
                for s in slots
            ],
        )
        await self.db.conn.commit()
        # Ignored duplicates do not count towards rowcount
        created = cur.rowcount
        logger.info("Created %d of %d time slots for court %d", created, len(slots), court_id)
        return created

    async def get(self, slot_id: int) -> TimeSlot | None:
        row = await self.db.fetch_one(_SELECT + " WHERE ts.id = ?", (slot_id,))
        return _row_to_time_slot(row) if row else None

    async def find_by_court(
        self,
        court_id: int,
        day_of_week: int | None = None,
        include_unavailable: bool = False,
    ) -> list[TimeSlot]:
        clauses = ["ts.court_id = ?"]
        params: list[Any] = [court_id]
        if day_of_week is not None:
            clauses.append("ts.day_of_week = ?")
            params.append(day_of_week)
        if not include_unavailable:
            clauses.append("ts.is_available = 1")

        rows = await self.db.fetch_all(
            _SELECT + " WHERE " + " AND ".join(clauses) + " ORDER BY ts.day_of_week, ts.start_time",
            params,
        )
        return [_row_to_time_slot(r) for r in rows]

    async def update(self, slot_id: int, fields: dict[str, Any]) -> TimeSlot | None:
        updates = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if "is_available" in updates:
            updates["is_available"] = int(updates["is_available"])

        set_clause = ", ".join(f"{k} = ?" for k in updates)
        try:
            cur = await self.db.execute(
                f"UPDATE time_slots SET {set_clause} WHERE id = ?",
                [*updates.values(), slot_id],
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError("Time slot already exists for this court", str(e)) from e

        if cur.rowcount == 0:
            return None
        return await self.get(slot_id)

    async def set_availability(self, slot_id: int, is_available: bool) -> TimeSlot | None:
        cur = await self.db.execute(
            "UPDATE time_slots SET is_available = ? WHERE id = ?",
            (int(is_available), slot_id),
        )
        if cur.rowcount == 0:
            return None
        return await self.get(slot_id)

    async def toggle_availability(self, slot_id: int) -> TimeSlot | None:
        cur = await self.db.execute(
            "UPDATE time_slots SET is_available = 1 - is_available WHERE id = ?",
            (slot_id,),
        )
        if cur.rowcount == 0:
            return None
        return await self.get(slot_id)

    async def delete(self, slot_id: int) -> bool:
        cur = await self.db.execute("DELETE FROM time_slots WHERE id = ?", (slot_id,))
        return cur.rowcount > 0

    async def delete_by_court(self, court_id: int) -> int:
        cur = await self.db.execute("DELETE FROM time_slots WHERE court_id = ?", (court_id,))
        return cur.rowcount

    async def delete_by_venue(self, venue_id: int) -> int:
        cur = await self.db.execute("DELETE FROM time_slots WHERE venue_id = ?", (venue_id,))
        return cur.rowcount
