"""
SQLite storage for bookings.

Conflict checks and the write that follows them run under the database's
``write_lock`` so two requests cannot book the same court time.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import aiosqlite

from quickcourt.db import Database, iso, now_iso
from quickcourt.errors import ConflictError
from quickcourt.models import Booking, BookingStatus, VenueStats

logger = logging.getLogger(__name__)

_SELECT = """
SELECT b.*, c.name AS court_name, c.sport_type, v.name AS venue_name, v.city AS venue_city,
       u.name AS user_name, u.email AS user_email
FROM bookings b
JOIN courts c ON c.id = b.court_id
JOIN venues v ON v.id = b.venue_id
JOIN users u ON u.id = b.user_id
"""

_FROM = """
FROM bookings b
JOIN venues v ON v.id = b.venue_id
"""


def _row_to_booking(row: aiosqlite.Row) -> Booking:
    return Booking(
        id=row["id"],
        user_id=row["user_id"],
        court_id=row["court_id"],
        venue_id=row["venue_id"],
        booking_date=row["booking_date"],
        start_time=row["start_time"],
        end_time=row["end_time"],
        total_amount=row["total_amount"],
        status=row["status"],
        notes=row["notes"],
        cancellation_reason=row["cancellation_reason"],
        cancelled_at=row["cancelled_at"],
        confirmed_at=row["confirmed_at"],
        rescheduled_at=row["rescheduled_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        court_name=row["court_name"],
        sport_type=row["sport_type"],
        venue_name=row["venue_name"],
        venue_city=row["venue_city"],
        user_name=row["user_name"],
        user_email=row["user_email"],
    )


class SqliteBookingRepository:
    def __init__(self, db: Database) -> None:
        self.db = db
        self._lock = db.write_lock

    async def get(self, booking_id: int) -> Booking | None:
        row = await self.db.fetch_one(_SELECT + " WHERE b.id = ?", (booking_id,))
        return _row_to_booking(row) if row else None

    async def find_blocking(
        self,
        court_id: int,
        booking_date: date,
        exclude_booking_id: int | None = None,
    ) -> list[Booking]:
        sql = _SELECT + " WHERE b.court_id = ? AND b.booking_date = ? AND b.status != 'cancelled'"
        params: list[Any] = [court_id, iso(booking_date)]
        if exclude_booking_id is not None:
            sql += " AND b.id != ?"
            params.append(exclude_booking_id)
        rows = await self.db.fetch_all(sql + " ORDER BY b.start_time", params)
        return [_row_to_booking(r) for r in rows]

    async def _has_overlap(
        self,
        court_id: int,
        booking_date: date,
        start_time: str,
        end_time: str,
        exclude_booking_id: int | None = None,
    ) -> bool:
        sql = """
            SELECT COUNT(*) FROM bookings
            WHERE court_id = ? AND booking_date = ? AND status != 'cancelled'
              AND start_time < ? AND end_time > ?
        """
        params: list[Any] = [court_id, iso(booking_date), end_time, start_time]
        if exclude_booking_id is not None:
            sql += " AND id != ?"
            params.append(exclude_booking_id)
        return bool(await self.db.fetch_value(sql, params))

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
        async with self._lock:
            if await self._has_overlap(court_id, booking_date, start_time, end_time):
                raise ConflictError("Time slot is already booked")

            now = now_iso()
            cur = await self.db.execute(
                """
                INSERT INTO bookings (user_id, court_id, venue_id, booking_date, start_time, end_time,
                                      total_amount, status, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, 'pending', ?, ?, ?)
                """,
                (
                    user_id,
                    court_id,
                    venue_id,
                    iso(booking_date),
                    start_time,
                    end_time,
                    total_amount,
                    notes,
                    now,
                    now,
                ),
            )
        booking = await self.get(cur.lastrowid)
        assert booking is not None
        logger.info("Booking %d created for court %d on %s %s-%s", booking.id, court_id, booking_date, start_time, end_time)
        return booking

    async def reschedule_if_free(
        self,
        booking_id: int,
        court_id: int,
        new_date: date,
        start_time: str,
        end_time: str,
        total_amount: float,
    ) -> Booking:
        async with self._lock:
            if await self._has_overlap(court_id, new_date, start_time, end_time, exclude_booking_id=booking_id):
                raise ConflictError("New time slot is not available")

            now = now_iso()
            await self.db.execute(
                """
                UPDATE bookings
                SET booking_date = ?, start_time = ?, end_time = ?, total_amount = ?,
                    rescheduled_at = ?, updated_at = ?
                WHERE id = ?
                """,
                (iso(new_date), start_time, end_time, total_amount, now, now, booking_id),
            )
        booking = await self.get(booking_id)
        assert booking is not None
        return booking

    async def set_status(
        self,
        booking_id: int,
        status: BookingStatus,
        reason: str | None = None,
    ) -> Booking | None:
        now = now_iso()
        if status == BookingStatus.CANCELLED:
            sql = (
                "UPDATE bookings SET status = ?, cancellation_reason = ?, cancelled_at = ?, updated_at = ?"
                " WHERE id = ?"
            )
            params: tuple[Any, ...] = (status.value, reason, now, now, booking_id)
        elif status == BookingStatus.CONFIRMED:
            sql = "UPDATE bookings SET status = ?, confirmed_at = ?, updated_at = ? WHERE id = ?"
            params = (status.value, now, now, booking_id)
        else:
            sql = "UPDATE bookings SET status = ?, updated_at = ? WHERE id = ?"
            params = (status.value, now, booking_id)

        cur = await self.db.execute(sql, params)
        if cur.rowcount == 0:
            return None
        return await self.get(booking_id)

    # ── Listings ──────────────────────────────────────────────────────

    async def _list(
        self,
        clauses: list[str],
        params: list[Any],
        order: str,
        limit: int,
        offset: int,
    ) -> tuple[list[Booking], int]:
        where = " WHERE " + " AND ".join(clauses) if clauses else ""
        total = await self.db.fetch_value("SELECT COUNT(*)" + _FROM + where, params)
        rows = await self.db.fetch_all(
            _SELECT + where + f" ORDER BY {order} LIMIT ? OFFSET ?",
            [*params, limit, offset],
        )
        return [_row_to_booking(r) for r in rows], total or 0

    async def list_for_user(
        self,
        user_id: int,
        status: BookingStatus | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        upcoming_from: date | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Booking], int]:
        clauses = ["b.user_id = ?"]
        params: list[Any] = [user_id]
        if status is not None:
            clauses.append("b.status = ?")
            params.append(status.value)
        if start_date is not None:
            clauses.append("b.booking_date >= ?")
            params.append(iso(start_date))
        if end_date is not None:
            clauses.append("b.booking_date <= ?")
            params.append(iso(end_date))
        if upcoming_from is not None:
            clauses.append("b.booking_date >= ? AND b.status != 'cancelled'")
            params.append(iso(upcoming_from))
        return await self._list(clauses, params, "b.booking_date DESC, b.start_time DESC", limit, offset)

    async def list_for_owner(
        self,
        owner_id: int | None,
        status: BookingStatus | None = None,
        venue_id: int | None = None,
        court_id: int | None = None,
        booking_date: date | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Booking], int]:
        """Bookings of an owner's venues. ``owner_id=None`` lists every venue."""
        clauses: list[str] = []
        params: list[Any] = []
        if owner_id is not None:
            clauses.append("v.owner_id = ?")
            params.append(owner_id)
        if status is not None:
            clauses.append("b.status = ?")
            params.append(status.value)
        if venue_id is not None:
            clauses.append("b.venue_id = ?")
            params.append(venue_id)
        if court_id is not None:
            clauses.append("b.court_id = ?")
            params.append(court_id)
        if booking_date is not None:
            clauses.append("b.booking_date = ?")
            params.append(iso(booking_date))
        elif start_date is not None and end_date is not None:
            clauses.append("b.booking_date BETWEEN ? AND ?")
            params.extend([iso(start_date), iso(end_date)])
        return await self._list(clauses, params, "b.booking_date DESC, b.start_time DESC", limit, offset)

    # ── Aggregates ────────────────────────────────────────────────────

    async def venue_stats(
        self,
        venue_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> VenueStats:
        clauses = ["venue_id = ?"]
        params: list[Any] = [venue_id]
        if start_date is not None and end_date is not None:
            clauses.append("booking_date BETWEEN ? AND ?")
            params.extend([iso(start_date), iso(end_date)])

        row = await self.db.fetch_one(
            """
            SELECT COUNT(*) AS total,
                   COALESCE(SUM(status = 'pending'), 0) AS pending,
                   COALESCE(SUM(status = 'confirmed'), 0) AS confirmed,
                   COALESCE(SUM(status = 'completed'), 0) AS completed,
                   COALESCE(SUM(status = 'cancelled'), 0) AS cancelled,
                   COALESCE(SUM(CASE WHEN status IN ('confirmed', 'completed') THEN total_amount END), 0)
                       AS earnings
            FROM bookings
            WHERE """
            + " AND ".join(clauses),
            params,
        )
        active_courts = await self.db.fetch_value(
            "SELECT COUNT(*) FROM courts WHERE venue_id = ? AND is_active = 1",
            (venue_id,),
        )
        return VenueStats(
            venue_id=venue_id,
            total_bookings=row["total"],
            pending_bookings=row["pending"],
            confirmed_bookings=row["confirmed"],
            completed_bookings=row["completed"],
            cancelled_bookings=row["cancelled"],
            total_earnings=row["earnings"],
            active_courts=active_courts or 0,
        )

    async def owner_totals(self, owner_id: int) -> dict[str, Any]:
        row = await self.db.fetch_one(
            """
            SELECT COUNT(b.id) AS total,
                   COALESCE(SUM(b.status = 'confirmed'), 0) AS confirmed,
                   COALESCE(SUM(CASE WHEN b.status IN ('confirmed', 'completed') THEN b.total_amount END), 0)
                       AS revenue
            """
            + _FROM
            + " WHERE v.owner_id = ?",
            (owner_id,),
        )
        return dict(row)

    async def count_by_status(self) -> dict[str, int]:
        rows = await self.db.fetch_all("SELECT status, COUNT(*) AS n FROM bookings GROUP BY status")
        return {r["status"]: r["n"] for r in rows}
