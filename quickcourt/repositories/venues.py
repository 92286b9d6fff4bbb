"""
SQLite storage for venues and their moderation state.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import aiosqlite

from quickcourt.db import Database, from_json, now_iso, to_json
from quickcourt.models import Venue, VenueCounts, VenueCreate, VenueListItem

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "description",
    "address",
    "city",
    "amenities",
    "price_per_hour",
    "contact_email",
    "contact_phone",
)

ReviewStatus = Literal["pending", "approved", "rejected"]

_STATUS_CLAUSES: dict[str, str] = {
    "approved": "v.is_approved = 1",
    "pending": "v.is_approved = 0 AND v.rejected_at IS NULL",
    "rejected": "v.is_approved = 0 AND v.rejected_at IS NOT NULL",
}

_SORT_COLUMNS: dict[str, str] = {
    "rating": "v.rating DESC, v.id ASC",
    "price": "min_price IS NULL, min_price ASC, v.id ASC",
    "name": "v.name COLLATE NOCASE ASC, v.id ASC",
}

_LIST_SELECT = """
SELECT v.*,
       COUNT(c.id) AS courts_count,
       MIN(c.price_per_hour) AS min_price,
       MAX(c.price_per_hour) AS max_price,
       GROUP_CONCAT(DISTINCT c.sport_type) AS sports
FROM venues v
LEFT JOIN courts c ON c.venue_id = v.id AND c.is_active = 1
"""


def _row_to_venue(row: aiosqlite.Row) -> Venue:
    return Venue(
        id=row["id"],
        owner_id=row["owner_id"],
        name=row["name"],
        description=row["description"],
        address=row["address"],
        city=row["city"],
        amenities=from_json(row["amenities"]),
        rating=row["rating"],
        total_reviews=row["total_reviews"],
        price_per_hour=row["price_per_hour"],
        is_approved=bool(row["is_approved"]),
        contact_email=row["contact_email"],
        contact_phone=row["contact_phone"],
        approved_at=row["approved_at"],
        approved_by=row["approved_by"],
        rejection_reason=row["rejection_reason"],
        rejected_at=row["rejected_at"],
        rejected_by=row["rejected_by"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_list_item(row: aiosqlite.Row) -> VenueListItem:
    venue = _row_to_venue(row)
    sports = row["sports"]
    return VenueListItem(
        **venue.model_dump(),
        courts_count=row["courts_count"],
        min_price=row["min_price"],
        max_price=row["max_price"],
        available_sports=sorted(sports.split(",")) if sports else [],
    )


class SqliteVenueRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def get(self, venue_id: int) -> Venue | None:
        row = await self.db.fetch_one("SELECT * FROM venues WHERE id = ?", (venue_id,))
        return _row_to_venue(row) if row else None

    async def create(self, owner_id: int, body: VenueCreate) -> Venue:
        """Insert a venue (pending approval) together with its initial courts."""
        now = now_iso()
        conn = self.db.conn
        cur = await conn.execute(
            """
            INSERT INTO venues (owner_id, name, description, address, city, amenities, price_per_hour,
                                contact_email, contact_phone, is_approved, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?)
            """,
            (
                owner_id,
                body.name,
                body.description,
                body.address,
                body.city,
                to_json(body.amenities),
                body.price_per_hour,
                body.contact_email,
                body.contact_phone,
                now,
                now,
            ),
        )
        venue_id = cur.lastrowid
        for court in body.courts:
            await conn.execute(
                """
                INSERT INTO courts (venue_id, name, sport_type, price_per_hour, description, is_active,
                                    created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 1, ?, ?)
                """,
                (venue_id, court.name, court.sport_type.value, court.price_per_hour, court.description, now, now),
            )
        await conn.commit()
        logger.info("Venue %d created by owner %d with %d courts", venue_id, owner_id, len(body.courts))

        venue = await self.get(venue_id)
        assert venue is not None
        return venue

    async def update(self, venue_id: int, fields: dict[str, Any]) -> Venue | None:
        updates = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if "amenities" in updates:
            updates["amenities"] = to_json(updates["amenities"])
        updates["updated_at"] = now_iso()

        set_clause = ", ".join(f"{k} = ?" for k in updates)
        cur = await self.db.execute(
            f"UPDATE venues SET {set_clause} WHERE id = ?",
            [*updates.values(), venue_id],
        )
        if cur.rowcount == 0:
            return None
        return await self.get(venue_id)

    async def delete(self, venue_id: int) -> bool:
        cur = await self.db.execute("DELETE FROM venues WHERE id = ?", (venue_id,))
        return cur.rowcount > 0

    # ── Listings ──────────────────────────────────────────────────────

    async def list_public(
        self,
        search: str | None = None,
        city: str | None = None,
        sport_type: str | None = None,
        min_rating: float | None = None,
        sort_by: str = "rating",
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[VenueListItem], int]:
        """Approved venues with court counts and price ranges."""
        clauses = ["v.is_approved = 1"]
        params: list[Any] = []
        if search:
            clauses.append("(LOWER(v.name) LIKE ? OR LOWER(v.description) LIKE ? OR LOWER(v.city) LIKE ?)")
            term = f"%{search.lower()}%"
            params.extend([term, term, term])
        if city:
            clauses.append("LOWER(v.city) LIKE ?")
            params.append(f"%{city.lower()}%")
        if min_rating is not None:
            clauses.append("v.rating >= ?")
            params.append(min_rating)
        if sport_type:
            clauses.append(
                "EXISTS (SELECT 1 FROM courts sc WHERE sc.venue_id = v.id"
                " AND sc.is_active = 1 AND LOWER(sc.sport_type) = LOWER(?))"
            )
            params.append(sport_type)
        where = " WHERE " + " AND ".join(clauses)

        total = await self.db.fetch_value("SELECT COUNT(*) FROM venues v" + where, params)
        rows = await self.db.fetch_all(
            _LIST_SELECT
            + where
            + " GROUP BY v.id ORDER BY "
            + _SORT_COLUMNS.get(sort_by, _SORT_COLUMNS["rating"])
            + " LIMIT ? OFFSET ?",
            [*params, limit, offset],
        )
        return [_row_to_list_item(r) for r in rows], total or 0

    async def list_by_owner(self, owner_id: int) -> list[VenueListItem]:
        rows = await self.db.fetch_all(
            _LIST_SELECT + " WHERE v.owner_id = ? GROUP BY v.id ORDER BY v.created_at DESC, v.id DESC",
            (owner_id,),
        )
        return [_row_to_list_item(r) for r in rows]

    async def list_for_review(
        self,
        status: ReviewStatus | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[VenueListItem], int]:
        where = f" WHERE {_STATUS_CLAUSES[status]}" if status else ""
        total = await self.db.fetch_value("SELECT COUNT(*) FROM venues v" + where)
        rows = await self.db.fetch_all(
            _LIST_SELECT + where + " GROUP BY v.id ORDER BY v.created_at DESC, v.id DESC LIMIT ? OFFSET ?",
            (limit, offset),
        )
        return [_row_to_list_item(r) for r in rows], total or 0

    # ── Moderation ────────────────────────────────────────────────────

    async def approve(self, venue_id: int, admin_id: int) -> Venue | None:
        now = now_iso()
        await self.db.execute(
            """
            UPDATE venues
            SET is_approved = 1, approved_at = ?, approved_by = ?,
                rejection_reason = NULL, rejected_at = NULL, rejected_by = NULL, updated_at = ?
            WHERE id = ?
            """,
            (now, admin_id, now, venue_id),
        )
        return await self.get(venue_id)

    async def reject(self, venue_id: int, admin_id: int, reason: str) -> Venue | None:
        now = now_iso()
        await self.db.execute(
            """
            UPDATE venues
            SET is_approved = 0, rejection_reason = ?, rejected_at = ?, rejected_by = ?,
                approved_at = NULL, approved_by = NULL, updated_at = ?
            WHERE id = ?
            """,
            (reason, now, admin_id, now, venue_id),
        )
        return await self.get(venue_id)

    async def statistics(self, owner_id: int | None = None) -> VenueCounts:
        where = " WHERE v.owner_id = ?" if owner_id is not None else ""
        params = (owner_id,) if owner_id is not None else ()
        row = await self.db.fetch_one(
            f"""
            SELECT COUNT(*) AS total,
                   COALESCE(SUM(CASE WHEN {_STATUS_CLAUSES['approved']} THEN 1 ELSE 0 END), 0) AS approved,
                   COALESCE(SUM(CASE WHEN {_STATUS_CLAUSES['pending']} THEN 1 ELSE 0 END), 0) AS pending,
                   COALESCE(SUM(CASE WHEN {_STATUS_CLAUSES['rejected']} THEN 1 ELSE 0 END), 0) AS rejected
            FROM venues v
            """
            + where,
            params,
        )
        return VenueCounts(
            total=row["total"],
            approved=row["approved"],
            pending=row["pending"],
            rejected=row["rejected"],
        )
