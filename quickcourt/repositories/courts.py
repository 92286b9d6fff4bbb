"""
SQLite storage for courts, including the public sport search.
"""

from __future__ import annotations

import logging
from typing import Any

import aiosqlite

from quickcourt.db import Database, now_iso
from quickcourt.models import Court, CourtCreate, CourtListing, VenuePublic

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "sport_type", "price_per_hour", "description")

_SELECT = """
SELECT c.*, v.name AS venue_name, v.city AS venue_city
FROM courts c
JOIN venues v ON v.id = c.venue_id
"""


def _row_to_court(row: aiosqlite.Row) -> Court:
    return Court(
        id=row["id"],
        venue_id=row["venue_id"],
        name=row["name"],
        sport_type=row["sport_type"],
        price_per_hour=row["price_per_hour"],
        description=row["description"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        venue_name=row["venue_name"],
        venue_city=row["venue_city"],
    )


def _row_to_listing(row: aiosqlite.Row) -> CourtListing:
    court = _row_to_court(row)
    return CourtListing(
        **court.model_dump(),
        venue=VenuePublic(
            id=row["venue_id"],
            name=row["venue_name"],
            city=row["venue_city"],
            address=row["venue_address"],
            rating=row["venue_rating"],
        ),
    )


class SqliteCourtRepository:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def get(self, court_id: int) -> Court | None:
        row = await self.db.fetch_one(_SELECT + " WHERE c.id = ?", (court_id,))
        return _row_to_court(row) if row else None

    async def list_by_venue(self, venue_id: int, active_only: bool = False) -> list[Court]:
        sql = _SELECT + " WHERE c.venue_id = ?"
        if active_only:
            sql += " AND c.is_active = 1"
        rows = await self.db.fetch_all(sql + " ORDER BY c.name, c.id", (venue_id,))
        return [_row_to_court(r) for r in rows]

    async def create(self, venue_id: int, body: CourtCreate) -> Court:
        now = now_iso()
        cur = await self.db.execute(
            """
            INSERT INTO courts (venue_id, name, sport_type, price_per_hour, description, is_active,
                                created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, 1, ?, ?)
            """,
            (venue_id, body.name, body.sport_type.value, body.price_per_hour, body.description, now, now),
        )
        court = await self.get(cur.lastrowid)
        assert court is not None
        return court

    async def update(self, court_id: int, fields: dict[str, Any]) -> Court | None:
        updates = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if "sport_type" in updates and hasattr(updates["sport_type"], "value"):
            updates["sport_type"] = updates["sport_type"].value
        updates["updated_at"] = now_iso()

        set_clause = ", ".join(f"{k} = ?" for k in updates)
        cur = await self.db.execute(
            f"UPDATE courts SET {set_clause} WHERE id = ?",
            [*updates.values(), court_id],
        )
        if cur.rowcount == 0:
            return None
        return await self.get(court_id)

    async def toggle_active(self, court_id: int) -> Court | None:
        cur = await self.db.execute(
            "UPDATE courts SET is_active = 1 - is_active, updated_at = ? WHERE id = ?",
            (now_iso(), court_id),
        )
        if cur.rowcount == 0:
            return None
        return await self.get(court_id)

    async def delete(self, court_id: int) -> bool:
        cur = await self.db.execute("DELETE FROM courts WHERE id = ?", (court_id,))
        return cur.rowcount > 0

    # ── Public search ─────────────────────────────────────────────────

    async def search_by_sport(
        self,
        sport_type: str,
        city: str | None = None,
        max_price: float | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[CourtListing], int]:
        """Active courts of approved venues for one sport.

        Ordered by venue rating (best first), then cheapest court.
        """
        clauses = ["c.is_active = 1", "v.is_approved = 1", "LOWER(c.sport_type) = LOWER(?)"]
        params: list[Any] = [sport_type]
        if city:
            clauses.append("LOWER(v.city) LIKE ?")
            params.append(f"%{city.lower()}%")
        if max_price is not None:
            clauses.append("c.price_per_hour <= ?")
            params.append(max_price)
        where = " WHERE " + " AND ".join(clauses)

        total = await self.db.fetch_value(
            "SELECT COUNT(*) FROM courts c JOIN venues v ON v.id = c.venue_id" + where,
            params,
        )
        rows = await self.db.fetch_all(
            """
            SELECT c.*, v.name AS venue_name, v.city AS venue_city,
                   v.address AS venue_address, v.rating AS venue_rating
            FROM courts c
            JOIN venues v ON v.id = c.venue_id
            """
            + where
            + " ORDER BY v.rating DESC, c.price_per_hour ASC, c.id ASC LIMIT ? OFFSET ?",
            [*params, limit, offset],
        )
        return [_row_to_listing(r) for r in rows], total or 0

    async def sports_summary(self) -> list[dict[str, Any]]:
        rows = await self.db.fetch_all(
            """
            SELECT c.sport_type AS name,
                   COUNT(c.id) AS courts_count,
                   COUNT(DISTINCT c.venue_id) AS venues_count,
                   MIN(c.price_per_hour) AS min_price,
                   AVG(c.price_per_hour) AS avg_price,
                   MAX(c.price_per_hour) AS max_price
            FROM courts c
            JOIN venues v ON v.id = c.venue_id
            WHERE c.is_active = 1 AND v.is_approved = 1
            GROUP BY c.sport_type
            ORDER BY courts_count DESC, c.sport_type
            """
        )
        return [dict(r) for r in rows]

    async def counts_for_owner(self, owner_id: int) -> tuple[int, int]:
        row = await self.db.fetch_one(
            """
            SELECT COUNT(c.id) AS total, COALESCE(SUM(c.is_active), 0) AS active
            FROM courts c
            JOIN venues v ON v.id = c.venue_id
            WHERE v.owner_id = ?
            """,
            (owner_id,),
        )
        return row["total"], row["active"]
