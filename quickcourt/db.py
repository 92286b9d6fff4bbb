"""
SQLite database layer using aiosqlite.

A single ``Database`` object owns the connection.  It is created by the
application lifespan, stored on ``app.state`` and closed on shutdown.
Tables are created automatically on first connect.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterable

import aiosqlite

logger = logging.getLogger(__name__)


class Database:
    """Owns the aiosqlite connection for the lifetime of the app."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._conn: aiosqlite.Connection | None = None
        # Serializes check-then-write sequences (booking conflicts)
        self.write_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Open the database and create tables if they don't exist."""
        db_path = Path(self.path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(str(db_path))
        self._conn.row_factory = aiosqlite.Row  # dict-like rows
        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.execute("PRAGMA foreign_keys=ON")

        await self._conn.executescript(_SCHEMA)
        await self._conn.commit()
        logger.info("Database initialized at %s", db_path)

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("Database connection closed")

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Database not initialized, call connect() first")
        return self._conn

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    # ── Query helpers ──────────────────────────────────────────────────

    async def fetch_one(self, sql: str, params: Iterable[Any] = ()) -> aiosqlite.Row | None:
        async with self.conn.execute(sql, tuple(params)) as cur:
            return await cur.fetchone()

    async def fetch_all(self, sql: str, params: Iterable[Any] = ()) -> list[aiosqlite.Row]:
        async with self.conn.execute(sql, tuple(params)) as cur:
            return list(await cur.fetchall())

    async def fetch_value(self, sql: str, params: Iterable[Any] = ()) -> Any:
        row = await self.fetch_one(sql, params)
        return row[0] if row is not None else None

    async def execute(self, sql: str, params: Iterable[Any] = ()) -> aiosqlite.Cursor:
        """Run a write statement and commit."""
        cur = await self.conn.execute(sql, tuple(params))
        await self.conn.commit()
        return cur

    async def ping(self) -> None:
        await self.fetch_value("SELECT 1")


# ── Schema ────────────────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    email           TEXT NOT NULL UNIQUE,
    name            TEXT NOT NULL,
    phone           TEXT,
    role            TEXT NOT NULL DEFAULT 'user',
    is_suspended    INTEGER NOT NULL DEFAULT 0,
    suspension_reason TEXT,
    created_at      TEXT NOT NULL,
    last_login_at   TEXT
);

CREATE TABLE IF NOT EXISTS otp_codes (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    email           TEXT NOT NULL,
    code            TEXT NOT NULL,
    expires_at      TEXT NOT NULL,
    used            INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_otp_email ON otp_codes(email);

CREATE TABLE IF NOT EXISTS venues (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id        INTEGER NOT NULL,
    name            TEXT NOT NULL,
    description     TEXT,
    address         TEXT NOT NULL,
    city            TEXT NOT NULL,
    amenities       TEXT NOT NULL DEFAULT '[]',  -- JSON array
    rating          REAL NOT NULL DEFAULT 0,
    total_reviews   INTEGER NOT NULL DEFAULT 0,
    price_per_hour  REAL,
    is_approved     INTEGER NOT NULL DEFAULT 0,
    contact_email   TEXT,
    contact_phone   TEXT,
    approved_at     TEXT,
    approved_by     INTEGER,
    rejection_reason TEXT,
    rejected_at     TEXT,
    rejected_by     INTEGER,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL,
    FOREIGN KEY (owner_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_venues_owner ON venues(owner_id);

CREATE TABLE IF NOT EXISTS courts (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    venue_id        INTEGER NOT NULL,
    name            TEXT NOT NULL,
    sport_type      TEXT NOT NULL,
    price_per_hour  REAL NOT NULL,
    description     TEXT,
    is_active       INTEGER NOT NULL DEFAULT 1,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL,
    FOREIGN KEY (venue_id) REFERENCES venues(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_courts_venue ON courts(venue_id);
CREATE INDEX IF NOT EXISTS idx_courts_sport ON courts(sport_type);

CREATE TABLE IF NOT EXISTS time_slots (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    venue_id        INTEGER NOT NULL,
    court_id        INTEGER NOT NULL,
    day_of_week     INTEGER NOT NULL CHECK (day_of_week BETWEEN 0 AND 6),
    start_time      TEXT NOT NULL,  -- HH:MM
    end_time        TEXT NOT NULL,  -- HH:MM
    is_available    INTEGER NOT NULL DEFAULT 1,
    created_at      TEXT NOT NULL,
    UNIQUE (court_id, day_of_week, start_time, end_time),
    FOREIGN KEY (venue_id) REFERENCES venues(id) ON DELETE CASCADE,
    FOREIGN KEY (court_id) REFERENCES courts(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_slots_court_day ON time_slots(court_id, day_of_week);

CREATE TABLE IF NOT EXISTS bookings (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id         INTEGER NOT NULL,
    court_id        INTEGER NOT NULL,
    venue_id        INTEGER NOT NULL,
    booking_date    TEXT NOT NULL,  -- YYYY-MM-DD
    start_time      TEXT NOT NULL,
    end_time        TEXT NOT NULL,
    total_amount    REAL NOT NULL,
    status          TEXT NOT NULL DEFAULT 'pending',
    notes           TEXT,
    cancellation_reason TEXT,
    cancelled_at    TEXT,
    confirmed_at    TEXT,
    rescheduled_at  TEXT,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY (court_id) REFERENCES courts(id) ON DELETE CASCADE,
    FOREIGN KEY (venue_id) REFERENCES venues(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_bookings_court_date ON bookings(court_id, booking_date);
CREATE INDEX IF NOT EXISTS idx_bookings_user ON bookings(user_id);
"""


# ── Helpers ───────────────────────────────────────────────────────────────


def to_json(value: list | None) -> str:
    return json.dumps([str(v) for v in value or []])


def from_json(raw: str | None) -> list:
    if not raw:
        return []
    return json.loads(raw)


def iso(value: datetime | date | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
