"""
Shared test fixtures.

Provides a FastAPI TestClient wired to:
  • a temporary SQLite database (via app lifespan)
  • rate limiting switched off
  • a ``seed`` helper that writes users, venues, courts, time slots and
    bookings straight through the repositories

The `client` fixture runs the full lifespan (DB init / shutdown), so every
test starts from an empty database.
"""

from __future__ import annotations

import functools
from datetime import date

import pytest
from fastapi.testclient import TestClient

from quickcourt.dependencies import create_access_token
from quickcourt.main import app
from quickcourt.models import (
    Booking,
    BookingStatus,
    Court,
    CourtCreate,
    Role,
    SportType,
    TimeSlot,
    UserInfo,
    Venue,
    VenueCreate,
)
from quickcourt.repositories.bookings import SqliteBookingRepository
from quickcourt.repositories.courts import SqliteCourtRepository
from quickcourt.repositories.time_slots import SqliteTimeSlotRepository
from quickcourt.repositories.users import SqliteUserRepository
from quickcourt.repositories.venues import SqliteVenueRepository


# ── Helpers ────────────────────────────────────────────────────────────────


def auth_headers(user: UserInfo) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


class Seeder:
    """Writes test data through the app's own database, on the app's loop."""

    def __init__(self, tc: TestClient) -> None:
        self.tc = tc
        db = app.state.database
        self.users = SqliteUserRepository(db)
        self.venues = SqliteVenueRepository(db)
        self.courts = SqliteCourtRepository(db)
        self.slots = SqliteTimeSlotRepository(db)
        self.bookings = SqliteBookingRepository(db)
        self._emails = 0

    def run(self, fn, *args, **kwargs):
        return self.tc.portal.call(functools.partial(fn, *args, **kwargs))

    def user(self, role: Role = Role.USER, email: str | None = None, name: str = "Test User") -> UserInfo:
        if email is None:
            self._emails += 1
            email = f"{role.value}{self._emails}@example.com"
        return self.run(self.users.create, email, name, role)

    def venue(
        self,
        owner: UserInfo,
        approved: bool = True,
        name: str = "Downtown Sports Hub",
        city: str = "Ahmedabad",
    ) -> Venue:
        body = VenueCreate(name=name, address="12 Stadium Road, Navrangpura", city=city)
        venue = self.run(self.venues.create, owner.id, body)
        if approved:
            venue = self.run(self.venues.approve, venue.id, owner.id)
        return venue

    def court(
        self,
        venue: Venue,
        sport: SportType = SportType.BADMINTON,
        price: float = 20.0,
        name: str = "Court A",
    ) -> Court:
        return self.run(self.courts.create, venue.id, CourtCreate(name=name, sport_type=sport, price_per_hour=price))

    def slot(
        self,
        court: Court,
        day_of_week: int,
        start_time: str,
        end_time: str,
        is_available: bool = True,
    ) -> TimeSlot:
        return self.run(self.slots.create, court.venue_id, court.id, day_of_week, start_time, end_time, is_available)

    def booking(
        self,
        user: UserInfo,
        court: Court,
        booking_date: date,
        start_time: str,
        end_time: str,
        status: BookingStatus | None = None,
    ) -> Booking:
        booking = self.run(
            self.bookings.create_if_free,
            user_id=user.id,
            court_id=court.id,
            venue_id=court.venue_id,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
            total_amount=court.price_per_hour,
        )
        if status is not None and status != booking.status:
            booking = self.run(self.bookings.set_status, booking.id, status)
        return booking


# ── Fixtures ───────────────────────────────────────────────────────────────


@pytest.fixture()
def _test_env(monkeypatch, tmp_path):
    """
    Internal fixture that points the app lifespan at a temp database and
    disables rate limiting.
    """
    monkeypatch.setattr("quickcourt.main.DB_PATH", str(tmp_path / "test.db"))

    from quickcourt.rate_limit import limiter as _limiter

    monkeypatch.setattr(_limiter, "enabled", False)


@pytest.fixture()
def client(_test_env) -> TestClient:
    """
    FastAPI TestClient against a fresh temp DB.

    Uses a context manager so the lifespan runs (DB init/shutdown).
    Requests are anonymous unless they carry ``auth_headers(user)``.
    """
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc

    app.dependency_overrides.clear()


@pytest.fixture()
def seed(client) -> Seeder:
    return Seeder(client)


@pytest.fixture()
def owner(seed) -> UserInfo:
    return seed.user(Role.FACILITY_OWNER, name="Olive Owner")


@pytest.fixture()
def customer(seed) -> UserInfo:
    return seed.user(Role.USER, name="Pat Player")


@pytest.fixture()
def admin(seed) -> UserInfo:
    return seed.user(Role.ADMIN, name="Ada Admin")
