import logging
from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
from fastapi import Cookie, Depends, Header, Query, Request, Response

from quickcourt.config import ENVIRONMENT, JWT_ALGORITHM, JWT_EXPIRY_DAYS, JWT_SECRET
from quickcourt.db import Database
from quickcourt.errors import ForbiddenError, UnauthorizedError
from quickcourt.models import Pagination, UserInfo
from quickcourt.repositories.bookings import SqliteBookingRepository
from quickcourt.repositories.courts import SqliteCourtRepository
from quickcourt.repositories.time_slots import SqliteTimeSlotRepository
from quickcourt.repositories.users import SqliteUserRepository
from quickcourt.repositories.venues import SqliteVenueRepository
from quickcourt.services.availability import AvailabilityProjector
from quickcourt.services.bookings import BookingService
from quickcourt.services.time_slots import TimeSlotService

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"


# ── Pagination ─────────────────────────────────────────────────────────────


class PaginationParams:
    def __init__(
        self,
        limit: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 20,
        offset: Annotated[int, Query(ge=0, description="Items to skip")] = 0,
    ):
        self.limit = limit
        self.offset = offset

    def meta(self, total: int) -> Pagination:
        return Pagination(
            total=total,
            limit=self.limit,
            offset=self.offset,
            has_next=self.offset + self.limit < total,
        )


# ── Storage ────────────────────────────────────────────────────────────────


def get_database(request: Request) -> Database:
    return request.app.state.database


DB = Annotated[Database, Depends(get_database)]


def get_user_repo(db: DB) -> SqliteUserRepository:
    return SqliteUserRepository(db)


def get_venue_repo(db: DB) -> SqliteVenueRepository:
    return SqliteVenueRepository(db)


def get_court_repo(db: DB) -> SqliteCourtRepository:
    return SqliteCourtRepository(db)


def get_time_slot_repo(db: DB) -> SqliteTimeSlotRepository:
    return SqliteTimeSlotRepository(db)


def get_booking_repo(db: DB) -> SqliteBookingRepository:
    return SqliteBookingRepository(db)


Users = Annotated[SqliteUserRepository, Depends(get_user_repo)]
Venues = Annotated[SqliteVenueRepository, Depends(get_venue_repo)]
Courts = Annotated[SqliteCourtRepository, Depends(get_court_repo)]
Bookings = Annotated[SqliteBookingRepository, Depends(get_booking_repo)]


def get_projector(
    slots: Annotated[SqliteTimeSlotRepository, Depends(get_time_slot_repo)],
    bookings: Bookings,
) -> AvailabilityProjector:
    return AvailabilityProjector(slots, bookings)


def get_time_slot_service(
    slots: Annotated[SqliteTimeSlotRepository, Depends(get_time_slot_repo)],
) -> TimeSlotService:
    return TimeSlotService(slots)


def get_booking_service(bookings: Bookings, courts: Courts, venues: Venues) -> BookingService:
    return BookingService(bookings, courts, venues)


Projector = Annotated[AvailabilityProjector, Depends(get_projector)]
TimeSlots = Annotated[TimeSlotService, Depends(get_time_slot_service)]
BookingFlow = Annotated[BookingService, Depends(get_booking_service)]


# ── JWT / Session ──────────────────────────────────────────────────────────


def create_access_token(user: UserInfo) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "iat": now,
        "exp": now + timedelta(days=JWT_EXPIRY_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def create_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        samesite="lax",
        secure=ENVIRONMENT == "production",
        max_age=JWT_EXPIRY_DAYS * 86400,
    )


def decode_token(token: str | None) -> dict | None:
    """Claims of a valid token, or None. Never raises."""
    if not token:
        return None
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def load_user(users: SqliteUserRepository, token: str | None) -> UserInfo | None:
    """The active user a token belongs to, or None."""
    claims = decode_token(token)
    if claims is None:
        return None
    try:
        user = await users.get(int(claims.get("sub", "")))
    except ValueError:
        return None
    if user is None or user.is_suspended:
        return None
    return user


async def get_current_user(
    users: Users,
    authorization: Annotated[str | None, Header()] = None,
    session: Annotated[str | None, Cookie()] = None,
) -> UserInfo:
    token = _bearer_token(authorization) or session
    if not token:
        raise UnauthorizedError("Access token required")

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        user_id = int(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise ForbiddenError("Invalid or expired token") from None

    # The role in the token is informational; the stored record decides.
    user = await users.get(user_id)
    if user is None:
        raise ForbiddenError("Invalid or expired token", "User no longer exists")
    if user.is_suspended:
        raise ForbiddenError("Account suspended", user.suspension_reason)
    return user


CurrentUser = Annotated[UserInfo, Depends(get_current_user)]
