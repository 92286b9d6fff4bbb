"""
Authorization policy.

Two layers decide whether a user may do something:

  • the role → permission table (``ROLE_PERMISSIONS``)
  • ownership of the concrete resource, when one is given

Admins hold every permission and bypass ownership.  Routers call
``authorize()`` once they have loaded the resource, or depend on
``require_permission()`` for role-only checks.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Coroutine

from fastapi import Depends

from quickcourt.dependencies import get_current_user
from quickcourt.errors import ForbiddenError, NotFoundError
from quickcourt.models import Booking, Court, Role, UserInfo, Venue
from quickcourt.repositories.courts import SqliteCourtRepository
from quickcourt.repositories.venues import SqliteVenueRepository


class Action(str, Enum):
    PROFILE_UPDATE = "profile:update"

    BOOKING_CREATE = "booking:create"
    BOOKING_VIEW = "booking:view"
    BOOKING_CANCEL = "booking:cancel"
    BOOKING_RESCHEDULE = "booking:reschedule"

    VENUE_CREATE = "venue:create"
    VENUE_MANAGE = "venue:manage"
    VENUE_STATS = "venue:stats"
    COURT_MANAGE = "court:manage"
    TIMESLOT_MANAGE = "timeslot:manage"
    BOOKING_MANAGE = "booking:manage"

    ADMIN_DASHBOARD = "admin:dashboard"
    VENUE_REVIEW = "venue:review"
    USER_MANAGE = "user:manage"


_CUSTOMER = frozenset(
    {
        Action.PROFILE_UPDATE,
        Action.BOOKING_CREATE,
        Action.BOOKING_VIEW,
        Action.BOOKING_CANCEL,
        Action.BOOKING_RESCHEDULE,
    }
)

_OWNER = _CUSTOMER | {
    Action.VENUE_CREATE,
    Action.VENUE_MANAGE,
    Action.VENUE_STATS,
    Action.COURT_MANAGE,
    Action.TIMESLOT_MANAGE,
    Action.BOOKING_MANAGE,
}

ROLE_PERMISSIONS: dict[Role, frozenset[Action]] = {
    Role.USER: _CUSTOMER,
    Role.FACILITY_OWNER: frozenset(_OWNER),
    Role.ADMIN: frozenset(Action),
}


def _owns(user: UserInfo, resource: Any) -> bool:
    if isinstance(resource, Venue):
        return resource.owner_id == user.id
    if isinstance(resource, Booking):
        return resource.user_id == user.id
    if isinstance(resource, UserInfo):
        return resource.id == user.id
    return False


def is_allowed(user: UserInfo, action: Action, resource: Any = None) -> bool:
    """Whether ``user`` may perform ``action`` (on ``resource``, if given)."""
    if user.is_suspended:
        return False
    if action not in ROLE_PERMISSIONS.get(user.role, frozenset()):
        return False
    if resource is None or user.role == Role.ADMIN:
        return True
    return _owns(user, resource)


def authorize(
    user: UserInfo,
    action: Action,
    resource: Any = None,
    message: str = "Insufficient permissions",
) -> None:
    if not is_allowed(user, action, resource):
        raise ForbiddenError(message)


def require_permission(action: Action) -> Callable[..., Coroutine[Any, Any, UserInfo]]:
    """FastAPI dependency: the current user, provided their role grants ``action``."""

    async def _dependency(user: UserInfo = Depends(get_current_user)) -> UserInfo:
        authorize(user, action)
        return user

    return _dependency


# ── Resource loaders ──────────────────────────────────────────────────────


async def owned_venue(
    venues: SqliteVenueRepository,
    user: UserInfo,
    venue_id: int,
    action: Action = Action.VENUE_MANAGE,
) -> Venue:
    """Load a venue and check ``user`` may perform ``action`` on it."""
    venue = await venues.get(venue_id)
    if venue is None:
        raise NotFoundError("Venue not found")
    authorize(user, action, venue)
    return venue


async def owned_court(
    venues: SqliteVenueRepository,
    courts: SqliteCourtRepository,
    user: UserInfo,
    venue_id: int,
    court_id: int,
    action: Action = Action.COURT_MANAGE,
) -> tuple[Venue, Court]:
    """Load a court that must belong to ``venue_id``, itself owned by ``user``."""
    venue = await owned_venue(venues, user, venue_id, action)
    court = await courts.get(court_id)
    if court is None or court.venue_id != venue.id:
        raise NotFoundError("Court not found")
    return venue, court
