"""
Admin endpoints – platform dashboard, venue moderation and user management.
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query

from quickcourt.dependencies import Bookings, PaginationParams, Users, Venues
from quickcourt.errors import BadRequestError, NotFoundError, handler_errors
from quickcourt.models import (
    AdminDashboard,
    Envelope,
    Page,
    Role,
    UserInfo,
    UserStatusUpdate,
    Venue,
    VenueListItem,
    VenueReview,
)
from quickcourt.policy import Action, require_permission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get(
    "/dashboard",
    response_model=Envelope[AdminDashboard],
    operation_id="getAdminDashboard",
    summary="Platform-wide user, venue and booking counts",
)
async def get_admin_dashboard(
    users: Users,
    venues: Venues,
    bookings: Bookings,
    _admin: UserInfo = Depends(require_permission(Action.ADMIN_DASHBOARD)),
):
    with handler_errors("Failed to fetch dashboard data"):
        by_role = await users.count_by_role()
        venue_counts = await venues.statistics()
        by_status = await bookings.count_by_status()

    return Envelope(
        data=AdminDashboard(
            total_users=sum(by_role.values()),
            users_by_role=by_role,
            venues=venue_counts,
            total_bookings=sum(by_status.values()),
            bookings_by_status=by_status,
        )
    )


@router.get(
    "/venues",
    response_model=Envelope[Page[VenueListItem]],
    operation_id="listVenuesForReview",
    summary="Venues by moderation state",
)
async def list_venues_for_review(
    venues: Venues,
    _admin: UserInfo = Depends(require_permission(Action.VENUE_REVIEW)),
    pagination: PaginationParams = Depends(PaginationParams),
    status_filter: Literal["pending", "approved", "rejected"] | None = Query(None, alias="status"),
):
    with handler_errors("Failed to fetch venues"):
        items, total = await venues.list_for_review(status_filter, pagination.limit, pagination.offset)
    return Envelope(data=Page(items=items, pagination=pagination.meta(total)))


@router.patch(
    "/venues/{venue_id}/review",
    response_model=Envelope[Venue],
    operation_id="reviewVenue",
    summary="Approve or reject a venue",
)
async def review_venue(
    venue_id: int,
    body: VenueReview,
    venues: Venues,
    admin: UserInfo = Depends(require_permission(Action.VENUE_REVIEW)),
):
    venue = await venues.get(venue_id)
    if venue is None:
        raise NotFoundError("Venue not found")

    if body.action == "approve":
        if venue.is_approved:
            raise BadRequestError("Venue is already approved")
        with handler_errors("Failed to review venue"):
            updated = await venues.approve(venue_id, admin.id)
        logger.info("Venue %d approved by admin %d", venue_id, admin.id)
        return Envelope(message="Venue approved successfully", data=updated)

    if not body.rejection_reason or not body.rejection_reason.strip():
        raise BadRequestError("Rejection reason is required")
    with handler_errors("Failed to review venue"):
        updated = await venues.reject(venue_id, admin.id, body.rejection_reason.strip())
    logger.info("Venue %d rejected by admin %d", venue_id, admin.id)
    return Envelope(message="Venue rejected successfully", data=updated)


@router.get(
    "/users",
    response_model=Envelope[Page[UserInfo]],
    operation_id="listUsers",
    summary="List users",
)
async def list_users(
    users: Users,
    _admin: UserInfo = Depends(require_permission(Action.USER_MANAGE)),
    pagination: PaginationParams = Depends(PaginationParams),
    role: Role | None = Query(None),
    search: str | None = Query(None, description="Match name or email"),
):
    with handler_errors("Failed to fetch users"):
        items, total = await users.list_users(role, search, pagination.limit, pagination.offset)
    return Envelope(data=Page(items=items, pagination=pagination.meta(total)))


@router.patch(
    "/users/{user_id}/status",
    response_model=Envelope[UserInfo],
    operation_id="updateUserStatus",
    summary="Suspend or reinstate a user",
)
async def update_user_status(
    user_id: int,
    body: UserStatusUpdate,
    users: Users,
    admin: UserInfo = Depends(require_permission(Action.USER_MANAGE)),
):
    target = await users.get(user_id)
    if target is None:
        raise NotFoundError("User not found")
    if target.id == admin.id:
        raise BadRequestError("You cannot change your own status")
    if target.role == Role.ADMIN:
        raise BadRequestError("Admin accounts cannot be suspended")

    with handler_errors("Failed to update user status"):
        updated = await users.set_suspended(user_id, body.is_suspended, body.reason)
    state = "suspended" if body.is_suspended else "reinstated"
    logger.info("User %d %s by admin %d", user_id, state, admin.id)
    return Envelope(message=f"User {state} successfully", data=updated)
