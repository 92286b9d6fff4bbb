"""
Server-rendered pages.

``ROUTE_ROLES`` maps each gated path to the roles allowed to open it.  The
gate only decides what to render; every action a page triggers goes through
the API, which authorizes again.
"""

import logging
import secrets
from datetime import date
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Cookie, Form, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from quickcourt.config import OTP_TTL_SECONDS
from quickcourt.dependencies import (
    SESSION_COOKIE,
    Courts,
    Projector,
    Users,
    Venues,
    Bookings,
    create_access_token,
    create_session_cookie,
    load_user,
)
from quickcourt.errors import ApiError, NotFoundError
from quickcourt.models import DAY_NAMES, Role, UserInfo
from quickcourt.policy import Action, is_allowed
from quickcourt.rate_limit import AUTH, STRICT, limiter
from quickcourt.services import catalog
from quickcourt.services.availability import parse_date
from quickcourt.services.email import send_otp_email

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))

router = APIRouter(tags=["pages"], include_in_schema=False)

ROUTE_ROLES: dict[str, frozenset[Role]] = {
    "/bookings": frozenset({Role.USER}),
    "/owner/courts/{court_id}/time-slots": frozenset({Role.FACILITY_OWNER, Role.ADMIN}),
    "/admin": frozenset({Role.ADMIN}),
}


def _render(request: Request, name: str, context: dict[str, Any], status_code: int = 200) -> HTMLResponse:
    return templates.TemplateResponse(request, name, context, status_code=status_code)


async def _gate(request: Request, users: Users, session: str | None, route: str) -> UserInfo | HTMLResponse:
    """The visitor, or the response to send instead (login redirect / 403 page)."""
    allowed = ROUTE_ROLES[route]

    user = await load_user(users, session)
    if user is None:
        return RedirectResponse(f"/login?next={request.url.path}", status_code=status.HTTP_303_SEE_OTHER)
    if user.role not in allowed:
        return _forbidden(request, user)
    return user


def _forbidden(request: Request, user: UserInfo | None) -> HTMLResponse:
    return _render(request, "pages/forbidden.html", {"user": user, "not_found": False}, status_code=status.HTTP_403_FORBIDDEN)


def _not_found(request: Request, user: UserInfo | None) -> HTMLResponse:
    return _render(request, "pages/forbidden.html", {"user": user, "not_found": True}, status_code=status.HTTP_404_NOT_FOUND)


def _safe_next(next_url: str | None) -> str:
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return "/"


# ── Public pages ───────────────────────────────────────────────────────────


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    users: Users,
    venues: Venues,
    q: str | None = Query(None),
    session: str | None = Cookie(None),
):
    items, total = await venues.list_public(search=q, limit=50)
    return _render(
        request,
        "pages/index.html",
        {"user": await load_user(users, session), "venues": items, "total": total, "q": q or ""},
    )


@router.get("/venues/{venue_id}", response_class=HTMLResponse)
async def venue_page(
    request: Request,
    venue_id: int,
    users: Users,
    venues: Venues,
    courts: Courts,
    projector: Projector,
    date_str: str | None = Query(None, alias="date"),
    session: str | None = Cookie(None),
):
    try:
        selected = parse_date(date_str) if date_str else date.today()
    except ApiError:
        selected = date.today()

    user = await load_user(users, session)
    try:
        details = await catalog.venue_details(venues, courts, projector, venue_id, selected)
    except NotFoundError:
        return _not_found(request, user)
    return _render(
        request,
        "pages/venue.html",
        {
            "user": user,
            "venue": details.venue,
            "courts": details.courts,
            "selected_date": selected.isoformat(),
        },
    )


# ── Login ──────────────────────────────────────────────────────────────────


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, next: str | None = Query(None)):
    return _render(request, "pages/login.html", {"step": "email", "email": "", "next": _safe_next(next), "error": None})


@router.post("/login", response_class=HTMLResponse)
@limiter.limit(STRICT)
async def login_request_code(
    request: Request,
    users: Users,
    email: str = Form(...),
    next: str = Form("/"),
):
    user = await users.get_by_email(email.strip())
    if user is None or user.is_suspended:
        return _render(
            request,
            "pages/login.html",
            {"step": "email", "email": email, "next": _safe_next(next), "error": "No active account for this email"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    otp_code = f"{secrets.randbelow(1_000_000):06d}"
    await users.create_otp(user.email, otp_code, ttl_seconds=OTP_TTL_SECONDS)
    await send_otp_email(user.email, otp_code)
    return _render(request, "pages/login.html", {"step": "code", "email": user.email, "next": _safe_next(next), "error": None})


@router.post("/login/verify")
@limiter.limit(AUTH)
async def login_verify(
    request: Request,
    users: Users,
    email: str = Form(...),
    otp_code: str = Form(...),
    next: str = Form("/"),
):
    user = await users.get_by_email(email)
    if user is None or user.is_suspended or not await users.verify_otp(email, otp_code.strip()):
        return _render(
            request,
            "pages/login.html",
            {"step": "code", "email": email, "next": _safe_next(next), "error": "Invalid or expired code"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    await users.touch_login(user.id)
    response = RedirectResponse(_safe_next(next), status_code=status.HTTP_303_SEE_OTHER)
    create_session_cookie(response, create_access_token(user))
    return response


@router.get("/logout")
async def logout_page():
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(SESSION_COOKIE)
    return response


# ── Gated pages ────────────────────────────────────────────────────────────


@router.get("/bookings", response_class=HTMLResponse)
async def my_bookings_page(
    request: Request,
    users: Users,
    bookings: Bookings,
    session: str | None = Cookie(None),
):
    user = await _gate(request, users, session, "/bookings")
    if not isinstance(user, UserInfo):
        return user

    items, _ = await bookings.list_for_user(user.id, limit=100)
    return _render(request, "pages/bookings.html", {"user": user, "bookings": items})


@router.get("/owner/courts/{court_id}/time-slots", response_class=HTMLResponse)
async def owner_time_slots_page(
    request: Request,
    court_id: int,
    users: Users,
    venues: Venues,
    courts: Courts,
    projector: Projector,
    session: str | None = Cookie(None),
):
    user = await _gate(request, users, session, "/owner/courts/{court_id}/time-slots")
    if not isinstance(user, UserInfo):
        return user

    court = await courts.get(court_id)
    venue = await venues.get(court.venue_id) if court else None
    if court is None or venue is None:
        return _not_found(request, user)
    if not is_allowed(user, Action.TIMESLOT_MANAGE, venue):
        return _forbidden(request, user)

    by_day = await projector.get_slots_by_day(court_id)
    return _render(
        request,
        "pages/owner_time_slots.html",
        {
            "user": user,
            "venue": venue,
            "court": court,
            "days": [(idx, DAY_NAMES[idx], by_day.get(idx, [])) for idx in range(len(DAY_NAMES))],
            "stats": await projector.get_court_stats(court_id),
        },
    )


@router.get("/admin", response_class=HTMLResponse)
async def admin_page(
    request: Request,
    users: Users,
    venues: Venues,
    session: str | None = Cookie(None),
):
    user = await _gate(request, users, session, "/admin")
    if not isinstance(user, UserInfo):
        return user

    pending, total = await venues.list_for_review("pending", limit=100)
    counts = await venues.statistics()
    return _render(request, "pages/admin.html", {"user": user, "pending": pending, "total": total, "counts": counts})
