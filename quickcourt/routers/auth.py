"""
Authentication endpoints – registration and email OTP login with JWT tokens.
"""

import logging
import secrets

from fastapi import APIRouter, Request, Response, status

from quickcourt.config import OTP_TTL_SECONDS
from quickcourt.dependencies import (
    SESSION_COOKIE,
    CurrentUser,
    Users,
    create_access_token,
    create_session_cookie,
)
from quickcourt.errors import ConflictError, ForbiddenError, UnauthorizedError, handler_errors
from quickcourt.models import (
    AuthResponse,
    Envelope,
    MessageResponse,
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    ProfileUpdate,
    RegisterRequest,
    Role,
    UserInfo,
)
from quickcourt.policy import Action, authorize
from quickcourt.rate_limit import AUTH, STRICT, limiter
from quickcourt.services.email import send_otp_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def _issue_otp(users: Users, email: str) -> OtpRequestResponse:
    otp_code = f"{secrets.randbelow(1_000_000):06d}"
    await users.create_otp(email, otp_code, ttl_seconds=OTP_TTL_SECONDS)
    await send_otp_email(email, otp_code)
    return OtpRequestResponse(message=f"OTP sent to {email}", expires_in_seconds=OTP_TTL_SECONDS)


@router.post(
    "/register",
    response_model=Envelope[OtpRequestResponse],
    status_code=status.HTTP_201_CREATED,
    operation_id="register",
    summary="Create an account and send a login code",
)
@limiter.limit(STRICT)
async def register(request: Request, body: RegisterRequest, users: Users):
    if await users.get_by_email(body.email) is not None:
        raise ConflictError("User with this email already exists")

    with handler_errors("Registration failed"):
        user = await users.create(body.email, body.name, Role(body.role), body.phone)
        logger.info("Registered user %d (%s) as %s", user.id, user.email, user.role.value)
        otp = await _issue_otp(users, user.email)

    return Envelope(message="Registration successful. Check your email for the login code.", data=otp)


@router.post(
    "/request-otp",
    response_model=OtpRequestResponse,
    operation_id="requestOtp",
    summary="Request a one-time password sent to the given email",
)
@limiter.limit(STRICT)
async def request_otp(request: Request, body: OtpRequest, users: Users):
    """
    Generate a 6-digit OTP, store it in the database, and send it via email.
    In dev mode (no SMTP configured), the OTP is logged to the console.
    """
    user = await users.get_by_email(body.email)
    if user is None:
        raise UnauthorizedError("No account found for this email")
    if user.is_suspended:
        raise ForbiddenError("Account suspended", user.suspension_reason)

    with handler_errors("Failed to send OTP"):
        return await _issue_otp(users, user.email)


@router.post(
    "/verify-otp",
    response_model=AuthResponse,
    operation_id="verifyOtp",
    summary="Verify OTP and receive a JWT (body and session cookie)",
)
@limiter.limit(AUTH)
async def verify_otp(request: Request, body: OtpVerifyRequest, response: Response, users: Users):
    if not await users.verify_otp(body.email, body.otp_code):
        raise UnauthorizedError("Invalid or expired OTP")

    user = await users.get_by_email(body.email)
    if user is None:
        raise UnauthorizedError("Invalid or expired OTP")
    if user.is_suspended:
        raise ForbiddenError("Account suspended", user.suspension_reason)

    await users.touch_login(user.id)
    token = create_access_token(user)
    create_session_cookie(response, token)
    return AuthResponse(token=token, user=user)


@router.get(
    "/me",
    response_model=Envelope[UserInfo],
    operation_id="getMe",
    summary="Get current authenticated user info",
)
async def get_me(current_user: CurrentUser):
    return Envelope(data=current_user)


@router.put(
    "/profile",
    response_model=Envelope[UserInfo],
    operation_id="updateProfile",
    summary="Update name and phone of the current user",
)
async def update_profile(body: ProfileUpdate, current_user: CurrentUser, users: Users):
    authorize(current_user, Action.PROFILE_UPDATE, current_user)
    with handler_errors("Failed to update profile"):
        user = await users.update_profile(current_user.id, body.model_dump(exclude_none=True))
    return Envelope(message="Profile updated successfully", data=user)


@router.post(
    "/logout",
    response_model=MessageResponse,
    operation_id="logout",
    summary="Clear the session cookie",
)
async def logout(current_user: CurrentUser, response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return MessageResponse(message="Logged out successfully")
