"""Pydantic models for the QuickCourt API.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Generic, Literal, Optional, TypeVar

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    computed_field,
    model_validator,
)
from pydantic.alias_generators import to_camel

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


def day_name(day_of_week: int | None) -> str:
    """Human-readable day for a 0 (Sunday) .. 6 (Saturday) index."""
    if day_of_week is None or not 0 <= day_of_week < len(DAY_NAMES):
        return "Unknown"
    return DAY_NAMES[day_of_week]


def normalize_time(value: str) -> str:
    """'9:5' style input is not accepted by the pattern; '9:05' becomes '09:05'."""
    hours, minutes = value.split(":")
    return f"{int(hours):02d}:{int(minutes):02d}"


def to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def duration_hours(start_time: str, end_time: str) -> float:
    return (to_minutes(end_time) - to_minutes(start_time)) / 60


HHMM = Annotated[str, StringConstraints(pattern=TIME_PATTERN), AfterValidator(normalize_time)]

DataT = TypeVar("DataT")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Enums ─────────────────────────────────────────────────────────────────


class Role(str, Enum):
    USER = "user"
    FACILITY_OWNER = "facility_owner"
    ADMIN = "admin"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class SportType(str, Enum):
    BADMINTON = "badminton"
    TENNIS = "tennis"
    SQUASH = "squash"
    BASKETBALL = "basketball"
    FOOTBALL = "football"
    CRICKET = "cricket"
    TABLE_TENNIS = "table_tennis"
    VOLLEYBALL = "volleyball"


# ── Envelopes ─────────────────────────────────────────────────────────────


class Envelope(ApiModel, Generic[DataT]):
    """Standard success envelope."""
    success: bool = Field(default=True, description="Always true for successful responses")
    message: Optional[str] = Field(None, description="Optional human-readable message")
    data: DataT = Field(..., description="Response payload")


class MessageResponse(ApiModel):
    success: bool = True
    message: str


class ErrorResponse(ApiModel):
    """Failure envelope returned by every error handler."""
    success: bool = Field(default=False)
    message: str = Field(..., description="Generic error message")
    error: Optional[str] = Field(None, description="Underlying error text")
    errors: Optional[list[dict[str, Any]]] = Field(None, description="Field validation errors")


class Pagination(ApiModel):
    total: int = Field(..., ge=0, description="Total matching items")
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Items skipped")
    has_next: bool = Field(..., description="Whether another page exists")


class Page(ApiModel, Generic[DataT]):
    items: list[DataT]
    pagination: Pagination


# ── Users ─────────────────────────────────────────────────────────────────


class UserInfo(ApiModel):
    id: int
    email: EmailStr
    name: str
    phone: Optional[str] = None
    role: Role
    is_suspended: bool = False
    suspension_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


class RegisterRequest(ApiModel):
    email: EmailStr = Field(..., description="User email address")
    name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    role: Literal["user", "facility_owner"] = Field(default="user", description="Self-service roles only")


class OtpRequest(ApiModel):
    email: EmailStr


class OtpRequestResponse(ApiModel):
    message: str
    expires_in_seconds: int


class OtpVerifyRequest(ApiModel):
    email: EmailStr
    otp_code: str = Field(..., pattern=r"^\d{6}$", description="6-digit one-time password")


class AuthResponse(ApiModel):
    token: str = Field(..., description="Bearer token (also set as the session cookie)")
    user: UserInfo


class ProfileUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)


class UserStatusUpdate(ApiModel):
    is_suspended: bool
    reason: Optional[str] = Field(None, max_length=255)


# ── Venues ────────────────────────────────────────────────────────────────


class Venue(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    address: str
    city: str
    amenities: list[str] = Field(default_factory=list)
    rating: float = 0.0
    total_reviews: int = 0
    price_per_hour: Optional[float] = None
    is_approved: bool = False
    owner_id: int
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    rejection_reason: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VenuePublic(ApiModel):
    """Venue fields embedded in public court listings."""
    id: int
    name: str
    city: str
    address: str
    rating: float


class VenueListItem(Venue):
    courts_count: int = 0
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    available_sports: list[str] = Field(default_factory=list)


class CourtCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    sport_type: SportType
    price_per_hour: float = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=500)


class CourtUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sport_type: Optional[SportType] = None
    price_per_hour: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=500)


class VenueCreate(ApiModel):
    name: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    address: str = Field(..., min_length=10, max_length=500)
    city: str = Field(..., min_length=2, max_length=255)
    amenities: list[str] = Field(default_factory=list)
    price_per_hour: Optional[float] = Field(None, ge=0)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)
    courts: list[CourtCreate] = Field(default_factory=list, description="Courts created together with the venue")


class VenueUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    address: Optional[str] = Field(None, min_length=10, max_length=500)
    city: Optional[str] = Field(None, min_length=2, max_length=255)
    amenities: Optional[list[str]] = None
    price_per_hour: Optional[float] = Field(None, ge=0)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=30)


class VenueReview(ApiModel):
    action: Literal["approve", "reject"]
    rejection_reason: Optional[str] = Field(None, max_length=500)


class VenueStats(ApiModel):
    venue_id: int
    total_bookings: int = 0
    pending_bookings: int = 0
    confirmed_bookings: int = 0
    completed_bookings: int = 0
    cancelled_bookings: int = 0
    total_earnings: float = 0.0
    active_courts: int = 0


class VenueCounts(ApiModel):
    total: int = 0
    approved: int = 0
    pending: int = 0
    rejected: int = 0


# ── Courts ────────────────────────────────────────────────────────────────


class Court(ApiModel):
    id: int
    venue_id: int
    name: str
    sport_type: str
    price_per_hour: float
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    venue_name: Optional[str] = None
    venue_city: Optional[str] = None


class NextAvailableSlot(ApiModel):
    date: date
    start_time: str
    end_time: str
    price: float


class CourtListing(Court):
    """Court with its venue's public fields, as returned by sport search."""
    venue: VenuePublic
    is_available: Optional[bool] = None
    next_available_slot: Optional[NextAvailableSlot] = None


class CourtsBySportResponse(ApiModel):
    sport_type: str
    courts: list[CourtListing]
    filters: dict[str, Any]
    pagination: Pagination


class SportSummary(ApiModel):
    name: str
    courts_count: int
    venues_count: int
    min_price: Optional[float] = None
    avg_price: Optional[float] = None
    max_price: Optional[float] = None
    description: str


# ── Time slots ────────────────────────────────────────────────────────────


class TimeSlot(ApiModel):
    """A recurring weekly availability template for one court."""
    id: int
    venue_id: int
    court_id: int
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday .. 6 = Saturday")
    start_time: HHMM
    end_time: HHMM
    is_available: bool = True
    created_at: Optional[datetime] = None
    court_name: Optional[str] = None
    sport_type: Optional[str] = None
    price_per_hour: Optional[float] = None
    venue_name: Optional[str] = None

    @computed_field(alias="dayName")  # type: ignore[prop-decorator]
    @property
    def day_name(self) -> str:
        return day_name(self.day_of_week)

    @computed_field(alias="durationHours")  # type: ignore[prop-decorator]
    @property
    def duration_hours(self) -> float:
        return duration_hours(self.start_time, self.end_time)

    @computed_field(alias="price")  # type: ignore[prop-decorator]
    @property
    def price(self) -> float:
        if not self.price_per_hour:
            return 0.0
        return round(self.price_per_hour * self.duration_hours, 2)

    def overlaps(self, start_time: str, end_time: str) -> bool:
        return self.start_time < end_time and self.end_time > start_time


class TimeSlotCreate(ApiModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday .. 6 = Saturday")
    start_time: HHMM = Field(..., description="Start time (HH:MM)")
    end_time: HHMM = Field(..., description="End time (HH:MM)")
    is_available: bool = True

    @model_validator(mode="after")
    def _check_order(self) -> "TimeSlotCreate":
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class TimeSlotBulkCreate(ApiModel):
    slots: list[TimeSlotCreate] = Field(..., min_length=1, max_length=500)


class TimeSlotUpdate(ApiModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[HHMM] = None
    end_time: Optional[HHMM] = None
    is_available: Optional[bool] = None

    @model_validator(mode="after")
    def _check_order(self) -> "TimeSlotUpdate":
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class AvailabilityUpdate(ApiModel):
    is_available: bool


class BulkCreateResult(ApiModel):
    requested: int
    created: int


class DeleteResult(ApiModel):
    deleted: int


class DayStats(ApiModel):
    total: int = 0
    available: int = 0
    blocked: int = 0


class DaySlots(ApiModel):
    date: date
    day_of_week: int
    day_name: str
    slots: list[TimeSlot]


# ── Bookings ──────────────────────────────────────────────────────────────


class Booking(ApiModel):
    id: int
    user_id: int
    court_id: int
    venue_id: int
    booking_date: date
    start_time: HHMM
    end_time: HHMM
    total_amount: float
    status: BookingStatus
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    rescheduled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    court_name: Optional[str] = None
    sport_type: Optional[str] = None
    venue_name: Optional[str] = None
    venue_city: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class BookingCreate(ApiModel):
    court_id: int = Field(..., ge=1)
    booking_date: date
    start_time: HHMM
    end_time: HHMM
    notes: Optional[str] = Field(None, max_length=500)
    total_amount: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "BookingCreate":
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class BookingCancel(ApiModel):
    reason: Optional[str] = Field(None, max_length=500)


class BookingReschedule(ApiModel):
    new_date: date
    new_start_time: HHMM
    new_end_time: HHMM

    @model_validator(mode="after")
    def _check_order(self) -> "BookingReschedule":
        if self.new_start_time >= self.new_end_time:
            raise ValueError("newStartTime must be before newEndTime")
        return self


class BookingStatusUpdate(ApiModel):
    status: Literal["confirmed", "cancelled"]
    reason: Optional[str] = Field(None, min_length=3, max_length=255)


class BookingCreated(ApiModel):
    booking: Booking
    payment_required: bool = True
    payment_amount: float


class BookingDetails(ApiModel):
    booking: Booking
    can_cancel: bool
    can_reschedule: bool


class CancelResult(ApiModel):
    booking_id: int
    refund_eligible: bool
    refund_amount: float


class RescheduleResult(ApiModel):
    booking: Booking
    price_difference: float


# ── Dashboards ────────────────────────────────────────────────────────────


class OwnerDashboard(ApiModel):
    total_venues: int = 0
    approved_venues: int = 0
    pending_venues: int = 0
    total_courts: int = 0
    active_courts: int = 0
    total_bookings: int = 0
    confirmed_bookings: int = 0
    total_revenue: float = 0.0
    recent_bookings: list[Booking] = Field(default_factory=list)


class AdminDashboard(ApiModel):
    total_users: int = 0
    users_by_role: dict[str, int] = Field(default_factory=dict)
    venues: VenueCounts
    total_bookings: int = 0
    bookings_by_status: dict[str, int] = Field(default_factory=dict)


class VenueDetails(ApiModel):
    venue: Venue
    courts: list["CourtWithSlots"]
    requested_date: Optional[date] = None


class CourtWithSlots(Court):
    available_slots: Optional[list[TimeSlot]] = None


VenueDetails.model_rebuild()


class HealthResponse(ApiModel):
    status: str = Field(..., description="Health status")
    timestamp: datetime = Field(..., description="Current timestamp")
    uptime: float = Field(..., description="Seconds since startup")
    database: str = Field(..., description="Connected / Disconnected")
    version: str
