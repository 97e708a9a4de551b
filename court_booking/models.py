"""Pydantic models for the court booking API and its booking core."""

import datetime as dt
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_HHMM_PATTERN = r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$"


# ── Enumerations ──────────────────────────────────────────────────────────


class CourtType(str, Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"


class CourtStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"


class TimePeriod(str, Enum):
    MORNING = "morning"
    EVENING = "evening"


class Role(str, Enum):
    """Closed set of roles the identity provider may assign."""
    GUEST = "guest"
    PLAYER = "player"
    TRAINER = "trainer"
    STAFF = "staff"
    OWNER = "owner"
    ADMIN = "admin"


# ── Reference data (read from the store) ──────────────────────────────────


class Court(BaseModel):
    """Tennis court with its seasonal price table."""
    id: str = Field(..., description="Unique court identifier")
    name: str = Field(..., description="Court name")
    type: CourtType = Field(..., description="Indoor or outdoor")
    seasonal_price_rules: Dict[str, Any] = Field(
        default_factory=dict,
        description="Hourly prices keyed by season_period_type_tier or season_type",
    )
    status: CourtStatus = Field(default=CourtStatus.AVAILABLE, description="Whether the court is offered")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Any:
        # Hosted backends hand out integer primary keys.
        return str(value) if isinstance(value, int) else value

    @field_validator("seasonal_price_rules", mode="before")
    @classmethod
    def _rules_default(cls, value: Any) -> Any:
        return {} if value is None else value


class Reservation(BaseModel):
    """Existing reservation consulted for occupancy."""
    id: str = Field(..., description="Reservation identifier")
    court_id: str = Field(..., description="Reserved court")
    start_time: datetime = Field(..., description="Start timestamp")
    end_time: datetime = Field(..., description="End timestamp")
    status: str = Field(default="new", description="Reservation status")

    @field_validator("id", "court_id", mode="before")
    @classmethod
    def _ids_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("start_time", "end_time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Stores return timestamptz; a naive value can only mean UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# ── Booking core ──────────────────────────────────────────────────────────


class Slot(BaseModel):
    """
    One bookable half-hour of one court.

    ``(court_id, date, starts_at)`` is the slot's natural key. A slot
    without a price cannot be selected, nor can a busy one.
    """
    model_config = ConfigDict(frozen=True)

    court_id: str = Field(..., description="Court this slot belongs to")
    date: dt.date = Field(..., description="Local calendar day")
    starts_at: datetime = Field(..., description="Slot start (timezone-aware)")
    ends_at: datetime = Field(..., description="Slot end, 30 minutes after start")
    price: Optional[float] = Field(None, ge=0, description="Half-hour price, None when not priced")
    is_busy: bool = Field(default=False, description="Overlaps an existing reservation")

    @model_validator(mode="after")
    def _half_hour(self) -> "Slot":
        if self.ends_at - self.starts_at != timedelta(minutes=30):
            raise ValueError("a slot spans exactly 30 minutes")
        return self

    @property
    def key(self) -> tuple:
        return (self.court_id, self.date, self.starts_at)

    @property
    def is_selectable(self) -> bool:
        return self.price is not None and not self.is_busy


class Block(BaseModel):
    """Maximal contiguous run of selected slots; the unit of booking."""
    model_config = ConfigDict(frozen=True)

    court_id: str = Field(..., description="Court identifier")
    court_name: str = Field(..., description="Court name for display")
    date: dt.date = Field(..., description="Local calendar day")
    start: str = Field(..., pattern=_HHMM_PATTERN, description="Start of the first slot (HH:MM)")
    end: str = Field(..., pattern=_HHMM_PATTERN, description="End of the last slot (HH:MM)")
    slots: List[Slot] = Field(..., min_length=1, description="Constituent slots, chronological")
    total_price: float = Field(..., ge=0, description="Sum of slot prices")


class CourtSlots(BaseModel):
    """One court's slots for one day."""
    court_id: str
    court_name: str
    court_type: CourtType
    date: dt.date
    slots: List[Slot]


# ── Viewer identity ───────────────────────────────────────────────────────


class Viewer(BaseModel):
    """Who is booking; derived from the identity provider's token."""
    user_id: Optional[str] = None
    role: Role = Role.GUEST
    is_member: bool = False

    @property
    def is_guest(self) -> bool:
        return self.user_id is None


# ── Checkout ──────────────────────────────────────────────────────────────


class ContactInfo(BaseModel):
    """Contact data submitted at checkout; validated by the assembler."""
    name: str = Field(default="", description="Full name")
    email: str = Field(default="", description="Contact email")
    phone: str = Field(default="", description="Contact phone")
    notes: str = Field(default="", description="Free-text notes")


class ReservationRequest(BaseModel):
    """Reservation row ready to be inserted into the store."""
    court_id: str = Field(..., description="Reserved court")
    begins_at: datetime = Field(..., description="Block start")
    ends_at: datetime = Field(..., description="Block end")
    price: float = Field(..., ge=0, description="Block total price")
    user_id: Optional[str] = Field(None, description="Signed-in user, None for guests")
    status: str = Field(default="new", description="Initial status")
    notes: str = Field(default="", description="Notes, or guest contact JSON")


class FieldError(BaseModel):
    """Validation failure of one input field."""
    field: str
    message: str


# ── API request / response bodies ─────────────────────────────────────────


class Error(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Health status")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(..., description="Current timestamp")


class SlotGridResponse(BaseModel):
    """Slot grid for a range of days."""
    date_from: date
    days: int
    is_member: bool
    courts: List[CourtSlots]


class PriceQuote(BaseModel):
    """Price of a time range on one court."""
    court_id: str
    date: dt.date
    start: str
    end: str
    price: Optional[float]
    formatted: str


class ToggleRequest(BaseModel):
    """Click on one grid cell."""
    court_id: str = Field(..., description="Court of the clicked cell")
    date: dt.date = Field(..., description="Day of the clicked cell")
    start: str = Field(..., pattern=_HHMM_PATTERN, description="Slot start (HH:MM)")


class BookingSessionResponse(BaseModel):
    """Current selection of a booking session."""
    id: str
    blocks: List[Block]
    total_price: float
    formatted_total: str


class CheckoutResponse(BaseModel):
    """Reservations created from a session's selection."""
    reservations: List[ReservationRequest]
    total_price: float
