from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from rental_admin.models import BookingStatus


class BookingRecord(BaseModel):
    """Snapshot of a booking row as seen by the lifecycle core."""

    booking_id: int
    car_id: int | None = None
    user_id: int | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    pickup_location: str | None = None
    pickup_date: date
    pickup_time: time | None = None
    return_location: str | None = None
    return_date: date
    return_time: time | None = None
    rental_type: str = "personal"
    driver: str | None = None
    status: BookingStatus
    price: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    cancel_fee: Decimal = Decimal("0")
    cancel_reason: str | None = None
    cancel_date: date | None = None
    officer: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Transition requests
# ---------------------------------------------------------------------------


class TransitionRequest(BaseModel):
    """
    Common body for every status change.
    `user_id` / `client_email` default to the values stored on the booking.
    """

    user_id: int | None = None
    client_email: str | None = Field(default=None, max_length=255)


class FinishRequest(TransitionRequest):
    expenses: Decimal | None = Field(default=None, ge=0)


class CancelRequest(TransitionRequest):
    # Optional here so a missing reason reaches the lifecycle and yields a 400
    cancel_reason: str | None = Field(default=None, max_length=1000)


class PriceNoticeRequest(TransitionRequest):
    price: Decimal = Field(ge=0)


class InvoiceRequest(BaseModel):
    client_email: str | None = Field(default=None, max_length=255)


class TransitionResponse(BaseModel):
    message: str
    booking_id: int
    booking: BookingRecord
    effects: dict[str, bool]


class InvoiceResponse(BaseModel):
    message: str
    booking_id: int


# ---------------------------------------------------------------------------
# Admin authentication
# ---------------------------------------------------------------------------


class OtpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)


class OtpVerify(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    otp: str = Field(min_length=6, max_length=6)


class TokenValidate(BaseModel):
    token: str = Field(min_length=1)


class AdminProfile(BaseModel):
    admin_id: int
    admin_name: str
    admin_role: str
    email: str


class LoginResponse(BaseModel):
    message: str
    token: str
    user: AdminProfile


class TokenValidation(BaseModel):
    valid: bool
    user: AdminProfile | None = None


class MessageResponse(BaseModel):
    message: str
