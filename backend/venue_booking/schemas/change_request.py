"""Pydantic schemas for booking change requests."""
from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel

from venue_booking.schemas.booking import BookingOut


class ChangeRequestCandidate(BaseModel):
    """Requested replacement date/time. Fields stay optional so missing
    values surface as field-level validation errors rather than schema errors."""

    requested_event_date: Optional[date] = None
    requested_start_time: Optional[str] = None
    requested_end_time: Optional[str] = None
    reason: Optional[str] = None


class ChangeRequestCreate(ChangeRequestCandidate):
    user_id: str


class ChangeFormOut(BaseModel):
    booking: BookingOut
    venue_title: str
    price_per_hour: float
    currency: str
    original_hours: float


class ChangeQuoteOut(BaseModel):
    original_hours: float
    new_hours: Optional[float] = None
    hours_difference: Optional[float] = None
    additional_price: float = 0.0
    platform_fee: float = 0.0
    additional_cost: float = 0.0
    payment_required: bool = False
    errors: dict[str, str] = {}


class PaymentHandoff(BaseModel):
    page: Literal["payment"] = "payment"
    booking_id: str
    amount: int  # minor currency units
    currency: str


class ChangeRequestResult(BaseModel):
    booking: BookingOut
    payment_required: bool
    payment: Optional[PaymentHandoff] = None


class OwnerDecision(BaseModel):
    owner_id: str


class ChangePaymentOutcome(BaseModel):
    user_id: str
    outcome: Literal["success", "cancelled"]
