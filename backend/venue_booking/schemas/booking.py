"""Pydantic schemas for Bookings."""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from venue_booking.models.booking import BookingStatus, ChangePaymentStatus, ChangeRequestStatus

HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


class BookingCreate(BaseModel):
    venue_id: str
    user_id: str
    event_date: date
    start_time: str = Field(..., pattern=HHMM)
    end_time: str = Field(..., pattern=HHMM)


class BookingOut(BaseModel):
    booking_id: str
    venue_id: str
    user_id: str
    event_date: date
    start_time: str
    end_time: str
    status: BookingStatus
    total_amount: float
    currency: str
    change_request_status: ChangeRequestStatus
    change_request_payment_status: Optional[ChangePaymentStatus] = None
    requested_event_date: Optional[date] = None
    requested_start_time: Optional[str] = None
    requested_end_time: Optional[str] = None
    change_request_reason: Optional[str] = None
    additional_cost: Optional[float] = None
    cancellation_reason: Optional[str] = None
    cancellation_requested_at: Optional[datetime] = None
    refund_amount: Optional[float] = None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingCancelRequest(BaseModel):
    user_id: str
    reason: str = Field(..., min_length=1)


class BookingStatusChange(BaseModel):
    owner_id: str
    status: BookingStatus
