"""Booking ORM model, including the change-request and cancellation sub-fields."""
import uuid
import enum
from sqlalchemy import Column, String, Date, DateTime, Integer, Numeric, Text, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from venue_booking.database import Base


class BookingStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancellation_requested = "cancellation_requested"
    cancelled = "cancelled"
    completed = "completed"


class ChangeRequestStatus(str, enum.Enum):
    none = "none"
    pending = "pending"
    payment_pending = "payment_pending"


class ChangePaymentStatus(str, enum.Enum):
    not_required = "not_required"
    pending = "pending"
    paid = "paid"


class Booking(Base):
    __tablename__ = "bookings"

    booking_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id = Column(String(36), ForeignKey("venues.venue_id"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    event_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)
    status = Column(SAEnum(BookingStatus), nullable=False, default=BookingStatus.pending)
    total_amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")

    # Change request; only populated while a request is outstanding
    change_request_status = Column(
        SAEnum(ChangeRequestStatus), nullable=False, default=ChangeRequestStatus.none
    )
    change_request_payment_status = Column(SAEnum(ChangePaymentStatus), nullable=True)
    requested_event_date = Column(Date, nullable=True)
    requested_start_time = Column(String(5), nullable=True)
    requested_end_time = Column(String(5), nullable=True)
    change_request_reason = Column(Text, nullable=True)
    additional_cost = Column(Numeric(12, 2, asdecimal=False), nullable=True)

    cancellation_reason = Column(Text, nullable=True)
    cancellation_requested_at = Column(DateTime(timezone=True), nullable=True)
    refund_amount = Column(Numeric(12, 2, asdecimal=False), nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    venue = relationship("Venue")
