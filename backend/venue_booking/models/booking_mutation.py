"""BookingMutation ORM model — append-only ledger of booking writes."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from venue_booking.database import Base


class ActionType(str, enum.Enum):
    create = "create"
    change_requested = "change_requested"
    change_approved = "change_approved"
    change_rejected = "change_rejected"
    change_paid = "change_paid"
    cancellation_requested = "cancellation_requested"
    status_changed = "status_changed"


class BookingMutation(Base):
    __tablename__ = "booking_mutations"

    mutation_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    booking_id = Column(String(36), ForeignKey("bookings.booking_id"), nullable=False)
    actor_user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    action_type = Column(SAEnum(ActionType), nullable=False)
    before_snapshot = Column(JSON, nullable=True)
    after_snapshot = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
