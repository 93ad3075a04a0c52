"""Booking API routes — delegates to booking_service for invariant enforcement."""
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from venue_booking.database import get_db
from venue_booking.models.booking import Booking, BookingStatus
from venue_booking.schemas.booking import BookingCreate, BookingOut, BookingCancelRequest, BookingStatusChange
from venue_booking.services import booking_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(payload: BookingCreate, db: Session = Depends(get_db)):
    """Create a booking priced from the venue's hourly rate."""
    return booking_service.create_booking(
        db=db,
        venue_id=payload.venue_id,
        user_id=payload.user_id,
        event_date=payload.event_date,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )


@router.get("/", response_model=list[BookingOut])
def list_bookings(
    user_id: Optional[str] = Query(None),
    venue_id: Optional[str] = Query(None),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    """List bookings with optional filters."""
    query = db.query(Booking)
    if user_id:
        query = query.filter(Booking.user_id == user_id)
    if venue_id:
        query = query.filter(Booking.venue_id == venue_id)
    if status_filter:
        query = query.filter(Booking.status == status_filter)
    return query.order_by(Booking.event_date, Booking.start_time).all()


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, db: Session = Depends(get_db)):
    return booking_service.get_booking(db, booking_id)


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def request_cancellation(booking_id: str, payload: BookingCancelRequest, db: Session = Depends(get_db)):
    """Ask the venue owner to cancel a confirmed booking; records the refund estimate."""
    return booking_service.request_cancellation(
        db=db,
        booking_id=booking_id,
        actor_user_id=payload.user_id,
        reason=payload.reason,
        now=datetime.now(timezone.utc),
    )


@router.post("/{booking_id}/status", response_model=BookingOut)
def change_booking_status(booking_id: str, payload: BookingStatusChange, db: Session = Depends(get_db)):
    """Venue-owner status change, e.g. confirming a pending booking."""
    return booking_service.change_booking_status(db, booking_id, payload.owner_id, payload.status)
