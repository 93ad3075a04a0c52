"""Booking change-request routes.

Guest side: load the form, preview pricing, submit, report payment outcome.
Owner side: approve or reject a pending request.
"""
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from venue_booking.database import get_db
from venue_booking.schemas.booking import BookingOut
from venue_booking.schemas.change_request import (
    ChangeFormOut,
    ChangePaymentOutcome,
    ChangeQuoteOut,
    ChangeRequestCreate,
    ChangeRequestResult,
    OwnerDecision,
)
from venue_booking.services import booking_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{booking_id}/change-request", response_model=ChangeFormOut)
def load_change_form(
    booking_id: str,
    user_id: str = Query(..., description="ID of the guest changing the booking"),
    db: Session = Depends(get_db),
):
    """Current booking and rate card, or 409 with a redirect if a change is not allowed."""
    return booking_service.load_change_form(db, booking_id, user_id)


@router.post("/{booking_id}/change-request/quote", response_model=ChangeQuoteOut)
def quote_change(booking_id: str, payload: ChangeRequestCreate, db: Session = Depends(get_db)):
    """Preview the price of a candidate change for the booking's guest. Nothing is written."""
    return booking_service.quote_change(
        db=db,
        booking_id=booking_id,
        actor_user_id=payload.user_id,
        requested_event_date=payload.requested_event_date,
        requested_start_time=payload.requested_start_time,
        requested_end_time=payload.requested_end_time,
        reason=payload.reason,
    )


@router.post("/{booking_id}/change-request", response_model=ChangeRequestResult)
def submit_change_request(booking_id: str, payload: ChangeRequestCreate, db: Session = Depends(get_db)):
    """Submit a change request; returns a payment hand-off when the change costs extra."""
    booking, handoff = booking_service.submit_change_request(
        db=db,
        booking_id=booking_id,
        actor_user_id=payload.user_id,
        requested_event_date=payload.requested_event_date,
        requested_start_time=payload.requested_start_time,
        requested_end_time=payload.requested_end_time,
        reason=payload.reason,
    )
    return {"booking": booking, "payment_required": handoff is not None, "payment": handoff}


@router.post("/{booking_id}/change-request/approve", response_model=BookingOut)
def approve_change_request(booking_id: str, payload: OwnerDecision, db: Session = Depends(get_db)):
    return booking_service.approve_change_request(db, booking_id, payload.owner_id)


@router.post("/{booking_id}/change-request/reject", response_model=BookingOut)
def reject_change_request(booking_id: str, payload: OwnerDecision, db: Session = Depends(get_db)):
    return booking_service.reject_change_request(db, booking_id, payload.owner_id)


@router.post("/{booking_id}/change-request/payment", response_model=BookingOut)
def record_change_payment(booking_id: str, payload: ChangePaymentOutcome, db: Session = Depends(get_db)):
    """Payment flow callback for the additional cost of a change."""
    return booking_service.record_change_payment(db, booking_id, payload.user_id, payload.outcome)
