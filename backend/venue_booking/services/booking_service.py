"""Core booking service — change requests and the flows around them.

Responsibilities:
- Ownership checks: only the guest may change/cancel, only the venue owner
  may approve/reject
- Change-request guard and routing (see ``lifecycle``)
- Pricing of the existing and requested booking (see ``pricing``)
- Single-outstanding-request enforcement via conditional update
- Mutation ledger (BookingMutations) for every write
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from venue_booking.models.booking import Booking, BookingStatus, ChangePaymentStatus, ChangeRequestStatus
from venue_booking.models.booking_mutation import ActionType, BookingMutation
from venue_booking.models.user import User
from venue_booking.models.venue import Venue
from venue_booking.services import lifecycle, pricing
from venue_booking.services.validation import validate_change_request

logger = logging.getLogger(__name__)


def _booking_snapshot(booking: Booking) -> dict[str, Any]:
    """Serialize a booking to a JSON-safe dict for the mutation ledger."""

    def _iso(value: Optional[date]) -> Optional[str]:
        return value.isoformat() if value else None

    return {
        "booking_id": booking.booking_id,
        "event_date": _iso(booking.event_date),
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "status": booking.status.value if booking.status else None,
        "total_amount": booking.total_amount,
        "change_request_status": booking.change_request_status.value if booking.change_request_status else None,
        "change_request_payment_status": (
            booking.change_request_payment_status.value if booking.change_request_payment_status else None
        ),
        "requested_event_date": _iso(booking.requested_event_date),
        "requested_start_time": booking.requested_start_time,
        "requested_end_time": booking.requested_end_time,
        "additional_cost": booking.additional_cost,
        "version": booking.version,
    }


def _record_mutation(
    db: Session,
    booking: Booking,
    actor_user_id: str,
    action_type: ActionType,
    before: Optional[dict[str, Any]],
) -> None:
    db.add(BookingMutation(
        booking_id=booking.booking_id,
        actor_user_id=actor_user_id,
        action_type=action_type,
        before_snapshot=before,
        after_snapshot=_booking_snapshot(booking),
    ))


def get_booking(db: Session, booking_id: str) -> Booking:
    booking = db.query(Booking).filter(Booking.booking_id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


def get_venue(db: Session, venue_id: str) -> Venue:
    venue = db.query(Venue).filter(Venue.venue_id == venue_id).first()
    if not venue:
        raise HTTPException(status_code=404, detail="Venue not found")
    return venue


def _check_guest(booking: Booking, actor_user_id: str, action: str) -> None:
    if booking.user_id != actor_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You can only {action} your own bookings.",
        )


def _check_venue_owner(venue: Venue, actor_user_id: str) -> None:
    if venue.owner_id != actor_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the venue owner may manage this booking.",
        )


def _original_hours(booking: Booking) -> float:
    return pricing.duration_hours(booking.event_date, booking.start_time, booking.end_time)


def create_booking(
    db: Session,
    venue_id: str,
    user_id: str,
    event_date: date,
    start_time: str,
    end_time: str,
) -> Booking:
    """Create a pending booking priced from the venue's hourly rate plus the platform fee.

    Only the venue owner can confirm it, see ``change_booking_status``.
    """
    venue = get_venue(db, venue_id)
    if not db.query(User).filter(User.user_id == user_id).first():
        raise HTTPException(status_code=404, detail="User not found")

    hours = pricing.duration_hours(event_date, start_time, end_time)
    total = pricing.booking_price(hours, venue.price_per_hour)

    booking = Booking(
        venue_id=venue.venue_id,
        user_id=user_id,
        event_date=event_date,
        start_time=start_time,
        end_time=end_time,
        status=BookingStatus.pending,
        total_amount=pricing.from_minor_units(pricing.to_minor_units(total)),
        currency=venue.currency,
        change_request_status=ChangeRequestStatus.none,
        version=1,
    )
    db.add(booking)
    db.flush()

    _record_mutation(db, booking, user_id, ActionType.create, before=None)
    db.commit()
    db.refresh(booking)
    logger.info("Created booking %s at venue %s for user %s (%.2f h)", booking.booking_id, venue_id, user_id, hours)
    return booking


def load_change_form(db: Session, booking_id: str, actor_user_id: str) -> dict[str, Any]:
    """Everything the change form needs, after the guard has passed.

    The guard runs before any pricing so a refused booking is never priced.
    """
    booking = get_booking(db, booking_id)
    _check_guest(booking, actor_user_id, "change")
    lifecycle.check_change_allowed(booking)

    venue = get_venue(db, booking.venue_id)
    return {
        "booking": booking,
        "venue_title": venue.title,
        "price_per_hour": venue.price_per_hour,
        "currency": venue.currency,
        "original_hours": _original_hours(booking),
    }


def quote_change(
    db: Session,
    booking_id: str,
    actor_user_id: str,
    requested_event_date: Optional[date],
    requested_start_time: Optional[str],
    requested_end_time: Optional[str],
    reason: Optional[str],
) -> dict[str, Any]:
    """Price a candidate change without writing anything."""
    booking = get_booking(db, booking_id)
    _check_guest(booking, actor_user_id, "change")
    lifecycle.check_change_allowed(booking)
    venue = get_venue(db, booking.venue_id)
    return _price_candidate(
        booking, venue, requested_event_date, requested_start_time, requested_end_time, reason
    )


def _price_candidate(
    booking: Booking,
    venue: Venue,
    requested_event_date: Optional[date],
    requested_start_time: Optional[str],
    requested_end_time: Optional[str],
    reason: Optional[str],
) -> dict[str, Any]:
    original_hours = _original_hours(booking)
    quote: dict[str, Any] = {"original_hours": original_hours}

    delta = None
    if requested_event_date and requested_start_time and requested_end_time:
        try:
            new_hours = pricing.duration_hours(requested_event_date, requested_start_time, requested_end_time)
        except ValueError:
            # Malformed times are reported by the validator below
            new_hours = None
        if new_hours is not None:
            delta = pricing.price_delta(original_hours, new_hours, venue.price_per_hour)
            quote.update(
                new_hours=new_hours,
                hours_difference=delta.hours_difference,
                additional_price=delta.additional_price,
                platform_fee=delta.platform_fee,
                additional_cost=delta.additional_cost,
                payment_required=delta.payment_required,
            )

    quote["errors"] = validate_change_request(
        requested_event_date,
        requested_start_time,
        requested_end_time,
        reason,
        delta.hours_difference if delta else 0.0,
    )
    return quote


def submit_change_request(
    db: Session,
    booking_id: str,
    actor_user_id: str,
    requested_event_date: Optional[date],
    requested_start_time: Optional[str],
    requested_end_time: Optional[str],
    reason: Optional[str],
) -> tuple[Booking, Optional[dict[str, Any]]]:
    """Validate, price and record a change request.

    Returns the updated booking and, when the change costs extra, the payment
    hand-off (booking id and amount in minor units).
    """
    booking = get_booking(db, booking_id)
    _check_guest(booking, actor_user_id, "change")
    lifecycle.check_change_allowed(booking)
    venue = get_venue(db, booking.venue_id)

    quote = _price_candidate(
        booking, venue, requested_event_date, requested_start_time, requested_end_time, reason
    )
    if quote["errors"]:
        raise HTTPException(
            status_code=422,
            detail={"message": "Change request is invalid", "errors": quote["errors"]},
        )

    requested_start_time = pricing.format_wall_time(requested_start_time)
    requested_end_time = pricing.format_wall_time(requested_end_time)

    # Rounded once here; the stored cost and the charged amount are the same cents
    amount_minor = pricing.to_minor_units(quote["additional_cost"])
    additional_cost = pricing.from_minor_units(amount_minor)
    change_status, payment_status = lifecycle.route_change_request(additional_cost)

    before = _booking_snapshot(booking)
    # Conditional update: a concurrent submission that got in first leaves no row to match
    updated = (
        db.query(Booking)
        .filter(
            Booking.booking_id == booking.booking_id,
            Booking.status == BookingStatus.confirmed,
            Booking.change_request_status == ChangeRequestStatus.none,
        )
        .update(
            {
                Booking.change_request_status: change_status,
                Booking.change_request_payment_status: payment_status,
                Booking.requested_event_date: requested_event_date,
                Booking.requested_start_time: requested_start_time,
                Booking.requested_end_time: requested_end_time,
                Booking.change_request_reason: reason,
                Booking.additional_cost: additional_cost,
                Booking.version: Booking.version + 1,
                Booking.updated_at: datetime.now(timezone.utc),
            },
            synchronize_session=False,
        )
    )
    if updated == 0:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "A change request for this booking is already pending.",
                "redirect": {"page": "my_bookings"},
            },
        )

    db.refresh(booking)
    _record_mutation(db, booking, actor_user_id, ActionType.change_requested, before)
    db.commit()
    db.refresh(booking)

    handoff = lifecycle.payment_handoff(booking) if additional_cost > 0 else None
    logger.info(
        "Change request on booking %s by %s: %s (additional cost %.2f %s)",
        booking.booking_id, actor_user_id, change_status.value, additional_cost, booking.currency,
    )
    return booking, handoff


def approve_change_request(db: Session, booking_id: str, owner_id: str) -> Booking:
    """Apply the requested date/time to the booking and close the request."""
    booking = get_booking(db, booking_id)
    _check_venue_owner(get_venue(db, booking.venue_id), owner_id)
    lifecycle.check_change_resolvable(booking)

    before = _booking_snapshot(booking)
    booking.event_date = booking.requested_event_date
    booking.start_time = booking.requested_start_time
    booking.end_time = booking.requested_end_time
    if booking.change_request_payment_status == ChangePaymentStatus.paid:
        booking.total_amount = (booking.total_amount or 0) + (booking.additional_cost or 0)
    lifecycle.clear_change_request(booking)
    booking.version += 1
    booking.updated_at = datetime.now(timezone.utc)

    _record_mutation(db, booking, owner_id, ActionType.change_approved, before)
    db.commit()
    db.refresh(booking)
    logger.info("Change request on booking %s approved by %s", booking_id, owner_id)
    return booking


def reject_change_request(db: Session, booking_id: str, owner_id: str) -> Booking:
    """Close the request and leave the booking slot as it was.

    A change the guest already paid for is recorded in ``refund_amount``.
    """
    booking = get_booking(db, booking_id)
    _check_venue_owner(get_venue(db, booking.venue_id), owner_id)
    lifecycle.check_change_resolvable(booking)

    before = _booking_snapshot(booking)
    if booking.change_request_payment_status == ChangePaymentStatus.paid:
        # The guest paid for a change that will not happen; keep what they are owed
        owed = booking.additional_cost or 0
        booking.refund_amount = (booking.refund_amount or 0) + owed
        logger.warning(
            "Paid change on booking %s rejected; %.2f %s owed to guest %s",
            booking_id, owed, booking.currency, booking.user_id,
        )
    lifecycle.clear_change_request(booking)
    booking.version += 1
    booking.updated_at = datetime.now(timezone.utc)

    _record_mutation(db, booking, owner_id, ActionType.change_rejected, before)
    db.commit()
    db.refresh(booking)
    logger.info("Change request on booking %s rejected by %s", booking_id, owner_id)
    return booking


def record_change_payment(db: Session, booking_id: str, actor_user_id: str, outcome: str) -> Booking:
    """Apply the payment flow's outcome for an outstanding change charge.

    A successful payment hands the request to the owner for approval; a
    cancelled one leaves it awaiting payment so the guest can retry.
    """
    booking = get_booking(db, booking_id)
    _check_guest(booking, actor_user_id, "pay for")
    lifecycle.check_change_payable(booking)

    if outcome != "success":
        logger.warning("Change payment for booking %s cancelled by %s", booking_id, actor_user_id)
        return booking

    before = _booking_snapshot(booking)
    booking.change_request_status = ChangeRequestStatus.pending
    booking.change_request_payment_status = ChangePaymentStatus.paid
    booking.version += 1
    booking.updated_at = datetime.now(timezone.utc)

    _record_mutation(db, booking, actor_user_id, ActionType.change_paid, before)
    db.commit()
    db.refresh(booking)
    logger.info("Change payment for booking %s received (%.2f %s)", booking_id, booking.additional_cost, booking.currency)
    return booking


def request_cancellation(
    db: Session,
    booking_id: str,
    actor_user_id: str,
    reason: str,
    now: datetime,
) -> Booking:
    """Move a confirmed booking to ``cancellation_requested`` with a refund estimate."""
    booking = get_booking(db, booking_id)
    _check_guest(booking, actor_user_id, "cancel")
    lifecycle.check_cancellation_allowed(booking)
    if not reason.strip():
        raise HTTPException(
            status_code=422,
            detail={"message": "Cancellation request is invalid",
                    "errors": {"reason": "Please provide a reason for cancellation."}},
        )
    venue = get_venue(db, booking.venue_id)

    before = _booking_snapshot(booking)
    refund = lifecycle.refund_estimate(
        booking.total_amount, booking.event_date, booking.start_time, venue.timezone, now
    )
    booking.status = BookingStatus.cancellation_requested
    booking.cancellation_reason = reason
    booking.cancellation_requested_at = now
    # Amounts already owed from rejected paid changes are refunded in full
    owed = booking.refund_amount or 0
    booking.refund_amount = pricing.from_minor_units(pricing.to_minor_units(refund + owed))
    booking.version += 1
    booking.updated_at = now

    _record_mutation(db, booking, actor_user_id, ActionType.cancellation_requested, before)
    db.commit()
    db.refresh(booking)
    logger.info("Cancellation requested for booking %s (refund %.2f %s)", booking_id, booking.refund_amount, booking.currency)
    return booking


def change_booking_status(db: Session, booking_id: str, owner_id: str, new_status: BookingStatus) -> Booking:
    """Owner-side status move (confirm, decline, complete, finalise a cancellation)."""
    booking = get_booking(db, booking_id)
    _check_venue_owner(get_venue(db, booking.venue_id), owner_id)
    lifecycle.check_owner_transition(booking, new_status)

    before = _booking_snapshot(booking)
    booking.status = new_status
    booking.version += 1
    booking.updated_at = datetime.now(timezone.utc)

    _record_mutation(db, booking, owner_id, ActionType.status_changed, before)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s moved %s → %s by owner %s", booking_id, before["status"], new_status.value, owner_id)
    return booking
