"""Booking status lifecycle — change-request sub-machine and its guards.

States of ``change_request_status``::

    none ──(no extra cost)──────────────► pending ──(approve / reject)──► none
      └──(extra cost)──► payment_pending ──(payment confirmed)──┘

The choice between ``pending`` and ``payment_pending`` depends only on the
additional cost computed for the change.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any

import pytz
from fastapi import HTTPException, status

from venue_booking.models.booking import (
    Booking,
    BookingStatus,
    ChangePaymentStatus,
    ChangeRequestStatus,
)
from venue_booking.services.pricing import parse_wall_time, to_minor_units

logger = logging.getLogger(__name__)

OUTSTANDING_CHANGE_STATES = frozenset({ChangeRequestStatus.pending, ChangeRequestStatus.payment_pending})

FULL_REFUND_WINDOW_DAYS = 7
EARLY_REFUND_RATE = 0.9
LATE_REFUND_RATE = 0.5


def route_change_request(additional_cost: float) -> tuple[ChangeRequestStatus, ChangePaymentStatus]:
    """Pick the change-request state written on submission."""
    if additional_cost > 0:
        return ChangeRequestStatus.payment_pending, ChangePaymentStatus.pending
    return ChangeRequestStatus.pending, ChangePaymentStatus.not_required


def payment_handoff(booking: Booking) -> dict[str, Any]:
    """Payload the payment flow needs to collect an outstanding change charge."""
    return {
        "page": "payment",
        "booking_id": booking.booking_id,
        "amount": to_minor_units(booking.additional_cost or 0),
        "currency": booking.currency,
    }


def _awaits_payment(booking: Booking) -> bool:
    return (
        booking.change_request_status == ChangeRequestStatus.payment_pending
        and booking.change_request_payment_status == ChangePaymentStatus.pending
        and (booking.additional_cost or 0) > 0
    )


def check_change_allowed(booking: Booking) -> None:
    """Refuse to open a change request unless the booking is confirmed and has none outstanding."""
    if booking.status != BookingStatus.confirmed:
        _precondition_failed(booking, "Only confirmed bookings can be changed.")
    if booking.change_request_status in OUTSTANDING_CHANGE_STATES:
        _precondition_failed(booking, "A change request for this booking is already pending.")


def _precondition_failed(booking: Booking, message: str) -> None:
    redirect = payment_handoff(booking) if _awaits_payment(booking) else {"page": "my_bookings"}
    logger.info("Change request refused for booking %s: %s", booking.booking_id, message)
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"message": message, "redirect": redirect},
    )


def _require_confirmed(booking: Booking) -> None:
    if booking.status != BookingStatus.confirmed:
        raise HTTPException(
            status_code=400,
            detail=f"Change requests can only be resolved on confirmed bookings (booking is {booking.status.value})",
        )


def check_change_resolvable(booking: Booking) -> None:
    """Owner approval/rejection is only possible once no payment is outstanding."""
    _require_confirmed(booking)
    if booking.change_request_status == ChangeRequestStatus.payment_pending:
        raise HTTPException(status_code=400, detail="Change request is still awaiting payment")
    if booking.change_request_status != ChangeRequestStatus.pending:
        raise HTTPException(status_code=400, detail="Booking has no pending change request")


def check_change_payable(booking: Booking) -> None:
    _require_confirmed(booking)
    if not _awaits_payment(booking):
        raise HTTPException(status_code=400, detail="Booking has no change request awaiting payment")


def clear_change_request(booking: Booking) -> None:
    """Close the change-request cycle, returning the sub-fields to absent."""
    booking.change_request_status = ChangeRequestStatus.none
    booking.change_request_payment_status = None
    booking.requested_event_date = None
    booking.requested_start_time = None
    booking.requested_end_time = None
    booking.change_request_reason = None
    booking.additional_cost = None


def check_cancellation_allowed(booking: Booking) -> None:
    if booking.status == BookingStatus.cancellation_requested:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A cancellation request for this booking is already pending.",
        )
    if booking.status != BookingStatus.confirmed:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Only confirmed bookings can be cancelled.",
        )
    if booking.change_request_status in OUTSTANDING_CHANGE_STATES:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Resolve the pending change request before cancelling this booking.",
        )


# Owner-driven booking status moves; guest-driven ones go through their own flows
OWNER_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.cancelled},
    BookingStatus.confirmed: {BookingStatus.completed},
    BookingStatus.cancellation_requested: {BookingStatus.cancelled},
    BookingStatus.cancelled: set(),
    BookingStatus.completed: set(),
}


def check_owner_transition(booking: Booking, new_status: BookingStatus) -> None:
    if new_status not in OWNER_TRANSITIONS.get(booking.status, set()):
        raise HTTPException(
            status_code=400,
            detail=f"Transition not allowed: {booking.status.value} → {new_status.value}",
        )
    if new_status == BookingStatus.completed and booking.change_request_status in OUTSTANDING_CHANGE_STATES:
        raise HTTPException(
            status_code=400,
            detail="Resolve the pending change request before completing this booking.",
        )


def refund_estimate(
    total_amount: float,
    event_date: date,
    start_time: str,
    venue_timezone: str,
    now: datetime,
) -> float:
    """Refund offered for a cancellation requested at ``now``.

    90% when the event starts more than seven days later, 50% otherwise.
    The event start is read as wall-clock time in the venue's timezone.
    """
    tz = pytz.timezone(venue_timezone)
    event_start = tz.localize(datetime.combine(event_date, parse_wall_time(start_time)))
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    days_until_event = (event_start - now).total_seconds() / 86400
    rate = EARLY_REFUND_RATE if days_until_event > FULL_REFUND_WINDOW_DAYS else LATE_REFUND_RATE
    return total_amount * rate
