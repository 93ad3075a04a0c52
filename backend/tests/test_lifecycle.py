"""Tests for the change-request lifecycle: routing, guards and refunds."""
from datetime import date, datetime, timezone

import pytest
from fastapi import HTTPException

from venue_booking.models.booking import Booking, BookingStatus, ChangePaymentStatus, ChangeRequestStatus
from venue_booking.services import lifecycle


def _booking(**overrides) -> Booking:
    fields = dict(
        booking_id="b-1",
        status=BookingStatus.confirmed,
        change_request_status=ChangeRequestStatus.none,
        change_request_payment_status=None,
        additional_cost=None,
        currency="EUR",
    )
    fields.update(overrides)
    return Booking(**fields)


class TestRouting:

    def test_free_change_goes_straight_to_owner(self):
        assert lifecycle.route_change_request(0) == (
            ChangeRequestStatus.pending, ChangePaymentStatus.not_required,
        )

    def test_paid_change_waits_for_payment(self):
        assert lifecycle.route_change_request(205) == (
            ChangeRequestStatus.payment_pending, ChangePaymentStatus.pending,
        )


class TestChangeGuard:

    def test_confirmed_booking_without_request_passes(self):
        lifecycle.check_change_allowed(_booking())

    @pytest.mark.parametrize("booking_status", [
        BookingStatus.pending,
        BookingStatus.cancellation_requested,
        BookingStatus.cancelled,
        BookingStatus.completed,
    ])
    def test_only_confirmed_bookings_can_change(self, booking_status):
        with pytest.raises(HTTPException) as exc:
            lifecycle.check_change_allowed(_booking(status=booking_status))
        assert exc.value.status_code == 409
        assert exc.value.detail["redirect"] == {"page": "my_bookings"}

    def test_outstanding_request_blocks_new_one(self):
        with pytest.raises(HTTPException) as exc:
            lifecycle.check_change_allowed(_booking(change_request_status=ChangeRequestStatus.pending))
        assert exc.value.status_code == 409
        assert "already pending" in exc.value.detail["message"]

    def test_unpaid_request_redirects_to_payment(self):
        booking = _booking(
            change_request_status=ChangeRequestStatus.payment_pending,
            change_request_payment_status=ChangePaymentStatus.pending,
            additional_cost=205.0,
        )
        with pytest.raises(HTTPException) as exc:
            lifecycle.check_change_allowed(booking)
        assert exc.value.detail["redirect"] == {
            "page": "payment", "booking_id": "b-1", "amount": 20500, "currency": "EUR",
        }


class TestResolution:

    def test_payment_pending_cannot_be_resolved(self):
        booking = _booking(change_request_status=ChangeRequestStatus.payment_pending)
        with pytest.raises(HTTPException) as exc:
            lifecycle.check_change_resolvable(booking)
        assert exc.value.status_code == 400

    def test_nothing_to_resolve(self):
        with pytest.raises(HTTPException):
            lifecycle.check_change_resolvable(_booking())

    def test_clear_change_request(self):
        booking = _booking(
            change_request_status=ChangeRequestStatus.pending,
            change_request_payment_status=ChangePaymentStatus.paid,
            requested_event_date=date(2024, 1, 2),
            requested_start_time="10:00",
            requested_end_time="16:00",
            change_request_reason="reason",
            additional_cost=205.0,
        )
        lifecycle.clear_change_request(booking)
        assert booking.change_request_status == ChangeRequestStatus.none
        assert booking.change_request_payment_status is None
        assert booking.requested_event_date is None
        assert booking.additional_cost is None

    @pytest.mark.parametrize("booking_status", [
        BookingStatus.cancellation_requested,
        BookingStatus.cancelled,
        BookingStatus.completed,
    ])
    def test_request_on_unconfirmed_booking_cannot_be_resolved(self, booking_status):
        booking = _booking(
            status=booking_status,
            change_request_status=ChangeRequestStatus.pending,
            change_request_payment_status=ChangePaymentStatus.paid,
            additional_cost=205.0,
        )
        with pytest.raises(HTTPException) as exc:
            lifecycle.check_change_resolvable(booking)
        assert exc.value.status_code == 400
        assert booking_status.value in exc.value.detail

    def test_payment_refused_once_booking_left_confirmed(self):
        booking = _booking(
            status=BookingStatus.cancellation_requested,
            change_request_status=ChangeRequestStatus.payment_pending,
            change_request_payment_status=ChangePaymentStatus.pending,
            additional_cost=205.0,
        )
        with pytest.raises(HTTPException) as exc:
            lifecycle.check_change_payable(booking)
        assert exc.value.status_code == 400

    def test_payment_accepted_on_confirmed_booking(self):
        lifecycle.check_change_payable(_booking(
            change_request_status=ChangeRequestStatus.payment_pending,
            change_request_payment_status=ChangePaymentStatus.pending,
            additional_cost=205.0,
        ))


class TestCancellationGuard:

    def test_confirmed_booking_passes(self):
        lifecycle.check_cancellation_allowed(_booking())

    @pytest.mark.parametrize("change_status", [ChangeRequestStatus.pending, ChangeRequestStatus.payment_pending])
    def test_outstanding_change_blocks_cancellation(self, change_status):
        with pytest.raises(HTTPException) as exc:
            lifecycle.check_cancellation_allowed(_booking(change_request_status=change_status))
        assert exc.value.status_code == 409
        assert "Resolve the pending change request" in exc.value.detail


class TestOwnerTransitions:

    @pytest.mark.parametrize("current, target", [
        (BookingStatus.pending, BookingStatus.confirmed),
        (BookingStatus.pending, BookingStatus.cancelled),
        (BookingStatus.confirmed, BookingStatus.completed),
        (BookingStatus.cancellation_requested, BookingStatus.cancelled),
    ])
    def test_allowed(self, current, target):
        lifecycle.check_owner_transition(_booking(status=current), target)

    @pytest.mark.parametrize("current, target", [
        (BookingStatus.pending, BookingStatus.completed),
        (BookingStatus.confirmed, BookingStatus.pending),
        (BookingStatus.confirmed, BookingStatus.cancellation_requested),
        (BookingStatus.cancelled, BookingStatus.confirmed),
        (BookingStatus.completed, BookingStatus.confirmed),
    ])
    def test_refused(self, current, target):
        with pytest.raises(HTTPException) as exc:
            lifecycle.check_owner_transition(_booking(status=current), target)
        assert exc.value.status_code == 400
        assert "Transition not allowed" in exc.value.detail

    def test_cannot_complete_with_outstanding_change(self):
        booking = _booking(change_request_status=ChangeRequestStatus.pending)
        with pytest.raises(HTTPException) as exc:
            lifecycle.check_owner_transition(booking, BookingStatus.completed)
        assert exc.value.status_code == 400


class TestRefundEstimate:

    def test_more_than_a_week_out(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert lifecycle.refund_estimate(1000, date(2024, 2, 1), "14:00", "UTC", now) == pytest.approx(900)

    def test_within_a_week(self):
        now = datetime(2024, 1, 30, tzinfo=timezone.utc)
        assert lifecycle.refund_estimate(1000, date(2024, 2, 1), "14:00", "UTC", now) == pytest.approx(500)

    def test_event_start_read_in_venue_timezone(self):
        # 20:00 in New York on Jan 8 is 01:00 UTC on Jan 9: just over seven days away
        now = datetime(2024, 1, 1, 22, 0, tzinfo=timezone.utc)
        refund = lifecycle.refund_estimate(1000, date(2024, 1, 8), "20:00", "America/New_York", now)
        assert refund == pytest.approx(900)

    def test_naive_now_is_utc(self):
        refund = lifecycle.refund_estimate(1000, date(2024, 2, 1), "14:00", "UTC", datetime(2024, 1, 1))
        assert refund == pytest.approx(900)
