"""Field-level validation of a booking change request."""
import logging
from datetime import date
from typing import Optional

from venue_booking.services.pricing import minutes_of_day

logger = logging.getLogger(__name__)

TIME_RANGE_MESSAGE = (
    "End time must be after start time for same-day bookings. "
    "If extending overnight, ensure selected times reflect this."
)


def validate_change_request(
    requested_date: Optional[date],
    requested_start_time: Optional[str],
    requested_end_time: Optional[str],
    reason: Optional[str],
    hours_difference: float,
) -> dict[str, str]:
    """Return a mapping of field name → message; empty means the request is valid.

    An end time earlier in the day than the start time is only accepted when
    the change extends the booking (an intentional overnight booking).
    """
    errors: dict[str, str] = {}

    if not requested_date:
        errors["date"] = "Please select a new date"
    if not requested_start_time:
        errors["start_time"] = "Please select a start time"
    if not requested_end_time:
        errors["end_time"] = "Please select an end time"

    if requested_start_time and requested_end_time:
        start_minutes = end_minutes = None
        try:
            start_minutes = minutes_of_day(requested_start_time)
        except ValueError:
            errors["start_time"] = "Start time must be in HH:MM format"
        try:
            end_minutes = minutes_of_day(requested_end_time)
        except ValueError:
            errors["end_time"] = "End time must be in HH:MM format"

        if start_minutes is not None and end_minutes is not None:
            if end_minutes < start_minutes and hours_difference <= 0:
                errors["time_range"] = TIME_RANGE_MESSAGE

    if not (reason or "").strip():
        errors["reason"] = "Please provide a reason for the change"

    if errors:
        logger.info("Change request rejected by validation: %s", sorted(errors))
    return errors
