"""Duration and price-delta calculations for bookings and booking changes.

Everything here is a pure function of its arguments: no database access, no
wall-clock reads. Amounts are plain floats and are never rounded here;
rounding to the currency's minor unit happens once, at submission time, via
``to_minor_units``.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

PLATFORM_FEE_RATE = 0.025

DateLike = Union[date, str]


def parse_wall_time(value: str) -> time:
    """Parse an "HH:MM" (or "HH:MM:SS") 24-hour time-of-day string."""
    if not isinstance(value, str):
        raise ValueError(f"Time must be an HH:MM string, got {value!r}")
    try:
        parts = [int(p) for p in value.strip().split(":")]
    except ValueError:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM") from None
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    # time() rejects out-of-range components with its own ValueError
    return time(*parts)


def minutes_of_day(value: str) -> int:
    t = parse_wall_time(value)
    return t.hour * 60 + t.minute


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def duration_hours(event_date: DateLike, start_time: str, end_time: str) -> float:
    """Hours between ``start_time`` and ``end_time`` on ``event_date``.

    An end at or before the start is read as crossing midnight, so
    22:00-02:00 is 4 hours and an equal start and end is a full 24 hours.
    """
    day = _as_date(event_date)
    start = datetime.combine(day, parse_wall_time(start_time))
    end = datetime.combine(day, parse_wall_time(end_time))
    if end <= start:
        end += timedelta(days=1)

    total_minutes = int((end - start).total_seconds() // 60)
    return total_minutes / 60 if total_minutes > 0 else 0.0


@dataclass(frozen=True)
class PriceDelta:
    hours_difference: float
    additional_price: float
    platform_fee: float
    additional_cost: float

    @property
    def payment_required(self) -> bool:
        return self.additional_cost > 0


def price_delta(original_hours: float, new_hours: float, price_per_hour: float) -> PriceDelta:
    """Extra charge for moving a booking from ``original_hours`` to ``new_hours``.

    Only extensions are charged: the additional hours at the venue rate plus
    the platform fee. A shorter or equal booking costs nothing extra and no
    refund is computed.
    """
    if price_per_hour <= 0:
        raise ValueError("price_per_hour must be positive")

    hours_difference = new_hours - original_hours
    if hours_difference <= 0:
        return PriceDelta(hours_difference, 0.0, 0.0, 0.0)

    additional_price = hours_difference * price_per_hour
    platform_fee = additional_price * PLATFORM_FEE_RATE
    return PriceDelta(
        hours_difference=hours_difference,
        additional_price=additional_price,
        platform_fee=platform_fee,
        additional_cost=additional_price + platform_fee,
    )


def booking_price(hours: float, price_per_hour: float) -> float:
    """Total charge for a new booking: hourly base plus the platform fee."""
    base = hours * price_per_hour
    return base + base * PLATFORM_FEE_RATE


def to_minor_units(amount: float) -> int:
    """Convert an amount to integer cents, rounding half up."""
    return int(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) * 100)


def from_minor_units(amount: int) -> float:
    return amount / 100


def format_wall_time(value: str) -> str:
    """Normalise a time-of-day string to "HH:MM"."""
    return parse_wall_time(value).strftime("%H:%M")
