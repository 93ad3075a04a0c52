"""Pydantic schemas for Venues."""
from datetime import datetime
import pytz
from pydantic import BaseModel, Field, field_validator


class VenueCreate(BaseModel):
    owner_id: str
    title: str
    price_per_hour: float = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    timezone: str = "UTC"

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v


class VenueOut(BaseModel):
    venue_id: str
    owner_id: str
    title: str
    price_per_hour: float
    currency: str
    timezone: str
    created_at: datetime

    model_config = {"from_attributes": True}
