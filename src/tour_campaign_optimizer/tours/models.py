"""Tour catalogue models.

Rows mirror the booking backend's ``tours`` and ``bookings`` tables.
``TourConfig`` is the shape served to the site, keyed by hyphenated names.
"""

from typing import Any

from pydantic import Field, field_validator

from tour_campaign_optimizer.models.base import BaseTCOModel


class TimeSlotRow(BaseTCOModel):
    start_time: str
    is_active: bool = True


class TourRow(BaseTCOModel):
    """A row of the backend ``tours`` table."""

    id: int | str
    type: str
    name: str
    description: str = ""
    base_price: float = Field(..., ge=0)
    original_price: float | None = None
    duration_minutes: int | float | str
    reviews: int | None = None
    time_slots: list[TimeSlotRow] | None = None
    max_participants: int = Field(..., ge=0)
    min_participants: int = Field(default=1, ge=0)
    meeting_point: str = ""
    booking_cutoff_hours: int | None = None
    updated_at: str | None = None


class TourCapacity(BaseTCOModel):
    max_participants: int = Field(..., ge=0)
    min_participants: int = Field(default=1, ge=0)


class BookingRow(BaseTCOModel):
    """A confirmed booking, reduced to the participant count."""

    total_participants: int | None = None

    @field_validator("total_participants", mode="before")
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class TourConfig(BaseTCOModel):
    """A bookable tour as presented on the site."""

    id: str
    type: str
    title: str = Field(..., alias="tour-title")
    description: str = Field(default="", alias="tour-description")
    price: float = Field(..., ge=0, alias="tour-price")
    original_price: float | None = Field(default=None, alias="original-price")
    duration: str = Field(default="", alias="tour-duration")
    reviews: int = 0
    time_slots: list[str] = Field(default_factory=list, alias="time-slots")
    max_participants: int = Field(..., ge=0, alias="max-participants")
    min_participants: int = Field(default=1, ge=0, alias="min-participants")
    cancellation_cutoff_hours: int = Field(
        default=24, alias="cancellation-cutoff-hours"
    )
    cancellation_cutoff_hours_with_participant: int = Field(
        default=24, alias="cancellation-cutoff-hours-with-participant"
    )
    next_day_cutoff_time: str | None = Field(default=None, alias="next-day-cutoff-time")
    meeting_point: str = Field(default="TBD", alias="meeting-point")
    updated_at: str | None = None


class TimeSlotAvailability(BaseTCOModel):
    time: str
    available_spots: int
    source: str = Field(default="local", description="local or fallback")
