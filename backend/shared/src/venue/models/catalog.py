"""Catalog entities that bookings reference.

Catalog records are maintained by the admin tooling; this service only
reads them (and bumps ``spots_booked`` when a class booking is confirmed).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ClassSession(BaseModel):
    """A scheduled class with limited capacity."""

    model_config = ConfigDict(strict=True)

    class_session_id: str
    title: str
    price_paise: int = Field(..., ge=0)
    capacity: int = Field(..., ge=0)
    spots_booked: int = Field(default=0, ge=0)
    active: bool = True
    starts_at: datetime | None = None

    @property
    def spots_left(self) -> int:
        return max(self.capacity - self.spots_booked, 0)


class Event(BaseModel):
    """A ticketed event admitting pass holders."""

    model_config = ConfigDict(strict=True)

    event_id: str
    title: str
    price_paise: int = Field(..., ge=0)
    active: bool = True
    venue: str | None = None
    starts_at: datetime | None = None
