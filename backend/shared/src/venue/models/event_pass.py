"""Event pass model and verification result."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .catalog import Event
from .enums import BookingStatus, CheckInStatus


class EventPass(BaseModel):
    """Admission credential issued for a confirmed event booking."""

    model_config = ConfigDict(strict=True)

    pass_id: str = Field(
        ...,
        description="Human-readable pass identifier",
        examples=["OSS-EV-7KQ2M9XH"],
    )
    booking_id: str = Field(..., description="Owning booking")
    event_id: str = Field(..., description="Owning event")
    check_in_status: CheckInStatus = Field(default=CheckInStatus.NOT_CHECKED_IN)
    check_in_time: datetime | None = Field(default=None)
    checked_in_by: str | None = Field(
        default=None, description="Staff member who admitted the attendee"
    )
    created_at: datetime = Field(..., description="Issue timestamp")


class PassVerification(BaseModel):
    """Result of looking up a pass at the venue entrance.

    An unknown pass is a normal outcome (valid=False), not an error.
    """

    model_config = ConfigDict(strict=True)

    valid: bool
    event_pass: EventPass | None = None
    event: Event | None = None
    attendee_name: str | None = None
    booking_status: BookingStatus | None = None


class CheckInResult(BaseModel):
    """Result of admitting a pass holder."""

    model_config = ConfigDict(strict=True)

    event_pass: EventPass
    attendee_name: str
    already_checked_in: bool
