"""API models for pass verification."""

from datetime import datetime

from pydantic import Field

from venue.models import BookingStatus, CheckInStatus, PassVerification

from .common import CamelModel


class PassView(CamelModel):
    pass_id: str
    booking_id: str
    check_in_status: CheckInStatus
    check_in_time: datetime | None = None


class EventView(CamelModel):
    event_id: str
    title: str
    venue: str | None = None
    starts_at: datetime | None = None


class PassVerificationData(CamelModel):
    """Verification result; only ``valid`` is present for unknown passes."""

    valid: bool
    # "pass" is a keyword, so the attribute carries a suffix
    pass_: PassView | None = Field(default=None, alias="pass")
    event: EventView | None = None
    attendee_name: str | None = None
    booking_status: BookingStatus | None = None

    @classmethod
    def from_verification(cls, result: PassVerification) -> "PassVerificationData":
        event_pass = result.event_pass
        event = result.event
        return cls(
            valid=result.valid,
            pass_=(
                PassView(
                    pass_id=event_pass.pass_id,
                    booking_id=event_pass.booking_id,
                    check_in_status=event_pass.check_in_status,
                    check_in_time=event_pass.check_in_time,
                )
                if event_pass
                else None
            ),
            event=(
                EventView(
                    event_id=event.event_id,
                    title=event.title,
                    venue=event.venue,
                    starts_at=event.starts_at,
                )
                if event
                else None
            ),
            attendee_name=result.attendee_name,
            booking_status=result.booking_status,
        )


class PassVerificationResponse(CamelModel):
    success: bool = True
    data: PassVerificationData
