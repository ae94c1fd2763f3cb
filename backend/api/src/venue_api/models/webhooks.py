"""API models for webhook endpoints."""

from pydantic import BaseModel

from venue.models import WebhookOutcome

from .common import CamelModel


class WebhookResponse(BaseModel):
    """Acknowledgement returned to the gateway."""

    received: bool = True
    event_id: str | None = None
    event_type: str | None = None
    processing_result: str  # "success", "duplicate", "skipped", "ignored", ...
    message: str | None = None

    @classmethod
    def from_outcome(cls, outcome: WebhookOutcome) -> "WebhookResponse":
        return cls(
            event_id=outcome.event_id,
            event_type=outcome.event_type,
            processing_result=outcome.processing_result.value,
            message=outcome.message,
        )


class DevConfirmData(CamelModel):
    booking_id: str | None = None
    pass_id: str | None = None
    processing_result: str


class DevConfirmResponse(CamelModel):
    success: bool = True
    data: DevConfirmData
