"""Webhook event record for idempotency and auditing."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import WebhookResult


class WebhookEventRecord(BaseModel):
    """Log of a received payment gateway webhook delivery.

    Used for:
    - Idempotency: the event_id is never applied twice
    - Auditing: every delivery is kept, including anomalies
    - Debugging: investigate payment issues
    """

    model_config = ConfigDict(strict=True)

    event_id: str = Field(
        ...,
        description="Gateway event ID (or sha256:<payload hash> when absent)",
        examples=["evt_NjXA1bC2dE3fG4"],
    )
    event_type: str = Field(
        ...,
        description="Gateway event type",
        examples=["payment.captured", "payment.failed", "order.paid"],
    )
    processed_at: datetime = Field(..., description="When the event was processed")
    payload_hash: str = Field(..., description="SHA-256 hash of the raw payload")
    order_id: str | None = Field(default=None)
    booking_id: str | None = Field(default=None)
    payment_id: str | None = Field(default=None)
    payment_status: str | None = Field(default=None)
    processing_result: WebhookResult = Field(default=WebhookResult.SUCCESS)
    error_message: str | None = Field(default=None)


class WebhookOutcome(BaseModel):
    """What the reconciler did with a delivery."""

    model_config = ConfigDict(strict=True)

    event_id: str
    event_type: str
    processing_result: WebhookResult
    booking_id: str | None = None
    pass_id: str | None = None
    message: str | None = None
