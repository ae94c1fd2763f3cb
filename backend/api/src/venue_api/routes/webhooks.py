"""Webhook endpoints for external service integrations.

Provides endpoints for:
- Razorpay payment events (payment.captured, order.paid, payment.failed)

These endpoints do NOT require authentication; they receive payloads
signed with the shared webhook secret, verified over the raw body.
"""

from fastapi import APIRouter, Depends, Header, Request

from venue.services.webhook_handler import WebhookHandler
from venue_api.dependencies import get_webhook_handler
from venue_api.models.webhooks import WebhookResponse

router = APIRouter(tags=["webhooks"])


@router.post(
    "/webhooks/razorpay",
    summary="Razorpay webhook",
    description="""
Receive payment events from Razorpay.

**Notes:**
- The X-Razorpay-Signature header must be the HMAC-SHA256 of the raw body
- Events are idempotent on their event ID; redeliveries answer `duplicate`
- Anomalies (unknown order, amount mismatch) are recorded and acknowledged
  with 200 so the gateway does not retry them
""",
    response_model=WebhookResponse,
    responses={
        401: {"description": "Missing or invalid signature"},
        500: {"description": "Processing failed, the gateway will retry"},
    },
)
async def razorpay_webhook(
    request: Request,
    x_razorpay_signature: str | None = Header(default=None),
    x_razorpay_event_id: str | None = Header(default=None),
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> WebhookResponse:
    payload = await request.body()
    outcome = handler.handle(payload, x_razorpay_signature, x_razorpay_event_id)
    return WebhookResponse.from_outcome(outcome)
