"""Development-only payment confirmation.

Lets a developer complete a booking without a real Razorpay payment. The
endpoint pretends not to exist (404) unless ALLOW_DEV_ENDPOINTS=true and
the X-Dev-Secret header matches DEV_SECRET.
"""

import hmac
import os

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from venue.models.errors import BookingError, ErrorCode
from venue.services.webhook_handler import WebhookHandler
from venue.utils.logging import get_logger, log_security_event
from venue_api.dependencies import get_webhook_handler
from venue_api.models.webhooks import DevConfirmData, DevConfirmResponse

logger = get_logger(__name__)

router = APIRouter(tags=["dev"])


class DevConfirmRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    booking_id: str = Field(..., min_length=1)


def require_dev_access(x_dev_secret: str | None = Header(default=None)) -> None:
    """Hide the endpoint unless dev mode is on and the secret matches."""
    if os.environ.get("ALLOW_DEV_ENDPOINTS") != "true":
        raise BookingError(ErrorCode.NOT_FOUND)

    expected = os.environ.get("DEV_SECRET")
    if not expected or not x_dev_secret or not hmac.compare_digest(
        x_dev_secret.encode(), expected.encode()
    ):
        log_security_event(
            logger,
            "AUTH_FAILURE",
            endpoint="dev_confirm_payment",
            reason="invalid_dev_secret",
        )
        raise BookingError(ErrorCode.NOT_FOUND)


@router.post(
    "/dev/confirm-payment",
    summary="Simulate payment (dev only)",
    response_model=DevConfirmResponse,
    include_in_schema=False,
    dependencies=[Depends(require_dev_access)],
)
async def confirm_payment(
    request: DevConfirmRequest,
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> DevConfirmResponse:
    outcome = handler.apply_payment_captured(request.booking_id)
    return DevConfirmResponse(
        data=DevConfirmData(
            booking_id=outcome.booking_id,
            pass_id=outcome.pass_id,
            processing_result=outcome.processing_result.value,
        )
    )
