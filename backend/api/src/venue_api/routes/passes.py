"""Pass verification endpoint used at the venue entrance."""

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter, Depends, Query

from venue.models.errors import BookingError, ErrorCode
from venue.services.pass_service import PassService
from venue.utils.logging import get_logger
from venue_api.dependencies import get_pass_service
from venue_api.models.passes import PassVerificationData, PassVerificationResponse

logger = get_logger(__name__)

router = APIRouter(tags=["passes"])


@router.get(
    "/passes/verify",
    summary="Verify event pass",
    description="""
Look up an event pass by its identifier (as printed or scanned).

**Notes:**
- The identifier is trimmed and uppercased before lookup
- An unknown pass answers 200 with `valid: false`
- Read-only: verifying never checks the holder in
""",
    response_model=PassVerificationResponse,
    response_model_exclude_none=True,
    responses={
        400: {"description": "passId is required"},
        500: {"description": "Failed to verify pass"},
    },
)
async def verify_pass(
    pass_id: str | None = Query(default=None, alias="passId"),
    service: PassService = Depends(get_pass_service),
) -> PassVerificationResponse:
    try:
        result = service.verify_pass(pass_id)
    except (ClientError, BotoCoreError) as e:
        logger.error("Verify pass error: %s", e)
        raise BookingError(ErrorCode.INTERNAL, "Failed to verify pass") from e
    return PassVerificationResponse(data=PassVerificationData.from_verification(result))
