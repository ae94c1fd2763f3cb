"""Standard error codes for the venue booking backend.

Every domain failure is raised as a BookingError carrying one of these codes.
The API layer maps codes to HTTP statuses and renders the error envelope
``{"success": false, "error": "<message>"}``.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Request errors
    VALIDATION_FAILED = "ERR_VALIDATION"
    ITEM_UNAVAILABLE = "ERR_ITEM_UNAVAILABLE"
    METHOD_NOT_ALLOWED = "ERR_METHOD_NOT_ALLOWED"
    NOT_FOUND = "ERR_NOT_FOUND"

    # Booking / order errors
    BOOKING_NOT_FOUND = "ERR_BOOKING_NOT_FOUND"
    CATALOG_ITEM_NOT_FOUND = "ERR_CATALOG_ITEM_NOT_FOUND"
    BOOKING_NOT_PAYABLE = "ERR_BOOKING_NOT_PAYABLE"

    # Gateway errors
    INVALID_WEBHOOK_SIGNATURE = "ERR_GATEWAY_001"
    GATEWAY_UNAVAILABLE = "ERR_GATEWAY_002"

    # Server-side errors
    PASS_ISSUANCE_FAILED = "ERR_PASS_ISSUANCE"
    CONFIGURATION_ERROR = "ERR_CONFIGURATION"
    INTERNAL = "ERR_INTERNAL"
    RATE_LIMITED = "ERR_RATE_LIMITED"


# Human-readable error messages (the only text clients ever see)
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_FAILED: "Validation error",
    ErrorCode.ITEM_UNAVAILABLE: "This item is no longer available",
    ErrorCode.METHOD_NOT_ALLOWED: "Method not allowed",
    ErrorCode.NOT_FOUND: "Not found",
    ErrorCode.BOOKING_NOT_FOUND: "Booking not found",
    ErrorCode.CATALOG_ITEM_NOT_FOUND: "Class session or event not found",
    ErrorCode.BOOKING_NOT_PAYABLE: "Booking is not awaiting payment",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid webhook signature",
    ErrorCode.GATEWAY_UNAVAILABLE: "Payment gateway is unavailable. Please try again.",
    ErrorCode.PASS_ISSUANCE_FAILED: "Failed to issue pass",
    ErrorCode.CONFIGURATION_ERROR: "Server configuration error",
    ErrorCode.INTERNAL: "An unexpected error occurred",
    ErrorCode.RATE_LIMITED: "Too many requests. Please try again later.",
}

# Errors the caller may resolve by retrying the same request
RETRYABLE_ERRORS: set[ErrorCode] = {
    ErrorCode.GATEWAY_UNAVAILABLE,
    ErrorCode.INTERNAL,
    ErrorCode.RATE_LIMITED,
}


class ErrorEnvelope(BaseModel):
    """Error response body shared by all endpoints."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error: str


class BookingError(Exception):
    """Exception raised by booking, order, webhook and pass operations.

    ``message`` overrides the default text for the code when a more specific
    client-safe summary exists (e.g. "passId is required").
    ``details`` is for server-side logs only and never rendered to clients.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES[code]
        self.details = details
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return self.code in RETRYABLE_ERRORS

    def to_envelope(self) -> ErrorEnvelope:
        """Convert this exception to the client-facing error envelope."""
        return ErrorEnvelope(error=self.message)


class PassIssuanceError(BookingError):
    """Raised when no unique pass identifier could be claimed."""

    def __init__(self, booking_id: str, attempts: int):
        super().__init__(
            ErrorCode.PASS_ISSUANCE_FAILED,
            details={"booking_id": booking_id, "attempts": str(attempts)},
        )
        self.booking_id = booking_id
        self.attempts = attempts
