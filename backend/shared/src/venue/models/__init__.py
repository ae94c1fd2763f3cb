"""Pydantic models for venue booking data entities."""

from .booking import Booking, BookingCreate, StatusChange, normalize_phone
from .catalog import ClassSession, Event
from .enums import (
    BookingStatus,
    BookingType,
    CheckInStatus,
    OrderStatus,
    WebhookResult,
)
from .errors import (
    ERROR_MESSAGES,
    RETRYABLE_ERRORS,
    BookingError,
    ErrorCode,
    ErrorEnvelope,
    PassIssuanceError,
)
from .event_pass import CheckInResult, EventPass, PassVerification
from .order import OrderDetails, PaymentOrder
from .webhook_event import WebhookEventRecord, WebhookOutcome

__all__ = [
    # Enums
    "BookingStatus",
    "BookingType",
    "CheckInStatus",
    "OrderStatus",
    "WebhookResult",
    # Booking
    "Booking",
    "BookingCreate",
    "StatusChange",
    "normalize_phone",
    # Catalog
    "ClassSession",
    "Event",
    # Orders
    "OrderDetails",
    "PaymentOrder",
    # Passes
    "CheckInResult",
    "EventPass",
    "PassVerification",
    # Webhooks
    "WebhookEventRecord",
    "WebhookOutcome",
    # Errors
    "BookingError",
    "ErrorCode",
    "ErrorEnvelope",
    "ERROR_MESSAGES",
    "PassIssuanceError",
    "RETRYABLE_ERRORS",
]
