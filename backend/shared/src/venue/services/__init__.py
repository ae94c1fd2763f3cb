"""Backend services for venue booking reconciliation."""

from .booking_service import BookingService, is_valid_booking_id
from .catalog import CatalogService
from .dynamodb import DynamoDBService, get_dynamodb_service, reset_dynamodb_service
from .order_service import ORDER_TTL, OrderService
from .pass_id import PASS_ID_PATTERN, generate_pass_id, normalize_pass_id
from .pass_service import PassService
from .razorpay_service import (
    RazorpayConfigurationError,
    RazorpayService,
    RazorpayServiceError,
    WebhookSignatureError,
    get_razorpay_service,
)
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .webhook_handler import WebhookHandler

__all__ = [
    "DynamoDBService",
    "get_dynamodb_service",
    "reset_dynamodb_service",
    "BookingService",
    "is_valid_booking_id",
    "CatalogService",
    "OrderService",
    "ORDER_TTL",
    "PassService",
    "PASS_ID_PATTERN",
    "generate_pass_id",
    "normalize_pass_id",
    "WebhookHandler",
    "RazorpayService",
    "RazorpayServiceError",
    "RazorpayConfigurationError",
    "WebhookSignatureError",
    "get_razorpay_service",
    "SSMService",
    "SSMServiceError",
    "get_ssm_service",
]
