"""Pytest configuration and fixtures for venue booking backend tests.

This module provides reusable fixtures for testing:
- DynamoDB and SSM mocking with moto
- Service instances wired to the mocked store
- Sample catalog data (events, class sessions)
- Webhook payload signing with the test secret
"""

import hashlib
import hmac
import json
import os
from typing import Any, Callable, Generator
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "ap-south-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-venue")
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

TABLE_PREFIX = os.environ["DYNAMODB_TABLE_PREFIX"]

TEST_KEY_ID = "rzp_test_key123"
TEST_KEY_SECRET = "rzp_test_secret456"
TEST_WEBHOOK_SECRET = "whsec_venue_test_789"

TEST_EVENT_ID = "6f1c2b8e-3f0a-4d8e-9a55-2d1b7c0e4a11"
TEST_CLASS_SESSION_ID = "c3d9e1f2-7a4b-4c8d-9e0f-1a2b3c4d5e6f"
TEST_EVENT_PRICE = 50000
TEST_CLASS_PRICE = 80000


# === Singleton Reset ===


@pytest.fixture(autouse=True)
def reset_service_singletons() -> Generator[None, None, None]:
    """Reset cached services and rate-limit counters around each test.

    This ensures tests using mock_aws get fresh DynamoDB/SSM clients
    inside the mock context rather than reusing ones from a previous test.
    """
    from venue_api.dependencies import reset_services
    from venue_api.rate_limit import limiter

    reset_services()
    limiter.reset()
    yield
    reset_services()


# === AWS Fixtures ===


def _table(
    name: str,
    hash_key: str,
    range_key: str | None = None,
    booking_index: bool = False,
) -> dict[str, Any]:
    key_schema = [{"AttributeName": hash_key, "KeyType": "HASH"}]
    attributes = [{"AttributeName": hash_key, "AttributeType": "S"}]
    if range_key:
        key_schema.append({"AttributeName": range_key, "KeyType": "RANGE"})
        attributes.append({"AttributeName": range_key, "AttributeType": "S"})
    table: dict[str, Any] = {
        "TableName": f"{TABLE_PREFIX}-{name}",
        "KeySchema": key_schema,
        "AttributeDefinitions": attributes,
        "BillingMode": "PAY_PER_REQUEST",
    }
    if booking_index:
        attributes.append({"AttributeName": "booking_id", "AttributeType": "S"})
        table["GlobalSecondaryIndexes"] = [
            {
                "IndexName": "booking-index",
                "KeySchema": [{"AttributeName": "booking_id", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
            }
        ]
    return table


TABLES = [
    _table("bookings", "booking_id"),
    _table("orders", "order_id", booking_index=True),
    _table("passes", "pass_id", booking_index=True),
    _table("webhook-events", "event_id"),
    _table("status-history", "booking_id", range_key="changed_at"),
    _table("class-sessions", "class_session_id"),
    _table("events", "event_id"),
]


@pytest.fixture
def aws_mock() -> Generator[None, None, None]:
    """Mocked AWS with all tables and Razorpay SSM parameters created."""
    with mock_aws():
        client = boto3.client("dynamodb")
        for table in TABLES:
            client.create_table(**table)

        ssm = boto3.client("ssm")
        for name, value in (
            ("key_id", TEST_KEY_ID),
            ("key_secret", TEST_KEY_SECRET),
            ("webhook_secret", TEST_WEBHOOK_SECRET),
        ):
            ssm.put_parameter(
                Name=f"/venue/dev/razorpay/{name}", Value=value, Type="SecureString"
            )
        yield


@pytest.fixture
def dynamodb_table(aws_mock: None) -> Callable[[str], Any]:
    """Return a function giving the boto3 Table resource for a short name."""
    resource = boto3.resource("dynamodb")
    return lambda name: resource.Table(f"{TABLE_PREFIX}-{name}")


# === Service Fixtures ===


@pytest.fixture
def db(aws_mock: None) -> Any:
    from venue.services.dynamodb import get_dynamodb_service

    return get_dynamodb_service()


@pytest.fixture
def catalog_service(db: Any) -> Any:
    from venue.services.catalog import CatalogService

    return CatalogService(db)


@pytest.fixture
def booking_service(db: Any, catalog_service: Any) -> Any:
    from venue.services.booking_service import BookingService
    from venue.services.pass_service import PassService

    bookings = BookingService(db, catalog=catalog_service)
    bookings.pass_service = PassService(db, bookings, catalog=catalog_service)
    return bookings


@pytest.fixture
def pass_service(booking_service: Any) -> Any:
    return booking_service.pass_service


@pytest.fixture
def mock_gateway() -> MagicMock:
    """Razorpay adapter double returning a fixed order."""
    from venue.services.razorpay_service import RazorpayService

    gateway = MagicMock(spec=RazorpayService)
    gateway.key_id = TEST_KEY_ID
    gateway.create_order.side_effect = lambda **kwargs: {
        "id": "order_test_001",
        "entity": "order",
        "amount": kwargs["amount"],
        "currency": kwargs["currency"],
        "receipt": kwargs["booking_id"],
        "status": "created",
    }
    gateway.compute_payload_hash.side_effect = lambda payload: hashlib.sha256(
        payload
    ).hexdigest()
    return gateway


@pytest.fixture
def order_service(db: Any, booking_service: Any, mock_gateway: MagicMock) -> Any:
    from venue.services.order_service import OrderService

    return OrderService(db, booking_service, mock_gateway)


@pytest.fixture
def razorpay_service(aws_mock: None) -> Any:
    from venue.services.razorpay_service import RazorpayService

    return RazorpayService(environment="dev")


@pytest.fixture
def webhook_handler(
    db: Any,
    razorpay_service: Any,
    booking_service: Any,
    order_service: Any,
    pass_service: Any,
    catalog_service: Any,
) -> Any:
    from venue.services.webhook_handler import WebhookHandler

    return WebhookHandler(
        db,
        razorpay_service,
        booking_service,
        order_service,
        pass_service,
        catalog=catalog_service,
    )


# === Sample Data ===


@pytest.fixture
def sample_event(dynamodb_table: Callable[[str], Any]) -> dict[str, Any]:
    item = {
        "event_id": TEST_EVENT_ID,
        "title": "Open Mic Night",
        "price_paise": TEST_EVENT_PRICE,
        "active": True,
        "venue": "Studio A",
        "starts_at": "2026-12-05T19:00:00+05:30",
    }
    dynamodb_table("events").put_item(Item=item)
    return item


@pytest.fixture
def sample_class_session(dynamodb_table: Callable[[str], Any]) -> dict[str, Any]:
    item = {
        "class_session_id": TEST_CLASS_SESSION_ID,
        "title": "Morning Pottery",
        "price_paise": TEST_CLASS_PRICE,
        "capacity": 2,
        "spots_booked": 0,
        "active": True,
    }
    dynamodb_table("class-sessions").put_item(Item=item)
    return item


@pytest.fixture
def event_booking_request() -> dict[str, Any]:
    return {
        "type": "EVENT",
        "name": "Asha Rao",
        "phone": "98765 43210",
        "email": "Asha@Example.com",
        "eventId": TEST_EVENT_ID,
    }


@pytest.fixture
def pending_event_booking(
    booking_service: Any, sample_event: dict[str, Any], event_booking_request: dict[str, Any]
) -> Any:
    from venue.models import BookingCreate

    return booking_service.create_booking(BookingCreate(**event_booking_request))


@pytest.fixture
def pending_class_booking(booking_service: Any, sample_class_session: dict[str, Any]) -> Any:
    from venue.models import BookingCreate

    return booking_service.create_booking(
        BookingCreate(
            type="CLASS_SESSION",
            name="Ravi Kumar",
            phone="+919812345678",
            email="ravi@example.com",
            classSessionId=TEST_CLASS_SESSION_ID,
        )
    )


# === Webhook Helpers ===


def sign_payload(payload: bytes, secret: str = TEST_WEBHOOK_SECRET) -> str:
    """Razorpay signature: hex HMAC-SHA256 of the raw body."""
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def razorpay_event(
    event_type: str,
    order_id: str,
    amount: int,
    *,
    payment_id: str = "pay_test_001",
    currency: str = "INR",
    status: str = "captured",
) -> bytes:
    """Build a raw Razorpay webhook body."""
    body = {
        "entity": "event",
        "account_id": "acc_test",
        "event": event_type,
        "contains": ["payment"],
        "payload": {
            "payment": {
                "entity": {
                    "id": payment_id,
                    "entity": "payment",
                    "order_id": order_id,
                    "amount": amount,
                    "currency": currency,
                    "status": status,
                    "method": "upi",
                }
            }
        },
        "created_at": 1767225600,
    }
    return json.dumps(body, separators=(",", ":")).encode()


@pytest.fixture
def sign() -> Callable[..., str]:
    return sign_payload


@pytest.fixture
def make_event() -> Callable[..., bytes]:
    return razorpay_event
