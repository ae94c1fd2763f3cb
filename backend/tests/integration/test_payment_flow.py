"""Integration tests for the complete booking payment flow.

Tests verify the end-to-end flow through the API against mocked AWS:
1. Create booking (PENDING_PAYMENT)
2. Issue a Razorpay order
3. Receive the signed webhook
4. Poll until confirmed, then verify and check in the pass

Only the gateway's order creation is replaced by a double; signature
verification uses the real Razorpay SDK and the secret held in SSM.
"""

from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

from venue.client.status_poller import BookingStatusPoller, PollOutcome
from venue.models import BookingStatus, CheckInStatus
from venue_api.dependencies import get_order_service, get_webhook_handler
from venue_api.main import app

pytestmark = pytest.mark.integration


@pytest.fixture
def client(
    aws_mock: None, order_service: Any, webhook_handler: Any
) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_order_service] = lambda: order_service
    app.dependency_overrides[get_webhook_handler] = lambda: webhook_handler
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def poller(client: TestClient) -> BookingStatusPoller:
    clock = {"now": 0.0}

    def sleep(seconds: float) -> None:
        clock["now"] += seconds

    return BookingStatusPoller(
        client=client,
        interval_seconds=2.0,
        timeout_seconds=10.0,
        sleep=sleep,
        clock=lambda: clock["now"],
    )


def _deliver(client: TestClient, payload: bytes, signature: str, event_id: str):
    return client.post(
        "/api/webhooks/razorpay",
        content=payload,
        headers={
            "Content-Type": "application/json",
            "X-Razorpay-Signature": signature,
            "X-Razorpay-Event-Id": event_id,
        },
    )


def _book_and_order(client: TestClient, request: dict[str, Any]) -> tuple[str, str]:
    booking = client.post("/api/bookings", json=request).json()["data"]
    assert booking["status"] == "PENDING_PAYMENT"
    order = client.post("/api/orders", json={"bookingId": booking["bookingId"]}).json()["data"]
    return booking["bookingId"], order["orderId"]


class TestSuccessfulPayment:
    def test_booking_to_check_in(
        self, client, poller, sample_event, event_booking_request, make_event, sign, pass_service
    ):
        booking_id, order_id = _book_and_order(client, event_booking_request)

        # Before the webhook lands the poller gives up without a verdict
        pending = poller.poll(booking_id)
        assert pending.outcome is PollOutcome.TIMEOUT

        payload = make_event("payment.captured", order_id, 50000)
        ack = _deliver(client, payload, sign(payload), "evt_flow_1")
        assert ack.json()["processing_result"] == "success"

        result = poller.poll(booking_id)
        assert result.outcome is PollOutcome.CONFIRMED
        pass_id = result.pass_id
        assert pass_id is not None

        verification = client.get("/api/passes/verify", params={"passId": pass_id}).json()["data"]
        assert verification["valid"] is True
        assert verification["bookingStatus"] == "CONFIRMED"
        assert verification["pass"]["checkInStatus"] == "NOT_CHECKED_IN"

        checked_in = pass_service.check_in(pass_id, staff_id="door-1")
        assert checked_in.already_checked_in is False
        assert checked_in.event_pass.check_in_status is CheckInStatus.CHECKED_IN

        again = client.get("/api/passes/verify", params={"passId": pass_id}).json()["data"]
        assert again["pass"]["checkInStatus"] == "CHECKED_IN"

    def test_redelivered_and_racing_events_issue_one_pass(
        self, client, sample_event, event_booking_request, make_event, sign, dynamodb_table
    ):
        booking_id, order_id = _book_and_order(client, event_booking_request)
        captured = make_event("payment.captured", order_id, 50000)
        paid = make_event("order.paid", order_id, 50000)

        results = [
            _deliver(client, captured, sign(captured), "evt_a").json()["processing_result"],
            _deliver(client, captured, sign(captured), "evt_a").json()["processing_result"],
            _deliver(client, paid, sign(paid), "evt_b").json()["processing_result"],
        ]

        assert results == ["success", "duplicate", "ignored"]
        passes = dynamodb_table("passes").scan()["Items"]
        assert len(passes) == 1
        booking = client.get(f"/api/bookings/{booking_id}").json()["data"]
        assert booking["passId"] == passes[0]["pass_id"]

    def test_order_retry_after_confirmation_conflicts(
        self, client, sample_event, event_booking_request, make_event, sign
    ):
        booking_id, order_id = _book_and_order(client, event_booking_request)
        payload = make_event("payment.captured", order_id, 50000)
        _deliver(client, payload, sign(payload), "evt_c")

        response = client.post("/api/orders", json={"bookingId": booking_id})

        assert response.status_code == 409


class TestFailedPayment:
    def test_failure_then_late_capture_does_not_confirm(
        self, client, poller, sample_event, event_booking_request, make_event, sign, booking_service
    ):
        booking_id, order_id = _book_and_order(client, event_booking_request)
        failed = make_event("payment.failed", order_id, 50000, status="failed")
        _deliver(client, failed, sign(failed), "evt_fail")

        result = poller.poll(booking_id)
        assert result.outcome is PollOutcome.FAILED
        assert result.pass_id is None

        captured = make_event("payment.captured", order_id, 50000)
        ack = _deliver(client, captured, sign(captured), "evt_late")

        assert ack.json()["processing_result"] == "ignored"
        assert booking_service.get_booking(booking_id).status is BookingStatus.FAILED


class TestClassSessionPayment:
    def test_paid_class_takes_a_spot(
        self, client, sample_class_session, make_event, sign, dynamodb_table
    ):
        booking_id, order_id = _book_and_order(
            client,
            {
                "type": "CLASS_SESSION",
                "name": "Ravi Kumar",
                "phone": "9812345678",
                "email": "ravi@example.com",
                "classSessionId": sample_class_session["class_session_id"],
            },
        )
        payload = make_event("payment.captured", order_id, 80000)

        _deliver(client, payload, sign(payload), "evt_class")

        booking = client.get(f"/api/bookings/{booking_id}").json()["data"]
        assert booking["status"] == "CONFIRMED"
        assert booking["passId"] is None
        session = dynamodb_table("class-sessions").get_item(
            Key={"class_session_id": sample_class_session["class_session_id"]}
        )["Item"]
        assert session["spots_booked"] == 1
