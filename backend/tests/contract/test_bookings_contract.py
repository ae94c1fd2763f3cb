"""Contract tests for POST /api/bookings and GET /api/bookings/{bookingId}."""

import uuid

import pytest
from starlette.status import (
    HTTP_200_OK,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
)


class TestCreateBooking:
    def test_event_booking_requires_payment(self, client, sample_event, event_booking_request):
        response = client.post("/api/bookings", json=event_booking_request)

        assert response.status_code == HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        uuid.UUID(data["bookingId"], version=4)
        assert data["type"] == "EVENT"
        assert data["amount"] == 50000
        assert data["status"] == "PENDING_PAYMENT"
        assert data["requiresPayment"] is True

    def test_client_amount_ignored(self, client, sample_event, event_booking_request):
        response = client.post(
            "/api/bookings", json={**event_booking_request, "amount": 1}
        )
        assert response.json()["data"]["amount"] == 50000

    def test_space_request_confirmed(self, client, aws_mock):
        response = client.post(
            "/api/bookings",
            json={
                "type": "SPACE_REQUEST",
                "name": "Meera Iyer",
                "phone": "+91 99887 76655",
                "email": "meera@example.com",
                "preferredSlots": ["Sat 10:00-12:00"],
                "purpose": "Book club",
            },
        )

        assert response.status_code == HTTP_200_OK
        data = response.json()["data"]
        assert data["status"] == "CONFIRMED"
        assert data["requiresPayment"] is False
        assert data["amount"] == 0

    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"eventId": None}, "eventId is required for EVENT booking"),
            ({"phone": "12345"}, "Invalid phone number"),
        ],
    )
    def test_invalid_request(self, client, sample_event, event_booking_request, overrides, message):
        response = client.post("/api/bookings", json={**event_booking_request, **overrides})

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.json() == {"success": False, "error": message}

    def test_missing_field(self, client, event_booking_request):
        request = {k: v for k, v in event_booking_request.items() if k != "name"}
        response = client.post("/api/bookings", json=request)

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "name is required"

    def test_unknown_event(self, client, event_booking_request):
        response = client.post(
            "/api/bookings", json={**event_booking_request, "eventId": str(uuid.uuid4())}
        )

        assert response.status_code == HTTP_404_NOT_FOUND
        assert response.json() == {"success": False, "error": "Event not found"}

    def test_inactive_event(self, client, sample_event, dynamodb_table, event_booking_request):
        dynamodb_table("events").put_item(Item={**sample_event, "active": False})

        response = client.post("/api/bookings", json=event_booking_request)

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "This event is no longer available"


class TestGetBooking:
    def test_returns_booking(self, client, pending_event_booking):
        response = client.get(f"/api/bookings/{pending_event_booking.booking_id}")

        assert response.status_code == HTTP_200_OK
        data = response.json()["data"]
        assert data["bookingId"] == pending_event_booking.booking_id
        assert data["status"] == "PENDING_PAYMENT"
        assert data["customerEmail"] == "asha@example.com"
        assert data["customerPhone"] == "+919876543210"
        assert data["passId"] is None

    def test_malformed_id(self, client):
        response = client.get("/api/bookings/not-a-uuid")

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.json() == {"success": False, "error": "Invalid bookingId format"}

    def test_unknown_id(self, client):
        response = client.get(f"/api/bookings/{uuid.uuid4()}")

        assert response.status_code == HTTP_404_NOT_FOUND
        assert response.json() == {"success": False, "error": "Booking not found"}
