"""Booking endpoints.

Provides REST endpoints for:
- Creating bookings for class sessions, events and space requests
- Reading a booking's status (polled by the client after checkout)

Both endpoints are public; bookings are addressed by unguessable UUIDs.
"""

from fastapi import APIRouter, Depends, Request
from starlette.status import HTTP_200_OK

from venue.models import BookingCreate
from venue.services.booking_service import BookingService
from venue_api.dependencies import get_booking_service
from venue_api.models.bookings import (
    BookingCreated,
    BookingCreatedResponse,
    BookingResponse,
    BookingView,
)
from venue_api.rate_limit import BOOKING_CREATE_LIMIT, BOOKING_READ_LIMIT, limiter

router = APIRouter(tags=["bookings"])


@router.post(
    "/bookings",
    summary="Create booking",
    description="""
Create a booking for a class session, an event, or a space request.

**Notes:**
- The amount is computed from the catalog price, never taken from the request
- Phone numbers are normalized to +91XXXXXXXXXX, emails are lowercased
- Space requests need no payment and are confirmed immediately
""",
    response_model=BookingCreatedResponse,
    status_code=HTTP_200_OK,
    responses={
        400: {"description": "Invalid request or item unavailable"},
        404: {"description": "Class session or event not found"},
        429: {"description": "Too many requests"},
    },
)
@limiter.limit(BOOKING_CREATE_LIMIT)
async def create_booking(
    request: Request,
    payload: BookingCreate,
    service: BookingService = Depends(get_booking_service),
) -> BookingCreatedResponse:
    booking = service.create_booking(payload)
    return BookingCreatedResponse(data=BookingCreated.from_booking(booking))


@router.get(
    "/bookings/{booking_id}",
    summary="Get booking",
    description="Get a booking's current status, order and pass.",
    response_model=BookingResponse,
    responses={
        400: {"description": "Invalid bookingId format"},
        404: {"description": "Booking not found"},
        429: {"description": "Too many requests"},
    },
)
@limiter.limit(BOOKING_READ_LIMIT)
async def get_booking(
    request: Request,
    booking_id: str,
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = service.get_booking(booking_id)
    return BookingResponse(data=BookingView.from_booking(booking))
