"""Order endpoints.

Issues a Razorpay order for a booking awaiting payment. The response
carries everything the checkout widget needs.
"""

from fastapi import APIRouter, Depends, Request

from venue.services.order_service import OrderService
from venue_api.dependencies import get_order_service
from venue_api.models.orders import OrderData, OrderRequest, OrderResponse
from venue_api.rate_limit import ORDER_CREATE_LIMIT, limiter

router = APIRouter(tags=["orders"])


@router.post(
    "/orders",
    summary="Create payment order",
    description="""
Create (or reuse) a Razorpay order for a pending booking.

**Notes:**
- Only `bookingId` is accepted; the amount comes from the booking
- Retrying while an order is still active returns the same order
- Amounts are in paise
""",
    response_model=OrderResponse,
    responses={
        400: {"description": "Invalid request"},
        404: {"description": "Booking not found"},
        409: {"description": "Booking is not awaiting payment"},
        429: {"description": "Too many requests"},
        502: {"description": "Payment gateway unavailable, safe to retry"},
    },
)
@limiter.limit(ORDER_CREATE_LIMIT)
async def create_order(
    request: Request,
    payload: OrderRequest,
    service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    details = service.create_order(payload.booking_id)
    return OrderResponse(data=OrderData.from_details(details))
