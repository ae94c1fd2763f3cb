"""API models for order endpoints."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from venue.models import OrderDetails

from .common import CamelModel


class OrderRequest(BaseModel):
    """Request to issue a payment order.

    Only the booking is identified; the amount comes from the stored booking.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "examples": [{"bookingId": "0b7c5a8e-4f2d-4c1e-9a3b-6d8e2f1a7c90"}]
        },
    )

    booking_id: str = Field(..., min_length=1, description="Booking to pay for")


class OrderData(CamelModel):
    """Checkout parameters for the Razorpay widget."""

    order_id: str
    key_id: str
    amount: int = Field(..., description="Amount in paise")
    currency: str
    booking_id: str
    customer_name: str
    customer_email: str
    customer_phone: str

    @classmethod
    def from_details(cls, details: OrderDetails) -> "OrderData":
        return cls(**details.model_dump())


class OrderResponse(CamelModel):
    success: bool = True
    data: OrderData
