"""Payment order model tying a gateway order to a booking."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import OrderStatus


class PaymentOrder(BaseModel):
    """A Razorpay order minted for a booking.

    Amounts are stored in paise and always copied from the booking,
    never from client input.
    """

    model_config = ConfigDict(strict=True)

    order_id: str = Field(
        ...,
        description="Gateway order ID",
        examples=["order_NjX8sT3bE4xY2k"],
    )
    booking_id: str = Field(..., description="Reference to Booking")
    amount: int = Field(..., ge=0, description="Amount in paise")
    currency: str = Field(default="INR", description="Currency code")
    key_id: str = Field(..., description="Gateway key ID for checkout initialization")
    receipt: str = Field(..., description="Receipt sent to the gateway (booking ID)")
    status: OrderStatus = Field(..., description="Order status")
    payment_id: str | None = Field(
        default=None,
        description="Gateway payment ID once a payment event arrives",
        examples=["pay_NjX9aQ7cF5zW3m"],
    )
    created_at: datetime = Field(..., description="Creation timestamp")
    expires_at: datetime = Field(
        ..., description="After this the booking may be issued a new order"
    )


class OrderDetails(BaseModel):
    """Checkout parameters returned to the client after order issuance."""

    model_config = ConfigDict(strict=True)

    order_id: str
    key_id: str
    amount: int
    currency: str
    booking_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
