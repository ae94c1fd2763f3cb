"""API models for booking endpoints."""

from datetime import datetime

from pydantic import Field

from venue.models import Booking, BookingStatus, BookingType

from .common import CamelModel


class BookingCreated(CamelModel):
    """Result of creating a booking."""

    booking_id: str
    type: BookingType
    amount: int = Field(..., description="Amount to pay in paise")
    status: BookingStatus
    requires_payment: bool
    pass_id: str | None = None

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingCreated":
        return cls(
            booking_id=booking.booking_id,
            type=booking.type,
            amount=booking.amount_paise,
            status=booking.status,
            requires_payment=booking.status is BookingStatus.PENDING_PAYMENT,
            pass_id=booking.pass_id,
        )


class BookingCreatedResponse(CamelModel):
    success: bool = True
    data: BookingCreated


class BookingView(CamelModel):
    """Booking as seen by its customer (and the status poller)."""

    booking_id: str
    type: BookingType
    status: BookingStatus
    amount: int = Field(..., description="Amount in paise")
    currency: str
    customer_name: str
    customer_email: str
    customer_phone: str
    class_session_id: str | None = None
    event_id: str | None = None
    preferred_slots: list[str] | None = None
    order_id: str | None = None
    pass_id: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingView":
        return cls(
            booking_id=booking.booking_id,
            type=booking.type,
            status=booking.status,
            amount=booking.amount_paise,
            currency=booking.currency,
            customer_name=booking.name,
            customer_email=booking.email,
            customer_phone=booking.phone,
            class_session_id=booking.class_session_id,
            event_id=booking.event_id,
            preferred_slots=booking.preferred_slots,
            order_id=booking.order_id,
            pass_id=booking.pass_id,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class BookingResponse(CamelModel):
    success: bool = True
    data: BookingView
