"""Gateway order issuance for pending bookings.

A booking holds at most one active order. The booking claim and the order
record are written in one transaction so a concurrent retry either reuses
the winner's order or is rejected.
"""

import datetime as dt
import logging
from typing import TYPE_CHECKING, Any

from venue.models import (
    Booking,
    BookingError,
    BookingStatus,
    ErrorCode,
    OrderDetails,
    OrderStatus,
    PaymentOrder,
)
from venue.utils.logging import log_payment_operation

from .razorpay_service import RazorpayConfigurationError, RazorpayServiceError

if TYPE_CHECKING:
    from .booking_service import BookingService
    from .dynamodb import DynamoDBService
    from .razorpay_service import RazorpayService

logger = logging.getLogger(__name__)

# Orders older than this no longer block a new order for the same booking
ORDER_TTL = dt.timedelta(minutes=30)


def _timestamp(value: dt.datetime) -> str:
    # Fixed width so stored timestamps compare correctly as strings
    return value.isoformat(timespec="microseconds")


class OrderService:
    """Service for creating and reading payment orders."""

    ORDERS_TABLE = "orders"
    BOOKINGS_TABLE = "bookings"
    BOOKING_INDEX = "booking-index"

    def __init__(
        self,
        db: "DynamoDBService",
        bookings: "BookingService",
        gateway: "RazorpayService",
    ) -> None:
        """Initialize order service.

        Args:
            db: DynamoDB service instance
            bookings: Booking reader
            gateway: Razorpay adapter
        """
        self.db = db
        self.bookings = bookings
        self.gateway = gateway

    def create_order(self, booking_id: str) -> OrderDetails:
        """Issue (or reuse) a gateway order for a pending booking.

        The amount always comes from the stored booking.

        Raises:
            BookingError: BOOKING_NOT_FOUND, BOOKING_NOT_PAYABLE when the booking
                is not awaiting payment, GATEWAY_UNAVAILABLE when Razorpay fails
                (nothing is persisted), CONFIGURATION_ERROR when credentials
                are missing.
        """
        booking = self.bookings.get_booking(booking_id)
        self._ensure_payable(booking)

        now = dt.datetime.now(dt.UTC)
        existing = self._active_order(booking, now)
        if existing is not None:
            logger.info(
                "Reusing active order %s for booking %s", existing.order_id, booking_id
            )
            return self._order_details(existing, booking)

        try:
            key_id = self.gateway.key_id
            gateway_order = self.gateway.create_order(
                booking_id=booking.booking_id,
                amount=booking.amount_paise,
                currency=booking.currency,
                notes={"booking_id": booking.booking_id, "type": booking.type.value},
            )
        except RazorpayConfigurationError as e:
            logger.error("Razorpay is not configured: %s", e)
            raise BookingError(ErrorCode.CONFIGURATION_ERROR) from e
        except RazorpayServiceError as e:
            log_payment_operation(
                logger,
                "create_order",
                booking_id=booking_id,
                amount_paise=booking.amount_paise,
                status="failed",
                error=str(e),
            )
            raise BookingError(
                ErrorCode.GATEWAY_UNAVAILABLE,
                details={"booking_id": booking_id, "error": str(e)},
            ) from e

        order = PaymentOrder(
            order_id=gateway_order["id"],
            booking_id=booking.booking_id,
            amount=booking.amount_paise,
            currency=booking.currency,
            key_id=key_id,
            receipt=booking.booking_id,
            status=OrderStatus.CREATED,
            created_at=now,
            expires_at=now + ORDER_TTL,
        )

        claimed = self.db.transact_write(
            [
                self.db.transact_update(
                    self.BOOKINGS_TABLE,
                    {"booking_id": booking.booking_id},
                    "SET order_id = :order_id, order_expires_at = :expires_at, "
                    "updated_at = :now",
                    {
                        ":order_id": order.order_id,
                        ":expires_at": _timestamp(order.expires_at),
                        ":now": _timestamp(now),
                        ":pending": BookingStatus.PENDING_PAYMENT.value,
                        ":amount": booking.amount_paise,
                    },
                    {"#status": "status"},
                    condition_expression=(
                        "#status = :pending AND amount_paise = :amount AND "
                        "(attribute_not_exists(order_id) OR order_expires_at < :now)"
                    ),
                ),
                self.db.transact_put(
                    self.ORDERS_TABLE,
                    self._order_to_item(order),
                    condition_expression="attribute_not_exists(order_id)",
                ),
            ]
        )

        if not claimed:
            # Lost a race with another issuer or a webhook transition
            current = self.bookings.get_booking(booking_id)
            self._ensure_payable(current)
            winner = self._active_order(current, dt.datetime.now(dt.UTC))
            if winner is None:
                raise BookingError(
                    ErrorCode.INTERNAL,
                    details={"booking_id": booking_id, "order_id": order.order_id},
                )
            logger.info(
                "Discarding order %s, booking %s already holds %s",
                order.order_id,
                booking_id,
                winner.order_id,
            )
            return self._order_details(winner, current)

        log_payment_operation(
            logger,
            "create_order",
            order_id=order.order_id,
            booking_id=booking_id,
            amount_paise=order.amount,
            status="created",
        )
        return self._order_details(order, booking)

    def get_order(self, order_id: str) -> PaymentOrder | None:
        item = self.db.get_item(self.ORDERS_TABLE, {"order_id": order_id})
        return self._item_to_order(item) if item else None

    def get_orders_for_booking(self, booking_id: str) -> list[PaymentOrder]:
        """All orders ever issued for a booking, newest first."""
        items = self.db.query_by_gsi(
            self.ORDERS_TABLE, self.BOOKING_INDEX, "booking_id", booking_id
        )
        orders = [self._item_to_order(item) for item in items]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def order_status_update(
        self,
        order_id: str,
        status: OrderStatus,
        payment_id: str | None,
        now: dt.datetime,
    ) -> dict[str, Any]:
        """Transaction entry recording the payment outcome on an order."""
        values: dict[str, Any] = {":status": status.value, ":now": _timestamp(now)}
        expression = "SET #status = :status, updated_at = :now"
        if payment_id:
            expression += ", payment_id = :payment_id"
            values[":payment_id"] = payment_id
        return self.db.transact_update(
            self.ORDERS_TABLE,
            {"order_id": order_id},
            expression,
            values,
            {"#status": "status"},
            condition_expression="attribute_exists(order_id)",
        )

    def _ensure_payable(self, booking: Booking) -> None:
        if booking.status is not BookingStatus.PENDING_PAYMENT:
            raise BookingError(
                ErrorCode.BOOKING_NOT_PAYABLE,
                f"Cannot create order for booking with status: {booking.status.value}",
            )

    def _active_order(self, booking: Booking, now: dt.datetime) -> PaymentOrder | None:
        if not booking.has_active_order(now):
            return None
        assert booking.order_id is not None
        return self.get_order(booking.order_id)

    def _order_details(self, order: PaymentOrder, booking: Booking) -> OrderDetails:
        return OrderDetails(
            order_id=order.order_id,
            key_id=order.key_id,
            amount=order.amount,
            currency=order.currency,
            booking_id=booking.booking_id,
            customer_name=booking.name,
            customer_email=booking.email,
            customer_phone=booking.phone,
        )

    def _order_to_item(self, order: PaymentOrder) -> dict[str, Any]:
        item: dict[str, Any] = {
            "order_id": order.order_id,
            "booking_id": order.booking_id,
            "amount": order.amount,
            "currency": order.currency,
            "key_id": order.key_id,
            "receipt": order.receipt,
            "status": order.status.value,
            "created_at": _timestamp(order.created_at),
            "expires_at": _timestamp(order.expires_at),
        }
        if order.payment_id:
            item["payment_id"] = order.payment_id
        return item

    def _item_to_order(self, item: dict[str, Any]) -> PaymentOrder:
        return PaymentOrder(
            order_id=item["order_id"],
            booking_id=item["booking_id"],
            amount=int(item["amount"]),
            currency=item.get("currency", "INR"),
            key_id=item["key_id"],
            receipt=item["receipt"],
            status=OrderStatus(item["status"]),
            payment_id=item.get("payment_id"),
            created_at=dt.datetime.fromisoformat(item["created_at"]),
            expires_at=dt.datetime.fromisoformat(item["expires_at"]),
        )
