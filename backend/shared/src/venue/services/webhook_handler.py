"""Webhook handler for reconciling Razorpay payment events.

Provides business logic for handling webhook deliveries separate from
HTTP routing concerns, so it can be unit tested without HTTP overhead and
reused by the dev confirmation endpoint.

Razorpay delivers at least once and in no particular order. Each delivery
is recorded under its event ID, and the booking transition is conditioned
on the booking still awaiting payment, so repeats and late arrivals never
apply twice or downgrade a terminal booking.
"""

import datetime as dt
import json
import logging
from typing import TYPE_CHECKING, Any

from venue.models import (
    Booking,
    BookingError,
    BookingStatus,
    BookingType,
    ErrorCode,
    OrderStatus,
    PassIssuanceError,
    PaymentOrder,
    StatusChange,
    WebhookEventRecord,
    WebhookOutcome,
    WebhookResult,
)
from venue.utils.logging import log_security_event, log_webhook_event

from .catalog import CatalogService
from .razorpay_service import RazorpayConfigurationError, WebhookSignatureError

if TYPE_CHECKING:
    from .booking_service import BookingService
    from .dynamodb import DynamoDBService
    from .order_service import OrderService
    from .pass_service import PassService
    from .razorpay_service import RazorpayService

logger = logging.getLogger(__name__)

SUCCESS_EVENTS = frozenset({"payment.captured", "order.paid"})
FAILURE_EVENTS = frozenset({"payment.failed"})


class WebhookHandler:
    """Handler for processing Razorpay webhook events."""

    WEBHOOK_EVENTS_TABLE = "webhook-events"
    BOOKINGS_TABLE = "bookings"

    def __init__(
        self,
        db: "DynamoDBService",
        gateway: "RazorpayService",
        bookings: "BookingService",
        orders: "OrderService",
        passes: "PassService",
        catalog: CatalogService | None = None,
    ) -> None:
        self._db = db
        self._gateway = gateway
        self._bookings = bookings
        self._orders = orders
        self._passes = passes
        self._catalog = catalog or CatalogService(db)

    def handle(
        self,
        payload: bytes,
        signature: str | None,
        event_id_header: str | None = None,
    ) -> WebhookOutcome:
        """Verify and process a raw webhook delivery.

        Args:
            payload: Raw request body, exactly as received
            signature: X-Razorpay-Signature header value
            event_id_header: X-Razorpay-Event-Id header value, if sent

        Returns:
            What was done with the delivery

        Raises:
            BookingError: INVALID_WEBHOOK_SIGNATURE if the signature is missing
                or wrong, CONFIGURATION_ERROR if no webhook secret is set,
                VALIDATION_FAILED for a body that is not a JSON object.
        """
        try:
            self._gateway.verify_webhook_signature(payload, signature)
        except RazorpayConfigurationError as e:
            logger.error("Webhook secret not configured: %s", e)
            raise BookingError(ErrorCode.CONFIGURATION_ERROR) from e
        except WebhookSignatureError as e:
            log_security_event(
                logger,
                "INVALID_SIGNATURE",
                endpoint="razorpay_webhook",
                reason=str(e),
                signature_present=bool(signature),
            )
            raise BookingError(ErrorCode.INVALID_WEBHOOK_SIGNATURE) from e

        try:
            event = json.loads(payload)
        except ValueError as e:
            raise BookingError(
                ErrorCode.VALIDATION_FAILED, "Invalid webhook payload"
            ) from e
        if not isinstance(event, dict):
            raise BookingError(ErrorCode.VALIDATION_FAILED, "Invalid webhook payload")

        payload_hash = self._gateway.compute_payload_hash(payload)
        body_event_id = event.get("event_id")
        event_id = (
            event_id_header
            or (str(body_event_id) if body_event_id else None)
            or f"sha256:{payload_hash}"
        )
        return self.process_event(event, event_id, payload_hash)

    def is_event_already_processed(self, event_id: str) -> bool:
        existing = self._db.get_item(self.WEBHOOK_EVENTS_TABLE, {"event_id": event_id})
        return existing is not None

    def log_event(self, record: WebhookEventRecord) -> bool:
        """Persist the event record for idempotency and audit.

        Returns:
            False if a record with this event_id already exists
        """
        item: dict[str, Any] = {
            "event_id": record.event_id,
            "event_type": record.event_type,
            "processed_at": record.processed_at.isoformat(),
            "payload_hash": record.payload_hash,
            "processing_result": record.processing_result.value,
        }
        for field in ("order_id", "booking_id", "payment_id", "payment_status", "error_message"):
            value = getattr(record, field)
            if value:
                item[field] = value

        stored = self._db.put_item(
            self.WEBHOOK_EVENTS_TABLE,
            item,
            condition_expression="attribute_not_exists(event_id)",
        )
        if not stored:
            logger.warning("Webhook event %s recorded concurrently", record.event_id)
        return stored

    def process_event(
        self, event: dict[str, Any], event_id: str, payload_hash: str
    ) -> WebhookOutcome:
        """Process a verified, parsed webhook event.

        Store failures propagate so the gateway redelivers.
        """
        event_type = str(event.get("event", ""))

        if self.is_event_already_processed(event_id):
            log_webhook_event(logger, event_type, event_id, result=WebhookResult.DUPLICATE.value)
            return WebhookOutcome(
                event_id=event_id,
                event_type=event_type,
                processing_result=WebhookResult.DUPLICATE,
                message="Event already processed",
            )

        payload = event.get("payload") or {}
        payment = (payload.get("payment") or {}).get("entity") or {}
        order_entity = (payload.get("order") or {}).get("entity") or {}
        order_id = payment.get("order_id") or order_entity.get("id")
        payment_id = payment.get("id")
        payment_status = payment.get("status")

        record = WebhookEventRecord(
            event_id=event_id,
            event_type=event_type,
            processed_at=dt.datetime.now(dt.UTC),
            payload_hash=payload_hash,
            order_id=order_id,
            payment_id=payment_id,
            payment_status=payment_status,
        )

        if event_type not in SUCCESS_EVENTS | FAILURE_EVENTS:
            return self._finish(
                record, WebhookResult.SKIPPED, message=f"Event type {event_type!r} not handled"
            )

        order = self._orders.get_order(order_id) if order_id else None
        booking = self._bookings.find_booking(order.booking_id) if order else None
        if order is None or booking is None:
            return self._finish(
                record, WebhookResult.UNKNOWN_ORDER, message=f"No booking for order {order_id}"
            )
        record.booking_id = booking.booking_id

        mismatch = self._integrity_problem(order, payment, order_entity)
        if mismatch:
            log_security_event(
                logger,
                "SUSPICIOUS_REQUEST",
                endpoint="razorpay_webhook",
                reason="amount_mismatch",
                event_id=event_id,
                order_id=order.order_id,
                detail=mismatch,
            )
            return self._finish(record, WebhookResult.AMOUNT_MISMATCH, message=mismatch)

        if event_type in SUCCESS_EVENTS:
            return self._apply_success(
                record, booking, order, payment_id, reason="Payment successful"
            )
        return self._apply_failure(record, booking, order, payment_id)

    def apply_payment_captured(self, booking_id: str) -> WebhookOutcome:
        """Simulate a captured payment for a booking (dev only).

        Raises:
            BookingError: BOOKING_NOT_FOUND, BOOKING_NOT_PAYABLE if not pending,
                VALIDATION_FAILED if no order was created yet.
        """
        booking = self._bookings.get_booking(booking_id)
        if booking.status is not BookingStatus.PENDING_PAYMENT:
            raise BookingError(
                ErrorCode.BOOKING_NOT_PAYABLE,
                f"Booking status is {booking.status.value}, not PENDING_PAYMENT",
            )
        order = self._orders.get_order(booking.order_id) if booking.order_id else None
        if order is None:
            raise BookingError(
                ErrorCode.VALIDATION_FAILED, "No payment record found. Create order first."
            )

        now = dt.datetime.now(dt.UTC)
        stamp = int(now.timestamp() * 1000)
        record = WebhookEventRecord(
            event_id=f"evt_dev_{stamp}",
            event_type="payment.captured",
            processed_at=now,
            payload_hash="",
            order_id=order.order_id,
            booking_id=booking.booking_id,
            payment_id=f"pay_dev_{stamp}",
            payment_status="captured",
        )
        return self._apply_success(
            record, booking, order, record.payment_id, reason="DEV MODE: Payment simulated"
        )

    def _integrity_problem(
        self,
        order: PaymentOrder,
        payment: dict[str, Any],
        order_entity: dict[str, Any],
    ) -> str | None:
        source = payment or order_entity
        amount = source.get("amount")
        currency = source.get("currency")
        if amount is not None and int(amount) != order.amount:
            return f"amount {amount} does not match order amount {order.amount}"
        if currency is not None and currency != order.currency:
            return f"currency {currency} does not match order currency {order.currency}"
        return None

    def _transition(
        self,
        booking: Booking,
        order: PaymentOrder,
        target: BookingStatus,
        payment_id: str | None,
        reason: str,
    ) -> bool:
        """Move a pending booking to a terminal status in one transaction."""
        now = dt.datetime.now(dt.UTC)
        order_status = OrderStatus.PAID if target is BookingStatus.CONFIRMED else OrderStatus.FAILED
        return self._db.transact_write(
            [
                self._db.transact_update(
                    self.BOOKINGS_TABLE,
                    {"booking_id": booking.booking_id},
                    "SET #status = :target, updated_at = :now",
                    {
                        ":target": target.value,
                        ":pending": BookingStatus.PENDING_PAYMENT.value,
                        ":now": now.isoformat(),
                    },
                    {"#status": "status"},
                    condition_expression="#status = :pending",
                ),
                self._orders.order_status_update(order.order_id, order_status, payment_id, now),
                self._bookings.status_change_put(
                    StatusChange(
                        booking_id=booking.booking_id,
                        from_status=BookingStatus.PENDING_PAYMENT.value,
                        to_status=target,
                        reason=reason,
                        changed_at=now,
                    )
                ),
            ]
        )

    def _ensure_settled(self, current: Booking, record: WebhookEventRecord) -> None:
        """Refuse to acknowledge a delivery whose transition did not apply.

        A booking still awaiting payment after a failed transition means the
        write was lost, not that another delivery won. The event is left
        unrecorded so the gateway redelivers it.
        """
        if current.status is BookingStatus.PENDING_PAYMENT:
            logger.error(
                "Transition for booking %s did not apply (event %s), awaiting redelivery",
                current.booking_id,
                record.event_id,
            )
            raise BookingError(
                ErrorCode.INTERNAL,
                details={"booking_id": current.booking_id, "event_id": record.event_id},
            )

    def _apply_success(
        self,
        record: WebhookEventRecord,
        booking: Booking,
        order: PaymentOrder,
        payment_id: str | None,
        reason: str,
    ) -> WebhookOutcome:
        if not self._transition(booking, order, BookingStatus.CONFIRMED, payment_id, reason):
            current = self._bookings.find_booking(booking.booking_id) or booking
            self._ensure_settled(current, record)
            if (
                current.status is BookingStatus.CONFIRMED
                and current.type is BookingType.EVENT
                and not current.pass_id
            ):
                logger.info(
                    "Booking %s confirmed without a pass, retrying issuance",
                    current.booking_id,
                )
                return self._issue_pass(record, current)
            return self._finish(
                record,
                WebhookResult.IGNORED,
                message=f"Booking already {current.status.value}",
            )

        logger.info("Booking %s confirmed via webhook", booking.booking_id)
        confirmed = booking.model_copy(update={"status": BookingStatus.CONFIRMED})

        if confirmed.type is BookingType.CLASS_SESSION and confirmed.class_session_id:
            if not self._catalog.reserve_class_spot(confirmed.class_session_id):
                # Payment is already taken; the booking stays confirmed
                logger.error(
                    "Class session %s at capacity after confirming booking %s",
                    confirmed.class_session_id,
                    confirmed.booking_id,
                )
        elif confirmed.type is BookingType.EVENT:
            return self._issue_pass(record, confirmed)

        return self._finish(record, WebhookResult.SUCCESS)

    def _apply_failure(
        self,
        record: WebhookEventRecord,
        booking: Booking,
        order: PaymentOrder,
        payment_id: str | None,
    ) -> WebhookOutcome:
        if not self._transition(booking, order, BookingStatus.FAILED, payment_id, "Payment failed"):
            current = self._bookings.find_booking(booking.booking_id) or booking
            self._ensure_settled(current, record)
            return self._finish(
                record,
                WebhookResult.IGNORED,
                message=f"Booking already {current.status.value}",
            )
        logger.info("Booking %s marked failed via webhook", booking.booking_id)
        return self._finish(record, WebhookResult.SUCCESS)

    def _issue_pass(self, record: WebhookEventRecord, booking: Booking) -> WebhookOutcome:
        try:
            event_pass = self._passes.issue_pass(booking)
        except PassIssuanceError as e:
            logger.critical(
                "ALERT: pass issuance exhausted for confirmed booking %s after %d attempts",
                e.booking_id,
                e.attempts,
            )
            return self._finish(record, WebhookResult.PASS_ISSUE_FAILED, message=e.message)
        return self._finish(record, WebhookResult.SUCCESS, pass_id=event_pass.pass_id)

    def _finish(
        self,
        record: WebhookEventRecord,
        result: WebhookResult,
        message: str | None = None,
        pass_id: str | None = None,
    ) -> WebhookOutcome:
        record.processing_result = result
        if result is not WebhookResult.SUCCESS:
            record.error_message = message
        self.log_event(record)
        log_webhook_event(
            logger,
            record.event_type,
            record.event_id,
            booking_id=record.booking_id,
            order_id=record.order_id,
            result=result.value,
            error=message if result is not WebhookResult.SUCCESS else None,
        )
        return WebhookOutcome(
            event_id=record.event_id,
            event_type=record.event_type,
            processing_result=result,
            booking_id=record.booking_id,
            pass_id=pass_id,
            message=message,
        )
