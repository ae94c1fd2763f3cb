"""Booking creation, lookup and status history.

The amount a customer pays is fixed here, from the catalog price, and is
never taken from client input.
"""

import datetime as dt
import logging
import uuid
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Key

from venue.models import (
    Booking,
    BookingCreate,
    BookingError,
    BookingStatus,
    BookingType,
    ErrorCode,
    PassIssuanceError,
    StatusChange,
)

from .catalog import CatalogService

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .pass_service import PassService

logger = logging.getLogger(__name__)


def is_valid_booking_id(booking_id: str) -> bool:
    """Booking IDs are UUID4 strings."""
    try:
        return uuid.UUID(booking_id).version == 4
    except ValueError:
        return False


class BookingService:
    """Service for creating and reading bookings."""

    BOOKINGS_TABLE = "bookings"
    STATUS_HISTORY_TABLE = "status-history"

    def __init__(
        self,
        db: "DynamoDBService",
        catalog: CatalogService | None = None,
        pass_service: "PassService | None" = None,
    ) -> None:
        """Initialize booking service.

        Args:
            db: DynamoDB service instance
            catalog: Catalog reader (defaults to one on the same store)
            pass_service: Used to issue passes for free event bookings
        """
        self.db = db
        self.catalog = catalog or CatalogService(db)
        self.pass_service = pass_service

    def create_booking(self, request: BookingCreate) -> Booking:
        """Create a booking priced from the catalog.

        Paid class and event bookings start in PENDING_PAYMENT. Space
        requests and free catalog items are confirmed immediately.

        Raises:
            BookingError: CATALOG_ITEM_NOT_FOUND if the referenced class or
                event does not exist, ITEM_UNAVAILABLE if it is inactive or full.
        """
        amount_paise = 0

        if request.type is BookingType.CLASS_SESSION:
            assert request.class_session_id is not None
            session = self.catalog.get_class_session(request.class_session_id)
            if session is None:
                raise BookingError(
                    ErrorCode.CATALOG_ITEM_NOT_FOUND, "Class session not found"
                )
            if not session.active:
                raise BookingError(
                    ErrorCode.ITEM_UNAVAILABLE, "This class is no longer available"
                )
            if session.spots_left <= 0:
                raise BookingError(
                    ErrorCode.ITEM_UNAVAILABLE, "This class is fully booked"
                )
            amount_paise = session.price_paise
        elif request.type is BookingType.EVENT:
            assert request.event_id is not None
            event = self.catalog.get_event(request.event_id)
            if event is None:
                raise BookingError(ErrorCode.CATALOG_ITEM_NOT_FOUND, "Event not found")
            if not event.active:
                raise BookingError(
                    ErrorCode.ITEM_UNAVAILABLE, "This event is no longer available"
                )
            amount_paise = event.price_paise

        now = dt.datetime.now(dt.UTC)
        status = (
            BookingStatus.PENDING_PAYMENT
            if request.type is not BookingType.SPACE_REQUEST and amount_paise > 0
            else BookingStatus.CONFIRMED
        )

        booking = Booking(
            booking_id=str(uuid.uuid4()),
            type=request.type,
            status=status,
            name=request.name,
            phone=request.phone,
            email=str(request.email),
            class_session_id=request.class_session_id,
            event_id=request.event_id,
            preferred_slots=request.preferred_slots,
            notes=request.notes,
            purpose=request.purpose,
            amount_paise=amount_paise,
            created_at=now,
            updated_at=now,
        )

        self.db.put_item(
            self.BOOKINGS_TABLE,
            self._booking_to_item(booking),
            condition_expression="attribute_not_exists(booking_id)",
        )
        self.record_status_change(
            StatusChange(
                booking_id=booking.booking_id,
                from_status="NONE",
                to_status=status,
                reason="Booking created",
                changed_at=now,
            )
        )
        logger.info(
            "Booking %s created: type=%s status=%s amount=%d",
            booking.booking_id,
            booking.type.value,
            booking.status.value,
            amount_paise,
        )

        if status is BookingStatus.CONFIRMED and booking.type is not BookingType.SPACE_REQUEST:
            booking = self._confirm_free_booking(booking)

        return booking

    def _confirm_free_booking(self, booking: Booking) -> Booking:
        if booking.type is BookingType.CLASS_SESSION:
            assert booking.class_session_id is not None
            if not self.catalog.reserve_class_spot(booking.class_session_id):
                # The booking is already confirmed; capacity is reconciled by hand
                logger.error(
                    "Class session %s at capacity after confirming free booking %s",
                    booking.class_session_id,
                    booking.booking_id,
                )
            return booking
        if self.pass_service is None:
            return booking
        try:
            event_pass = self.pass_service.issue_pass(booking)
        except PassIssuanceError as e:
            logger.critical(
                "ALERT: pass issuance exhausted for free booking %s after %d attempts",
                e.booking_id,
                e.attempts,
            )
            return booking
        return booking.model_copy(update={"pass_id": event_pass.pass_id})

    def find_booking(self, booking_id: str) -> Booking | None:
        item = self.db.get_item(self.BOOKINGS_TABLE, {"booking_id": booking_id})
        return self._item_to_booking(item) if item else None

    def get_booking(self, booking_id: str) -> Booking:
        """Get a booking by ID.

        Raises:
            BookingError: VALIDATION_FAILED for a malformed ID,
                BOOKING_NOT_FOUND if it does not exist.
        """
        if not is_valid_booking_id(booking_id):
            raise BookingError(ErrorCode.VALIDATION_FAILED, "Invalid bookingId format")
        booking = self.find_booking(booking_id)
        if booking is None:
            raise BookingError(ErrorCode.BOOKING_NOT_FOUND)
        return booking

    def record_status_change(self, change: StatusChange) -> None:
        self.db.put_item(self.STATUS_HISTORY_TABLE, self._status_change_to_item(change))

    def status_change_put(self, change: StatusChange) -> dict[str, Any]:
        """Transaction entry writing a status history record."""
        return self.db.transact_put(
            self.STATUS_HISTORY_TABLE, self._status_change_to_item(change)
        )

    def get_status_history(self, booking_id: str) -> list[StatusChange]:
        """Status changes for a booking, oldest first."""
        items = self.db.query(
            self.STATUS_HISTORY_TABLE, Key("booking_id").eq(booking_id)
        )
        return [
            StatusChange(
                booking_id=item["booking_id"],
                from_status=item["from_status"],
                to_status=BookingStatus(item["to_status"]),
                changed_by=item.get("changed_by", "SYSTEM"),
                reason=item["reason"],
                changed_at=dt.datetime.fromisoformat(item["changed_at"]),
            )
            for item in items
        ]

    def _status_change_to_item(self, change: StatusChange) -> dict[str, Any]:
        return {
            "booking_id": change.booking_id,
            "changed_at": change.changed_at.isoformat(),
            "from_status": change.from_status,
            "to_status": change.to_status.value,
            "changed_by": change.changed_by,
            "reason": change.reason,
        }

    def _booking_to_item(self, booking: Booking) -> dict[str, Any]:
        """Convert Booking model to DynamoDB item."""
        item: dict[str, Any] = {
            "booking_id": booking.booking_id,
            "type": booking.type.value,
            "status": booking.status.value,
            "name": booking.name,
            "phone": booking.phone,
            "email": booking.email,
            "amount_paise": booking.amount_paise,
            "currency": booking.currency,
            "created_at": booking.created_at.isoformat(),
            "updated_at": booking.updated_at.isoformat(),
        }
        if booking.class_session_id:
            item["class_session_id"] = booking.class_session_id
        if booking.event_id:
            item["event_id"] = booking.event_id
        if booking.preferred_slots:
            item["preferred_slots"] = booking.preferred_slots
        if booking.notes:
            item["notes"] = booking.notes
        if booking.purpose:
            item["purpose"] = booking.purpose
        if booking.order_id:
            item["order_id"] = booking.order_id
        if booking.order_expires_at:
            item["order_expires_at"] = booking.order_expires_at.isoformat()
        if booking.pass_id:
            item["pass_id"] = booking.pass_id
        return item

    def _item_to_booking(self, item: dict[str, Any]) -> Booking:
        """Convert DynamoDB item to Booking model."""
        return Booking(
            booking_id=item["booking_id"],
            type=BookingType(item["type"]),
            status=BookingStatus(item["status"]),
            name=item["name"],
            phone=item["phone"],
            email=item["email"],
            class_session_id=item.get("class_session_id"),
            event_id=item.get("event_id"),
            preferred_slots=(
                list(item["preferred_slots"]) if item.get("preferred_slots") else None
            ),
            notes=item.get("notes"),
            purpose=item.get("purpose"),
            amount_paise=int(item["amount_paise"]),
            currency=item.get("currency", "INR"),
            order_id=item.get("order_id"),
            order_expires_at=(
                dt.datetime.fromisoformat(item["order_expires_at"])
                if item.get("order_expires_at")
                else None
            ),
            pass_id=item.get("pass_id"),
            created_at=dt.datetime.fromisoformat(item["created_at"]),
            updated_at=dt.datetime.fromisoformat(item["updated_at"]),
        )
