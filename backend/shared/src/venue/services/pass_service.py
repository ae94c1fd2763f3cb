"""Event pass issuance, verification and check-in."""

import datetime as dt
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from venue.models import (
    Booking,
    BookingError,
    BookingStatus,
    CheckInResult,
    CheckInStatus,
    ErrorCode,
    EventPass,
    PassIssuanceError,
    PassVerification,
)

from .catalog import CatalogService
from .pass_id import generate_pass_id, normalize_pass_id

if TYPE_CHECKING:
    from .booking_service import BookingService
    from .dynamodb import DynamoDBService

logger = logging.getLogger(__name__)


class PassService:
    """Service for event passes.

    A booking owns at most one pass: inserting the pass and setting the
    booking's ``pass_id`` happen in the same transaction, and both writes
    are conditioned on the attribute not existing yet.
    """

    PASSES_TABLE = "passes"
    BOOKINGS_TABLE = "bookings"
    BOOKING_INDEX = "booking-index"
    MAX_ATTEMPTS = 5

    def __init__(
        self,
        db: "DynamoDBService",
        bookings: "BookingService",
        catalog: CatalogService | None = None,
        id_generator: Callable[[], str] = generate_pass_id,
    ) -> None:
        """Initialize pass service.

        Args:
            db: DynamoDB service instance
            bookings: Booking reader
            catalog: Catalog reader for event details
            id_generator: Pass identifier source
        """
        self.db = db
        self.bookings = bookings
        self.catalog = catalog or CatalogService(db)
        self._generate_id = id_generator

    def issue_pass(self, booking: Booking) -> EventPass:
        """Issue the pass for a confirmed event booking.

        Idempotent: a booking that already owns a pass gets that pass back.

        Raises:
            PassIssuanceError: If no unique identifier was claimed within
                MAX_ATTEMPTS tries.
        """
        if booking.event_id is None:
            raise BookingError(
                ErrorCode.VALIDATION_FAILED,
                "Passes are only issued for event bookings",
                details={"booking_id": booking.booking_id},
            )

        if booking.pass_id:
            existing = self.get_pass(booking.pass_id)
            if existing is not None:
                return existing

        for attempt in range(1, self.MAX_ATTEMPTS + 1):
            now = dt.datetime.now(dt.UTC)
            event_pass = EventPass(
                pass_id=self._generate_id(),
                booking_id=booking.booking_id,
                event_id=booking.event_id,
                created_at=now,
            )

            issued = self.db.transact_write(
                [
                    self.db.transact_put(
                        self.PASSES_TABLE,
                        self._pass_to_item(event_pass),
                        condition_expression="attribute_not_exists(pass_id)",
                    ),
                    self.db.transact_update(
                        self.BOOKINGS_TABLE,
                        {"booking_id": booking.booking_id},
                        "SET pass_id = :pass_id, updated_at = :now",
                        {":pass_id": event_pass.pass_id, ":now": now.isoformat()},
                        condition_expression=(
                            "attribute_exists(booking_id) AND attribute_not_exists(pass_id)"
                        ),
                    ),
                ]
            )
            if issued:
                logger.info(
                    "Pass %s issued for booking %s", event_pass.pass_id, booking.booking_id
                )
                return event_pass

            # Either another worker issued the pass or the identifier collided
            current = self.bookings.find_booking(booking.booking_id)
            if current is not None and current.pass_id:
                owned = self.get_pass(current.pass_id)
                if owned is not None:
                    return owned
            logger.warning(
                "Pass identifier collision for booking %s (attempt %d/%d)",
                booking.booking_id,
                attempt,
                self.MAX_ATTEMPTS,
            )

        raise PassIssuanceError(booking.booking_id, self.MAX_ATTEMPTS)

    def get_pass(self, pass_id: str) -> EventPass | None:
        item = self.db.get_item(self.PASSES_TABLE, {"pass_id": pass_id})
        return self._item_to_pass(item) if item else None

    def get_pass_for_booking(self, booking_id: str) -> EventPass | None:
        items = self.db.query_by_gsi(
            self.PASSES_TABLE, self.BOOKING_INDEX, "booking_id", booking_id
        )
        return self._item_to_pass(items[0]) if items else None

    def verify_pass(self, pass_id: str | None) -> PassVerification:
        """Look up a pass presented at the entrance.

        Read-only. An unknown identifier is reported as ``valid=False``.

        Raises:
            BookingError: VALIDATION_FAILED if no identifier was given.
        """
        normalized = normalize_pass_id(pass_id or "")
        if not normalized:
            raise BookingError(ErrorCode.VALIDATION_FAILED, "passId is required")

        event_pass = self.get_pass(normalized)
        if event_pass is None:
            return PassVerification(valid=False)

        booking = self.bookings.find_booking(event_pass.booking_id)
        return PassVerification(
            valid=True,
            event_pass=event_pass,
            event=self.catalog.get_event(event_pass.event_id),
            attendee_name=booking.name if booking else None,
            booking_status=booking.status if booking else None,
        )

    def check_in(self, pass_id: str, staff_id: str) -> CheckInResult:
        """Admit a pass holder. Check-in is one-way.

        Raises:
            BookingError: NOT_FOUND for an unknown pass, VALIDATION_FAILED if
                the booking is not confirmed.
        """
        normalized = normalize_pass_id(pass_id)
        event_pass = self.get_pass(normalized)
        if event_pass is None:
            raise BookingError(ErrorCode.NOT_FOUND, "Pass not found")

        booking = self.bookings.find_booking(event_pass.booking_id)
        if booking is None or booking.status is not BookingStatus.CONFIRMED:
            status = booking.status.value if booking else "MISSING"
            raise BookingError(
                ErrorCode.VALIDATION_FAILED,
                f"Cannot check in - booking status is {status}",
            )

        if event_pass.check_in_status is CheckInStatus.CHECKED_IN:
            return CheckInResult(
                event_pass=event_pass,
                attendee_name=booking.name,
                already_checked_in=True,
            )

        now = dt.datetime.now(dt.UTC)
        updated = self.db.update_item(
            self.PASSES_TABLE,
            {"pass_id": normalized},
            "SET check_in_status = :checked_in, check_in_time = :now, "
            "checked_in_by = :staff_id",
            {
                ":checked_in": CheckInStatus.CHECKED_IN.value,
                ":not_checked_in": CheckInStatus.NOT_CHECKED_IN.value,
                ":now": now.isoformat(),
                ":staff_id": staff_id,
            },
            condition_expression="check_in_status = :not_checked_in",
        )
        if updated is None:
            # Checked in concurrently by another scanner
            current = self.get_pass(normalized)
            assert current is not None
            return CheckInResult(
                event_pass=current, attendee_name=booking.name, already_checked_in=True
            )

        logger.info("Pass %s checked in by %s", normalized, staff_id)
        return CheckInResult(
            event_pass=self._item_to_pass(updated),
            attendee_name=booking.name,
            already_checked_in=False,
        )

    def _pass_to_item(self, event_pass: EventPass) -> dict[str, Any]:
        item: dict[str, Any] = {
            "pass_id": event_pass.pass_id,
            "booking_id": event_pass.booking_id,
            "event_id": event_pass.event_id,
            "check_in_status": event_pass.check_in_status.value,
            "created_at": event_pass.created_at.isoformat(),
        }
        if event_pass.check_in_time:
            item["check_in_time"] = event_pass.check_in_time.isoformat()
        if event_pass.checked_in_by:
            item["checked_in_by"] = event_pass.checked_in_by
        return item

    def _item_to_pass(self, item: dict[str, Any]) -> EventPass:
        return EventPass(
            pass_id=item["pass_id"],
            booking_id=item["booking_id"],
            event_id=item["event_id"],
            check_in_status=CheckInStatus(item["check_in_status"]),
            check_in_time=(
                dt.datetime.fromisoformat(item["check_in_time"])
                if item.get("check_in_time")
                else None
            ),
            checked_in_by=item.get("checked_in_by"),
            created_at=dt.datetime.fromisoformat(item["created_at"]),
        )
