"""Catalog lookups for class sessions and events."""

import datetime as dt
import logging
from typing import TYPE_CHECKING, Any

from venue.models import ClassSession, Event

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str | None) -> dt.datetime | None:
    return dt.datetime.fromisoformat(value) if value else None


class CatalogService:
    """Read access to class sessions and events.

    The only write is ``reserve_class_spot``, guarded by capacity.
    """

    CLASS_SESSIONS_TABLE = "class-sessions"
    EVENTS_TABLE = "events"

    def __init__(self, db: "DynamoDBService") -> None:
        self.db = db

    def get_class_session(self, class_session_id: str) -> ClassSession | None:
        item = self.db.get_item(
            self.CLASS_SESSIONS_TABLE, {"class_session_id": class_session_id}
        )
        return self._item_to_class_session(item) if item else None

    def get_event(self, event_id: str) -> Event | None:
        item = self.db.get_item(self.EVENTS_TABLE, {"event_id": event_id})
        return self._item_to_event(item) if item else None

    def reserve_class_spot(self, class_session_id: str) -> bool:
        """Increment ``spots_booked`` if the session still has room.

        Returns:
            True if a spot was taken, False if the session is full or missing.
        """
        result = self.db.update_item(
            self.CLASS_SESSIONS_TABLE,
            {"class_session_id": class_session_id},
            "SET spots_booked = if_not_exists(spots_booked, :zero) + :one",
            {":zero": 0, ":one": 1},
            condition_expression=(
                "attribute_exists(class_session_id) AND "
                "(attribute_not_exists(spots_booked) OR spots_booked < capacity)"
            ),
        )
        if result is None:
            logger.warning("Class session %s is full or missing", class_session_id)
            return False
        return True

    def _item_to_class_session(self, item: dict[str, Any]) -> ClassSession:
        return ClassSession(
            class_session_id=item["class_session_id"],
            title=item["title"],
            price_paise=int(item["price_paise"]),
            capacity=int(item["capacity"]),
            spots_booked=int(item.get("spots_booked", 0)),
            active=bool(item.get("active", True)),
            starts_at=_parse_timestamp(item.get("starts_at")),
        )

    def _item_to_event(self, item: dict[str, Any]) -> Event:
        return Event(
            event_id=item["event_id"],
            title=item["title"],
            price_paise=int(item["price_paise"]),
            active=bool(item.get("active", True)),
            venue=item.get("venue"),
            starts_at=_parse_timestamp(item.get("starts_at")),
        )
