"""Enumeration types for venue booking data models."""

from enum import Enum


class BookingType(str, Enum):
    """What a booking reserves."""

    CLASS_SESSION = "CLASS_SESSION"
    EVENT = "EVENT"
    SPACE_REQUEST = "SPACE_REQUEST"


class BookingStatus(str, Enum):
    """Status of a booking through its payment lifecycle."""

    PENDING_PAYMENT = "PENDING_PAYMENT"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """True once no further transition can happen."""
        return self is not BookingStatus.PENDING_PAYMENT


class OrderStatus(str, Enum):
    """Status of a payment gateway order."""

    CREATED = "CREATED"
    PAID = "PAID"
    FAILED = "FAILED"


class CheckInStatus(str, Enum):
    """Admission state of an event pass."""

    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    CHECKED_IN = "CHECKED_IN"


class WebhookResult(str, Enum):
    """Outcome recorded for a processed webhook delivery."""

    SUCCESS = "success"
    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    IGNORED = "ignored"  # booking already terminal
    UNKNOWN_ORDER = "unknown_order"
    AMOUNT_MISMATCH = "amount_mismatch"
    PASS_ISSUE_FAILED = "pass_issue_failed"
