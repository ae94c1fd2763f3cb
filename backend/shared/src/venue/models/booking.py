"""Booking model and creation request."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .enums import BookingStatus, BookingType

PHONE_PATTERN = re.compile(r"^\+91\d{10}$")


def normalize_phone(value: str) -> str:
    """Normalize an Indian mobile number to +91XXXXXXXXXX."""
    digits = re.sub(r"\D", "", value)
    if digits.startswith("91") and len(digits) == 12:
        return f"+{digits}"
    if len(digits) == 10:
        return f"+91{digits}"
    return value


class Booking(BaseModel):
    """A customer's reservation tracked through its payment lifecycle.

    Amounts are stored in paise (INR minor units).
    """

    model_config = ConfigDict(strict=True)

    booking_id: str = Field(..., description="Unique booking ID (UUID)")
    type: BookingType = Field(..., description="What is being booked")
    status: BookingStatus = Field(..., description="Lifecycle status")
    name: str = Field(..., description="Customer name")
    phone: str = Field(..., description="Customer phone (+91XXXXXXXXXX)")
    email: str = Field(..., description="Customer email")
    class_session_id: str | None = Field(
        default=None, description="Class session reference (CLASS_SESSION only)"
    )
    event_id: str | None = Field(
        default=None, description="Event reference (EVENT only)"
    )
    preferred_slots: list[str] | None = Field(
        default=None, description="Requested slots (SPACE_REQUEST only)"
    )
    notes: str | None = None
    purpose: str | None = None
    amount_paise: int = Field(..., ge=0, description="Amount to pay in paise")
    currency: str = Field(default="INR", description="Currency code")
    order_id: str | None = Field(
        default=None, description="Active gateway order for this booking"
    )
    order_expires_at: datetime | None = Field(
        default=None, description="When the active order stops being reused"
    )
    pass_id: str | None = Field(
        default=None, description="Issued event pass (EVENT only)"
    )
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @property
    def requires_payment(self) -> bool:
        return self.type is not BookingType.SPACE_REQUEST and self.amount_paise > 0

    def has_active_order(self, now: datetime) -> bool:
        return (
            self.order_id is not None
            and self.order_expires_at is not None
            and self.order_expires_at > now
        )


class BookingCreate(BaseModel):
    """Data required to create a booking.

    Accepts camelCase keys (``classSessionId``) as sent by the web client.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "examples": [
                {
                    "type": "EVENT",
                    "name": "Asha Rao",
                    "phone": "9876543210",
                    "email": "asha@example.com",
                    "eventId": "6f1c2b8e-3f0a-4d8e-9a55-2d1b7c0e4a11",
                }
            ]
        },
    )

    type: BookingType
    name: str = Field(..., min_length=2, max_length=100)
    phone: str
    email: EmailStr
    class_session_id: str | None = None
    event_id: str | None = None
    preferred_slots: list[str] | None = Field(default=None, max_length=10)
    notes: str | None = Field(default=None, max_length=500)
    purpose: str | None = Field(default=None, max_length=500)

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        phone = normalize_phone(value)
        if not PHONE_PATTERN.match(phone):
            raise ValueError("Invalid phone number")
        return phone

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("preferred_slots")
    @classmethod
    def _limit_slot_length(cls, value: list[str] | None) -> list[str] | None:
        if value and any(len(slot) > 100 for slot in value):
            raise ValueError("Preferred slot descriptions must be at most 100 characters")
        return value

    @model_validator(mode="after")
    def _check_references(self) -> "BookingCreate":
        if self.type is BookingType.CLASS_SESSION:
            if not self.class_session_id:
                raise ValueError("classSessionId is required for CLASS_SESSION booking")
            if self.event_id:
                raise ValueError("eventId is not allowed for CLASS_SESSION booking")
        elif self.type is BookingType.EVENT:
            if not self.event_id:
                raise ValueError("eventId is required for EVENT booking")
            if self.class_session_id:
                raise ValueError("classSessionId is not allowed for EVENT booking")
        elif not self.preferred_slots:
            raise ValueError("preferredSlots is required for SPACE_REQUEST booking")
        return self


class StatusChange(BaseModel):
    """Audit entry for a booking status change."""

    model_config = ConfigDict(strict=True)

    booking_id: str
    from_status: str = Field(..., description="Previous status, NONE on creation")
    to_status: BookingStatus
    changed_by: str = "SYSTEM"
    reason: str
    changed_at: datetime
