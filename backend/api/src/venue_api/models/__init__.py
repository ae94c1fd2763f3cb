"""API-specific request/response models.

Domain models (Booking, PaymentOrder, EventPass...) live in venue.models;
these wrap them in the response envelope with camelCase keys.

Modules:
- common: Envelope base and validation message formatting
- bookings: Booking creation and lookup payloads
- orders: Order issuance request and checkout parameters
- passes: Pass verification payload
- webhooks: Webhook acknowledgement
"""

__all__: list[str] = []
