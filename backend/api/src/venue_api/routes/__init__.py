"""API routes package.

Routers are organized by domain:

- bookings: Booking creation and status lookup
- orders: Razorpay order issuance
- webhooks: Razorpay payment events
- passes: Pass verification at the entrance
- dev: Simulated payment confirmation (development only)

All routers are registered in main.py with /api prefix.
"""

from venue_api.routes.bookings import router as bookings_router
from venue_api.routes.dev import router as dev_router
from venue_api.routes.orders import router as orders_router
from venue_api.routes.passes import router as passes_router
from venue_api.routes.webhooks import router as webhooks_router

__all__ = [
    "bookings_router",
    "dev_router",
    "orders_router",
    "passes_router",
    "webhooks_router",
]
