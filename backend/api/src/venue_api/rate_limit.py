"""Per-client rate limits for the public endpoints.

Limits are counted per client IP in process memory. Behind API Gateway the
first X-Forwarded-For entry is the caller.

Usage in routes:
    from venue_api.rate_limit import ORDER_CREATE_LIMIT, limiter

    @router.post("/orders")
    @limiter.limit(ORDER_CREATE_LIMIT)
    async def create_order(request: Request, ...):
        ...
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

BOOKING_CREATE_LIMIT = "10/minute"
ORDER_CREATE_LIMIT = "5/minute"
# Above the status poller's 30 requests per minute
BOOKING_READ_LIMIT = "60/minute"

RETRY_AFTER_SECONDS = 60


def client_ip(request: Request) -> str:
    """Identify the caller by forwarded address, falling back to the peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("x-real-ip") or get_remote_address(request)


limiter = Limiter(key_func=client_ip)
