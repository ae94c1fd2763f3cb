"""CORS preflight handling.

Browsers call the public endpoints from any origin. Every OPTIONS request
is answered here with 204 and the CORS headers, before routing, so
preflights never reach a handler or produce a 405.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.status import HTTP_204_NO_CONTENT

ALLOWED_METHODS = "GET, POST, OPTIONS"
ALLOWED_HEADERS = (
    "Content-Type, Authorization, X-Correlation-ID, X-Dev-Secret, "
    "X-Razorpay-Signature, X-Razorpay-Event-Id"
)


class PreflightMiddleware(BaseHTTPMiddleware):
    """Answer OPTIONS requests with 204 No Content."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "OPTIONS":
            return await call_next(request)

        requested = request.headers.get("access-control-request-headers")
        return Response(
            status_code=HTTP_204_NO_CONTENT,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": ALLOWED_METHODS,
                "Access-Control-Allow-Headers": requested or ALLOWED_HEADERS,
                "Access-Control-Max-Age": "600",
            },
        )
