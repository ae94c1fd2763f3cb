"""FastAPI exception handlers for converting errors to the response envelope.

Every failure, whether a domain BookingError, a routing error (404/405), a
request validation error or an unexpected exception, is rendered as
``{"success": false, "error": "<message>"}``.

The ErrorCode-to-HTTP status mapping:
- 400 Bad Request: Validation failures, unavailable catalog items
- 401 Unauthorized: Webhook signature failures
- 404 Not Found: Unknown bookings, catalog items, routes
- 405 Method Not Allowed: Unsupported HTTP methods
- 409 Conflict: Orders for bookings not awaiting payment
- 429 Too Many Requests: Per-client rate limits
- 502 Bad Gateway: Payment gateway failures and timeouts
- 500 Internal Server Error: Configuration, pass issuance, anything unexpected

Usage:
    from venue_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_409_CONFLICT,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from venue.models.errors import ERROR_MESSAGES, BookingError, ErrorCode, ErrorEnvelope
from venue.utils.logging import log_security_event
from venue_api.models.common import first_validation_message
from venue_api.rate_limit import RETRY_AFTER_SECONDS, client_ip

logger = logging.getLogger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_FAILED: HTTP_400_BAD_REQUEST,
    ErrorCode.ITEM_UNAVAILABLE: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.BOOKING_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.CATALOG_ITEM_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.METHOD_NOT_ALLOWED: HTTP_405_METHOD_NOT_ALLOWED,
    ErrorCode.BOOKING_NOT_PAYABLE: HTTP_409_CONFLICT,
    ErrorCode.RATE_LIMITED: HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.GATEWAY_UNAVAILABLE: HTTP_502_BAD_GATEWAY,
    ErrorCode.PASS_ISSUANCE_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.CONFIGURATION_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode (400 if not mapped)."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(error=message).model_dump(mode="json"),
    )


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Convert a BookingError to the error envelope.

    ``details`` is logged, never returned.
    """
    status_code = get_http_status_for_error(exc.code)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "%s %s failed: %s %s",
            request.method,
            request.url.path,
            exc.code.value,
            exc.details or {},
        )
    elif exc.details:
        logger.info("%s: %s", exc.code.value, exc.details)

    return JSONResponse(
        status_code=status_code,
        content=exc.to_envelope().model_dump(mode="json"),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) as the envelope."""
    if exc.status_code == HTTP_405_METHOD_NOT_ALLOWED:
        message = ERROR_MESSAGES[ErrorCode.METHOD_NOT_ALLOWED]
    elif exc.status_code == HTTP_404_NOT_FOUND:
        message = ERROR_MESSAGES[ErrorCode.NOT_FOUND]
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorEnvelope(error=message).model_dump(mode="json"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first request validation problem with a 400."""
    return error_response(HTTP_400_BAD_REQUEST, first_validation_message(list(exc.errors())))


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Reject a request over its per-client limit with 429."""
    log_security_event(
        logger,
        "RATE_LIMIT",
        endpoint=request.url.path,
        client=client_ip(request),
        limit=exc.detail,
    )
    response = error_response(
        HTTP_429_TOO_MANY_REQUESTS, ERROR_MESSAGES[ErrorCode.RATE_LIMITED]
    )
    response.headers["Retry-After"] = str(RETRY_AFTER_SECONDS)
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected exceptions and return a generic message."""
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    return error_response(
        HTTP_500_INTERNAL_SERVER_ERROR, ERROR_MESSAGES[ErrorCode.INTERNAL]
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(BookingError, booking_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
