"""FastAPI application for the venue booking REST API.

This package provides REST endpoints for:
- Health checks
- Booking creation and status
- Razorpay order issuance and webhook reconciliation
- Event pass verification
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from venue.utils.logging import configure_logging, get_logger
from venue_api.exceptions import register_exception_handlers
from venue_api.middleware.correlation import CorrelationIdMiddleware
from venue_api.middleware.cors import PreflightMiddleware
from venue_api.rate_limit import limiter
from venue_api.routes import (
    bookings_router,
    dev_router,
    orders_router,
    passes_router,
    webhooks_router,
)

configure_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="Venue Booking API",
    description="REST API for bookings, Razorpay payments and event passes",
    version="0.1.0",
)

app.state.limiter = limiter

# Public endpoints are called from any origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(PreflightMiddleware)
# Added last so it wraps everything and every response carries the ID
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

app.include_router(bookings_router, prefix="/api")
app.include_router(orders_router, prefix="/api")
app.include_router(webhooks_router, prefix="/api")
app.include_router(passes_router, prefix="/api")
app.include_router(dev_router, prefix="/api")


@app.get("/api/ping")
async def ping() -> dict[str, Any]:
    """Health check endpoint at /api/ping."""
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "service": "venue-api",
    }


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run(
            "venue_api.main:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["api/src", "shared/src"],
        )
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
