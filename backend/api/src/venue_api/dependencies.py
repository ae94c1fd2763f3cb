"""FastAPI dependency injection providers for shared services.

Services are lazily instantiated and cached with @lru_cache, so each
process holds one instance of each.

Usage in routes:
    from venue_api.dependencies import get_order_service

    @router.post("/orders")
    async def create_order(
        orders: OrderService = Depends(get_order_service),
    ):
        ...

Service Dependency Graph:
    DynamoDBService (singleton via get_dynamodb_service)
        ├── CatalogService
        ├── BookingService ── PassService
        ├── OrderService (+ RazorpayService)
        └── WebhookHandler (+ RazorpayService, BookingService,
                            OrderService, PassService)

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from venue.services.booking_service import BookingService
from venue.services.catalog import CatalogService
from venue.services.dynamodb import get_dynamodb_service
from venue.services.order_service import OrderService
from venue.services.pass_service import PassService
from venue.services.razorpay_service import get_razorpay_service
from venue.services.webhook_handler import WebhookHandler


@lru_cache
def get_catalog_service() -> CatalogService:
    return CatalogService(db=get_dynamodb_service())


@lru_cache
def get_booking_service() -> BookingService:
    """Get cached BookingService instance.

    Free event bookings are issued a pass at creation, so the booking
    service is wired to the pass service after both exist.
    """
    bookings = BookingService(db=get_dynamodb_service(), catalog=get_catalog_service())
    bookings.pass_service = PassService(
        db=get_dynamodb_service(), bookings=bookings, catalog=get_catalog_service()
    )
    return bookings


@lru_cache
def get_pass_service() -> PassService:
    bookings = get_booking_service()
    assert bookings.pass_service is not None
    return bookings.pass_service


@lru_cache
def get_order_service() -> OrderService:
    return OrderService(
        db=get_dynamodb_service(),
        bookings=get_booking_service(),
        gateway=get_razorpay_service(),
    )


@lru_cache
def get_webhook_handler() -> WebhookHandler:
    """Get cached WebhookHandler instance.

    Returns:
        WebhookHandler configured with all required dependencies.
    """
    return WebhookHandler(
        db=get_dynamodb_service(),
        gateway=get_razorpay_service(),
        bookings=get_booking_service(),
        orders=get_order_service(),
        passes=get_pass_service(),
        catalog=get_catalog_service(),
    )


def reset_services() -> None:
    """Clear all cached service instances.

    Call this in test fixtures to ensure clean state between tests.
    Also resets the underlying DynamoDB, SSM and Razorpay singletons.
    """
    from venue.services.dynamodb import reset_dynamodb_service
    from venue.services.ssm_service import SSMService, get_ssm_service

    get_catalog_service.cache_clear()
    get_booking_service.cache_clear()
    get_pass_service.cache_clear()
    get_order_service.cache_clear()
    get_webhook_handler.cache_clear()
    get_razorpay_service.cache_clear()
    get_ssm_service.cache_clear()
    SSMService.reset()

    reset_dynamodb_service()
