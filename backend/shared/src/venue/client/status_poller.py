"""Client-side booking status poller.

After checkout the browser (or any API consumer) cannot know when the
gateway's webhook will land, so it polls ``GET /api/bookings/{id}`` until
the booking leaves PENDING_PAYMENT or the poller gives up. Polling is a
pure read and never influences server-side processing.
"""

import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 2.0
DEFAULT_TIMEOUT_SECONDS = 120.0
TIMEOUT_MESSAGE = (
    "Payment confirmation is taking longer than expected. "
    "Please verify the booking status manually before paying again."
)


class PollOutcome(str, Enum):
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    TIMEOUT = "TIMEOUT"


class PollResult(BaseModel):
    """How polling ended, with the last booking payload seen."""

    model_config = ConfigDict(strict=True)

    outcome: PollOutcome
    attempts: int
    booking: dict[str, Any] | None = None
    message: str | None = None

    @property
    def pass_id(self) -> str | None:
        return (self.booking or {}).get("passId")


class BookingNotFoundError(Exception):
    """Raised when the polled booking does not exist."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking not found: {booking_id}")
        self.booking_id = booking_id


class BookingStatusPoller:
    """Poll a booking until it reaches a terminal status.

    Usage:
        with BookingStatusPoller("https://venue.example.com") as poller:
            result = poller.poll(booking_id)
            if result.outcome is PollOutcome.CONFIRMED:
                show_pass(result.pass_id)
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        client: httpx.Client | None = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the poller.

        Args:
            base_url: API origin; ignored when ``client`` is given
            client: Preconfigured httpx client (base_url already set)
            interval_seconds: Delay between requests
            timeout_seconds: Give up after this long
            sleep: Sleep function (injectable for tests)
            clock: Monotonic clock (injectable for tests)
        """
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url, timeout=10.0)
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep
        self._clock = clock

    def __enter__(self) -> "BookingStatusPoller":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch(self, booking_id: str) -> dict[str, Any] | None:
        """Fetch the booking once.

        Returns:
            The booking payload, or None after a transient failure.

        Raises:
            BookingNotFoundError: If the server answers 404.
        """
        try:
            response = self._client.get(f"/api/bookings/{booking_id}")
        except httpx.TransportError as e:
            logger.warning("Polling booking %s failed: %s", booking_id, e)
            return None

        if response.status_code == 404:
            raise BookingNotFoundError(booking_id)
        if response.status_code >= 500:
            logger.warning(
                "Polling booking %s got HTTP %d", booking_id, response.status_code
            )
            return None
        response.raise_for_status()

        data: dict[str, Any] = response.json()["data"]
        return data

    def poll(self, booking_id: str) -> PollResult:
        """Poll until the booking is terminal or the timeout elapses.

        A timeout is not a failure: the payment may still be confirmed later.
        """
        deadline = self._clock() + self.timeout_seconds
        attempts = 0
        last: dict[str, Any] | None = None

        while True:
            attempts += 1
            booking = self.fetch(booking_id)
            if booking is not None:
                last = booking
                status = booking.get("status")
                if status in PollOutcome.__members__ and status != PollOutcome.TIMEOUT.value:
                    logger.info(
                        "Booking %s reached %s after %d polls", booking_id, status, attempts
                    )
                    return PollResult(
                        outcome=PollOutcome(status), attempts=attempts, booking=booking
                    )

            if self._clock() + self.interval_seconds > deadline:
                break
            self._sleep(self.interval_seconds)

        logger.info("Stopped polling booking %s after %d polls", booking_id, attempts)
        return PollResult(
            outcome=PollOutcome.TIMEOUT,
            attempts=attempts,
            booking=last,
            message=TIMEOUT_MESSAGE,
        )
