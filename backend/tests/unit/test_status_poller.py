"""Unit tests for the client-side booking status poller."""

import httpx
import pytest

from venue.client.status_poller import (
    TIMEOUT_MESSAGE,
    BookingNotFoundError,
    BookingStatusPoller,
    PollOutcome,
)

BOOKING_ID = "0b7e9a52-8f43-4c61-9d2e-6a1f3b5c7d90"


class FakeClock:
    """Monotonic clock advanced only by the poller's sleep calls."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _booking(status: str, **extra: object) -> dict:
    return {"bookingId": BOOKING_ID, "status": status, **extra}


def _poller(responses: list, clock: FakeClock, **kwargs: object) -> tuple[BookingStatusPoller, list]:
    """Build a poller whose transport replays ``responses`` in order."""
    requests: list[httpx.Request] = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json={"success": True, "data": item})

    client = httpx.Client(base_url="https://venue.test", transport=httpx.MockTransport(handler))
    poller = BookingStatusPoller(
        client=client, sleep=clock.sleep, clock=clock, **kwargs
    )
    return poller, requests


class TestPoll:
    def test_returns_confirmed_with_pass(self):
        clock = FakeClock()
        poller, requests = _poller(
            [
                _booking("PENDING_PAYMENT"),
                _booking("PENDING_PAYMENT"),
                _booking("CONFIRMED", passId="OSS-EV-ABCD2345"),
            ],
            clock,
        )

        result = poller.poll(BOOKING_ID)

        assert result.outcome is PollOutcome.CONFIRMED
        assert result.attempts == 3
        assert result.pass_id == "OSS-EV-ABCD2345"
        assert clock.sleeps == [2.0, 2.0]
        assert requests[0].url.path == f"/api/bookings/{BOOKING_ID}"

    @pytest.mark.parametrize("status", ["FAILED", "CANCELLED"])
    def test_stops_on_other_terminal_statuses(self, status):
        clock = FakeClock()
        poller, _ = _poller([_booking(status)], clock)

        result = poller.poll(BOOKING_ID)

        assert result.outcome == PollOutcome(status)
        assert result.attempts == 1
        assert clock.sleeps == []

    def test_times_out_with_guidance(self):
        clock = FakeClock()
        poller, requests = _poller(
            [_booking("PENDING_PAYMENT")], clock, interval_seconds=2.0, timeout_seconds=10.0
        )

        result = poller.poll(BOOKING_ID)

        assert result.outcome is PollOutcome.TIMEOUT
        assert result.message == TIMEOUT_MESSAGE
        assert result.booking == _booking("PENDING_PAYMENT")
        assert result.attempts == len(requests) == 6
        assert clock.now <= 10.0

    def test_transient_errors_keep_polling(self):
        clock = FakeClock()
        poller, _ = _poller(
            [
                httpx.ConnectError("connection refused"),
                httpx.Response(503, json={"success": False, "error": "unavailable"}),
                _booking("CONFIRMED"),
            ],
            clock,
        )

        result = poller.poll(BOOKING_ID)

        assert result.outcome is PollOutcome.CONFIRMED
        assert result.attempts == 3

    def test_missing_booking_raises(self):
        clock = FakeClock()
        poller, _ = _poller(
            [httpx.Response(404, json={"success": False, "error": "Booking not found"})],
            clock,
        )

        with pytest.raises(BookingNotFoundError) as exc_info:
            poller.poll(BOOKING_ID)
        assert exc_info.value.booking_id == BOOKING_ID


class TestClientLifecycle:
    def test_injected_client_not_closed(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with BookingStatusPoller(client=client):
            pass
        assert not client.is_closed

    def test_owned_client_closed(self):
        poller = BookingStatusPoller("https://venue.test")
        with poller:
            pass
        assert poller._client.is_closed
