"""Fixtures for API contract tests.

The app runs against mocked AWS; order creation uses the gateway double
from the root conftest so no request reaches Razorpay.
"""

from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient

from venue_api.dependencies import get_order_service, get_webhook_handler
from venue_api.main import app


@pytest.fixture
def client(
    aws_mock: None, order_service: Any, webhook_handler: Any
) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_order_service] = lambda: order_service
    app.dependency_overrides[get_webhook_handler] = lambda: webhook_handler
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
