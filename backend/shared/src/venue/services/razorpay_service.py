"""Razorpay payment gateway service for orders and webhook signatures.

Credentials are read from SSM Parameter Store on first use.
"""

import hashlib
import logging
import os
from functools import lru_cache
from typing import Any

import razorpay
import requests
from razorpay.errors import (
    BadRequestError,
    GatewayError,
    ServerError,
    SignatureVerificationError,
)

from .ssm_service import SSMServiceError, get_ssm_service

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class RazorpayServiceError(Exception):
    """Raised when a Razorpay call fails or times out."""

    def __init__(self, message: str, gateway_error_code: str | None = None) -> None:
        super().__init__(message)
        self.gateway_error_code = gateway_error_code


class RazorpayConfigurationError(RazorpayServiceError):
    """Raised when gateway credentials are not configured."""


class WebhookSignatureError(RazorpayServiceError):
    """Raised when a webhook signature is missing or does not match."""


class RazorpayService:
    """Service for Razorpay gateway operations.

    Handles:
    - Order creation with a bounded timeout
    - Webhook signature validation (HMAC-SHA256 of the raw body)

    Usage:
        razorpay_svc = get_razorpay_service()
        order = razorpay_svc.create_order(
            booking_id="0b7c...",
            amount=50000,
            currency="INR",
            notes={"booking_id": "0b7c...", "type": "EVENT"},
        )
    """

    def __init__(
        self,
        environment: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize Razorpay service.

        Args:
            environment: Environment name (dev, prod). Defaults to ENVIRONMENT env var.
            timeout_seconds: Order creation timeout. Defaults to
                RAZORPAY_TIMEOUT_SECONDS env var, then 10 seconds.
        """
        self._environment = environment or os.environ.get("ENVIRONMENT", "dev")
        self._timeout = timeout_seconds or float(
            os.environ.get("RAZORPAY_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        )
        self._ssm = get_ssm_service()
        self._client: razorpay.Client | None = None
        self._key_id: str | None = None
        self._webhook_secret: str | None = None

    def _parameter(self, name: str) -> str:
        return f"/venue/{self._environment}/razorpay/{name}"

    @property
    def key_id(self) -> str:
        """Public key id handed to the checkout widget."""
        if self._key_id is None:
            try:
                self._key_id = self._ssm.get_parameter(self._parameter("key_id"))
            except SSMServiceError as e:
                raise RazorpayConfigurationError(
                    f"Failed to get Razorpay key id: {e}"
                ) from e
        return self._key_id

    def _get_client(self) -> razorpay.Client:
        """Get or create the Razorpay client (lazy initialization)."""
        if self._client is None:
            try:
                key_secret = self._ssm.get_parameter(self._parameter("key_secret"))
            except SSMServiceError as e:
                raise RazorpayConfigurationError(
                    f"Failed to initialize Razorpay client: {e}"
                ) from e
            self._client = razorpay.Client(auth=(self.key_id, key_secret))
            logger.info(
                "Razorpay client initialized for environment: %s", self._environment
            )
        return self._client

    def _get_webhook_secret(self) -> str:
        if self._webhook_secret is None:
            try:
                self._webhook_secret = self._ssm.get_parameter(
                    self._parameter("webhook_secret")
                )
            except SSMServiceError as e:
                raise RazorpayConfigurationError(
                    f"Failed to get webhook secret: {e}"
                ) from e
        return self._webhook_secret

    def create_order(
        self,
        *,
        booking_id: str,
        amount: int,
        currency: str,
        notes: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Create a Razorpay order.

        Args:
            booking_id: Booking ID, sent as the order receipt.
            amount: Amount in paise.
            currency: ISO currency code.
            notes: Key/value notes stored on the order.

        Returns:
            The gateway order entity (``id``, ``amount``, ``currency``,
            ``receipt``, ``status``...).

        Raises:
            RazorpayServiceError: If the gateway rejects the call, fails or
                does not answer within the timeout.
        """
        client = self._get_client()

        try:
            logger.info(
                "Creating Razorpay order for booking %s, amount %d paise",
                booking_id,
                amount,
            )
            order: dict[str, Any] = client.order.create(
                data={
                    "amount": amount,
                    "currency": currency,
                    "receipt": booking_id,
                    "notes": notes or {},
                },
                timeout=self._timeout,
            )
        except (BadRequestError, GatewayError, ServerError) as e:
            error_code = getattr(e, "error_code", None)
            logger.error(
                "Razorpay order creation failed: %s (code: %s)", str(e), error_code
            )
            raise RazorpayServiceError(
                f"Failed to create order: {e}", gateway_error_code=error_code
            ) from e
        except requests.RequestException as e:
            logger.error("Razorpay order creation transport error: %s", str(e))
            raise RazorpayServiceError(f"Failed to reach Razorpay: {e}") from e

        if not order.get("id"):
            raise RazorpayServiceError("Razorpay returned an order without an id")

        logger.info("Razorpay order created: %s for booking %s", order["id"], booking_id)
        return order

    def verify_webhook_signature(self, payload: bytes, signature: str | None) -> None:
        """Verify the X-Razorpay-Signature of a raw webhook body.

        Args:
            payload: Raw request body bytes, exactly as received.
            signature: Hex HMAC-SHA256 signature header value.

        Raises:
            RazorpayConfigurationError: If the webhook secret is not configured.
            WebhookSignatureError: If the signature is missing or invalid.
        """
        webhook_secret = self._get_webhook_secret()

        if not signature:
            raise WebhookSignatureError("Missing webhook signature")

        try:
            body = payload.decode("utf-8")
            razorpay.Client().utility.verify_webhook_signature(
                body, signature, webhook_secret
            )
        except (SignatureVerificationError, UnicodeDecodeError, TypeError) as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise WebhookSignatureError("Invalid webhook signature") from e

    @staticmethod
    def compute_payload_hash(payload: bytes) -> str:
        """Compute SHA-256 hash of a webhook payload.

        Args:
            payload: Raw webhook payload bytes.

        Returns:
            Hex-encoded SHA-256 hash.
        """
        return hashlib.sha256(payload).hexdigest()


@lru_cache(maxsize=1)
def get_razorpay_service() -> RazorpayService:
    """Get the shared RazorpayService instance."""
    return RazorpayService()
