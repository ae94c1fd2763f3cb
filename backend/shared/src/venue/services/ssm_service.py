"""SSM Parameter Store access for gateway credentials.

Razorpay key id, key secret and webhook secret live under
``/venue/{env}/razorpay/``. Values are cached for the life of the process;
rotating a secret means updating the parameter and restarting.
"""

import logging
from functools import lru_cache
from typing import ClassVar

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class SSMServiceError(Exception):
    """Raised when a parameter cannot be read."""


class SSMService:
    """Cached reader for SecureString parameters.

    Usage:
        ssm = get_ssm_service()
        key_id = ssm.get_parameter("/venue/dev/razorpay/key_id")
    """

    _instance: ClassVar["SSMService | None"] = None
    _cache: ClassVar[dict[str, str]] = {}

    def __init__(self) -> None:
        self._client = boto3.client("ssm")

    @classmethod
    def get_instance(cls) -> "SSMService":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared client and cached values (tests only)."""
        cls._instance = None
        cls._cache.clear()

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Retrieve and decrypt a parameter value.

        Args:
            name: Full parameter path (e.g., "/venue/dev/razorpay/key_secret")
            use_cache: Return the cached value when present (default: True)

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If the parameter is missing or unreadable.
        """
        if use_cache and name in self._cache:
            logger.debug("SSM cache hit for %s", name)
            return self._cache[name]

        try:
            logger.info("Fetching SSM parameter: %s", name)
            response = self._client.get_parameter(Name=name, WithDecryption=True)
            value: str = response["Parameter"]["Value"]
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                raise SSMServiceError(f"SSM parameter not found: {name}") from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {name}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(
                f"Failed to retrieve SSM parameter {name}: {e}"
            ) from e

        if not value:
            raise SSMServiceError(f"SSM parameter is empty: {name}")

        self._cache[name] = value
        return value

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("SSM parameter cache cleared")


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService instance."""
    return SSMService.get_instance()
