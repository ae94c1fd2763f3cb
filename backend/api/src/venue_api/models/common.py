"""Shared API response wrappers.

Every endpoint answers ``{"success": true, "data": ...}`` on success and
``{"success": false, "error": "<message>"}`` on failure. Response payloads
use camelCase keys, as the web client expects.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from venue.models.errors import ErrorEnvelope

__all__ = [
    "CamelModel",
    "ErrorEnvelope",
    "first_validation_message",
]


class CamelModel(BaseModel):
    """Base for API payloads serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def first_validation_message(errors: list[dict]) -> str:
    """Human-readable text of the first validation problem.

    Custom validators raise ``ValueError("...")``, which pydantic reports as
    ``"Value error, ..."``; the prefix is dropped so clients see the message.
    """
    if not errors:
        return "Validation error"
    error = errors[0]
    message = str(error.get("msg", "Validation error"))
    prefix = "Value error, "
    if message.startswith(prefix):
        return message[len(prefix):]
    if error.get("type") == "missing":
        field = next((str(loc) for loc in reversed(error.get("loc", ())) if isinstance(loc, str)), None)
        if field and field not in ("body", "query"):
            return f"{field} is required"
    return message
