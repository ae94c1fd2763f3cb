"""Event pass identifier generation.

Identifiers look like ``OSS-EV-7KQ2M9XH``: a fixed prefix and eight
symbols drawn with ``secrets`` from an alphabet without the easily
confused 0/O and 1/I. Uniqueness is enforced by the store, not here.
"""

import re
import secrets

PASS_ID_PREFIX = "OSS-EV-"
PASS_ID_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
PASS_ID_LENGTH = 8

PASS_ID_PATTERN = re.compile(
    rf"^{re.escape(PASS_ID_PREFIX)}[{PASS_ID_ALPHABET}]{{{PASS_ID_LENGTH}}}$"
)


def generate_pass_id() -> str:
    """Return a fresh random pass identifier."""
    suffix = "".join(secrets.choice(PASS_ID_ALPHABET) for _ in range(PASS_ID_LENGTH))
    return f"{PASS_ID_PREFIX}{suffix}"


def normalize_pass_id(value: str) -> str:
    """Trim and uppercase a pass identifier typed or scanned at the door."""
    return value.strip().upper()
