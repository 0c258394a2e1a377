"""Shared-secret API key check."""

import secrets
from typing import Optional

HEADER_NAME = "x-api-key"


def generate_api_key() -> str:
    """Generate a cryptographically secure 32-byte hex API key."""
    return secrets.token_hex(32)


def verify_api_key(provided: Optional[str], expected: str) -> bool:
    """
    Check a request's API key against the configured secret.

    Args:
        provided: Value of the x-api-key header (None if absent).
        expected: Configured secret. Empty means authentication is disabled.

    Returns:
        True if the request may proceed.
    """
    if not expected:
        return True
    if provided is None:
        return False
    return secrets.compare_digest(provided.encode(), expected.encode())
