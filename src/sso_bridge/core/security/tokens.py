"""One-time code and opaque token helpers."""

import secrets
from hashlib import sha256

HANDOFF_CODE_BYTES = 32  # 256 bits


def generate_handoff_code() -> str:
    """Generate an unguessable URL-safe one-time code."""
    return secrets.token_urlsafe(HANDOFF_CODE_BYTES)


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)


def tokens_match(expected: str | None, provided: str | None) -> bool:
    """Constant-time comparison that treats missing values as a mismatch."""
    if not expected or not provided:
        return False
    return secrets.compare_digest(expected, provided)
