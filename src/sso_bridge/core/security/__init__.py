"""Security utilities - state codec, one-time tokens and validators.

Re-exports all security-related functions for convenience.
"""

from src.sso_bridge.core.security.state import OAuthState, StateCodec
from src.sso_bridge.core.security.tokens import (
    generate_csrf_token,
    generate_handoff_code,
    hash_token,
    tokens_match,
)
from src.sso_bridge.core.security.validators import (
    is_safe_target_path,
    slug_to_schema_name,
    validate_schema_name,
    validate_tenant_slug_format,
)

__all__ = [
    # State
    "OAuthState",
    "StateCodec",
    # Tokens
    "generate_csrf_token",
    "generate_handoff_code",
    "hash_token",
    "tokens_match",
    # Validators
    "is_safe_target_path",
    "slug_to_schema_name",
    "validate_schema_name",
    "validate_tenant_slug_format",
]
