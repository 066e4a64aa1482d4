"""OAuth ``state`` encoding, signing and verification.

The state round-trips through the identity provider and is the only thing that
ties a callback back to the tenant the user started from. A signed state is an
HS256 JWT carrying ``tenant_id``, ``nonce``, ``iat``, ``nbf`` and ``exp``.
Unsigned states are base64url(json) of ``{"tenant_id", "nonce"}`` and are only
accepted while ``SSO_STATE_SIGNING_REQUIRED`` is off.
"""

import base64
import binascii
import json
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from src.sso_bridge.core.config import Settings
from src.sso_bridge.core.exceptions import InvalidState
from src.sso_bridge.core.logging import get_logger
from src.sso_bridge.core.security.validators import is_valid_tenant_slug

logger = get_logger(__name__)

STATE_ALGORITHM = "HS256"

# Tolerated clock drift between app instances for ``nbf`` and ``exp``.
MAX_CLOCK_SKEW_SECONDS = 60


@dataclass(frozen=True)
class OAuthState:
    """Decoded, verified state payload."""

    tenant_id: str
    nonce: str
    issued_at: int | None
    signed: bool


class StateCodec:
    def __init__(
        self,
        secret: str,
        max_age_seconds: int = 600,
        signing_required: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self._secret = secret
        self._max_age = max_age_seconds
        self._signing_required = signing_required
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "StateCodec":
        return cls(
            secret=settings.sso_state_secret,
            max_age_seconds=settings.sso_state_max_age_seconds,
            signing_required=settings.sso_state_signing_required,
        )

    def encode(self, tenant_id: str) -> str:
        """Build a fresh signed state for ``tenant_id`` with a 128-bit nonce."""
        issued_at = int(self._clock())
        claims = {
            "tenant_id": tenant_id,
            "nonce": secrets.token_hex(16),
            "iat": issued_at,
            "nbf": issued_at,
            "exp": issued_at + self._max_age,
        }
        return jwt.encode(  # type: ignore[no-any-return]
            claims, self._secret, algorithm=STATE_ALGORITHM
        )

    def decode(self, value: str | None) -> OAuthState:
        """Parse and verify a state value.

        Raises:
            InvalidState: missing, unparseable, tampered, stale or without tenant_id.
        """
        if not value:
            raise InvalidState("state parameter missing")

        value = value.strip()
        if value.count(".") == 2:
            return self._decode_signed(value)

        if self._signing_required:
            raise InvalidState("state is not signed")
        return self._decode_unsigned(value)

    def _decode_signed(self, value: str) -> OAuthState:
        try:
            claims = jwt.decode(
                value,
                self._secret,
                algorithms=[STATE_ALGORITHM],
                options={
                    "require_exp": True,
                    "require_iat": True,
                    "leeway": MAX_CLOCK_SKEW_SECONDS,
                },
            )
        except ExpiredSignatureError as e:
            raise InvalidState("state expired") from e
        except JWTError as e:
            raise InvalidState(f"state rejected: {e}") from e

        tenant_id = _tenant_id(claims)
        nonce = claims.get("nonce")
        if not isinstance(nonce, str) or not nonce:
            raise InvalidState("state has no nonce")
        issued_at = claims["iat"]
        if isinstance(issued_at, bool) or not isinstance(issued_at, int):
            raise InvalidState("state iat is not an integer")

        return OAuthState(tenant_id=tenant_id, nonce=nonce, issued_at=issued_at, signed=True)

    def _decode_unsigned(self, value: str) -> OAuthState:
        payload = _parse_payload(value)
        tenant_id = _tenant_id(payload)
        nonce = payload.get("nonce")
        logger.warning("Accepting unsigned SSO state", tenant_id=tenant_id)
        return OAuthState(
            tenant_id=tenant_id,
            nonce=nonce if isinstance(nonce, str) else "",
            issued_at=None,
            signed=False,
        )


def _tenant_id(payload: dict[str, Any]) -> str:
    tenant_id = payload.get("tenant_id")
    if not isinstance(tenant_id, str) or not tenant_id:
        raise InvalidState("state has no tenant_id")
    if not is_valid_tenant_slug(tenant_id):
        raise InvalidState("state tenant_id is malformed")
    return tenant_id


def _parse_payload(value: str) -> dict[str, Any]:
    # Accept base64url and standard base64; '+' may arrive as ' ' after query decoding.
    normalized = value.replace(" ", "+").replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        raw = base64.b64decode(normalized, validate=True)
        payload = json.loads(raw)
    except (binascii.Error, ValueError) as e:
        raise InvalidState("state is not valid base64 JSON") from e
    if not isinstance(payload, dict):
        raise InvalidState("state payload is not an object")
    return payload
