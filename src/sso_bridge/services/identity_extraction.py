"""Identity extraction from the IdP: ID token claims first, userinfo second."""

from typing import Any, Protocol

from jose import JWTError, jwt

from src.sso_bridge.core.exceptions import MissingIdentity, UpstreamUnreachable
from src.sso_bridge.core.identity_provider import IdentityProviderClient
from src.sso_bridge.core.logging import get_logger
from src.sso_bridge.schemas.sso import ProviderIdentity, ProviderTokens

logger = get_logger(__name__)

_IDENTITY_CLAIMS = ("sub", "email", "given_name", "family_name", "name")


class IdentityStrategy(Protocol):
    name: str

    async def extract(self, tokens: ProviderTokens) -> ProviderIdentity | None: ...


def identity_from_claims(claims: dict[str, Any]) -> ProviderIdentity | None:
    """Normalize raw claims. Non-string claim values are ignored."""
    values: dict[str, str] = {}
    for claim in _IDENTITY_CLAIMS:
        value = claims.get(claim)
        if isinstance(value, str) and value.strip():
            values[claim] = value.strip()
    if not values:
        return None
    return ProviderIdentity(
        subject=values.get("sub"),
        email=values.get("email"),
        given_name=values.get("given_name"),
        family_name=values.get("family_name"),
        name=values.get("name"),
    )


class IdTokenClaimsStrategy:
    """Reads claims from the ID token returned by the token endpoint.

    The token arrives over a direct TLS call to the IdP, so its signature is
    not re-verified; audience, issuer and expiry still are.
    """

    name = "id_token"

    def __init__(self, client_id: str, issuer: str, leeway_seconds: int = 30):
        self.client_id = client_id
        self.issuer = issuer
        self.leeway_seconds = leeway_seconds

    async def extract(self, tokens: ProviderTokens) -> ProviderIdentity | None:
        if not tokens.id_token:
            return None
        try:
            claims = jwt.decode(
                tokens.id_token,
                key="",
                audience=self.client_id,
                issuer=self.issuer,
                options={
                    "verify_signature": False,
                    "verify_at_hash": False,
                    "leeway": self.leeway_seconds,
                },
            )
        except JWTError as e:
            logger.warning("ID token claims rejected", reason=str(e))
            return None
        return identity_from_claims(claims)


class UserinfoStrategy:
    """Asks the userinfo endpoint using the fresh access token."""

    name = "userinfo"

    def __init__(self, idp: IdentityProviderClient):
        self.idp = idp

    async def extract(self, tokens: ProviderTokens) -> ProviderIdentity | None:
        try:
            claims = await self.idp.fetch_userinfo(tokens.access_token)
        except UpstreamUnreachable as e:
            logger.warning("Userinfo unavailable during callback", reason=e.detail)
            return None
        if claims is None:
            return None
        return identity_from_claims(claims)


class IdentityExtractor:
    """Runs strategies in priority order and returns the first identity found."""

    def __init__(self, strategies: list[IdentityStrategy]):
        self.strategies = strategies

    @classmethod
    def default(cls, idp: IdentityProviderClient) -> "IdentityExtractor":
        return cls(
            [
                IdTokenClaimsStrategy(
                    client_id=idp.client_id,
                    issuer=idp.issuer,
                    leeway_seconds=idp.settings.idp_id_token_leeway_seconds,
                ),
                UserinfoStrategy(idp),
            ]
        )

    async def extract(self, tokens: ProviderTokens) -> ProviderIdentity:
        """Raises MissingIdentity when no strategy yields claims."""
        for strategy in self.strategies:
            identity = await strategy.extract(tokens)
            if identity is not None:
                logger.debug("Identity extracted", source=strategy.name)
                return identity
        raise MissingIdentity("neither ID token nor userinfo yielded claims")
