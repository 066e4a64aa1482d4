"""HTTP client for the OIDC identity provider.

Endpoints follow the Keycloak realm layout:
``{IDP_BASE_URL}/realms/{IDP_REALM}/protocol/openid-connect/{auth,token,userinfo,logout}``.
"""

from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from src.sso_bridge.core.config import Settings, get_settings
from src.sso_bridge.core.exceptions import ExchangeFailed, UpstreamUnreachable
from src.sso_bridge.core.logging import get_logger
from src.sso_bridge.schemas.sso import ProviderTokens

logger = get_logger(__name__)


class IdentityProviderClient:
    """Thin async wrapper over the IdP's OIDC endpoints with short timeouts."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.idp_timeout_seconds),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def issuer(self) -> str:
        return self.settings.idp_realm_url

    @property
    def client_id(self) -> str:
        return self.settings.idp_client_id

    def endpoint(self, name: str) -> str:
        return f"{self.issuer}/protocol/openid-connect/{name}"

    def authorization_url(self, *, state: str, redirect_uri: str) -> str:
        query = {
            "response_type": "code",
            "client_id": self.settings.idp_client_id,
            "redirect_uri": redirect_uri,
            "scope": self.settings.idp_scopes,
            "state": state,
        }
        return f"{self.endpoint('auth')}?{urlencode(query)}"

    def end_session_url(
        self, *, post_logout_redirect_uri: str, id_token_hint: str | None = None
    ) -> str:
        query = {
            "client_id": self.settings.idp_client_id,
            "post_logout_redirect_uri": post_logout_redirect_uri,
        }
        if id_token_hint:
            query["id_token_hint"] = id_token_hint
        return f"{self.endpoint('logout')}?{urlencode(query)}"

    async def exchange_code(self, code: str, redirect_uri: str) -> ProviderTokens:
        """Exchange an authorization code for tokens.

        Raises:
            ExchangeFailed: on any transport error, timeout, non-2xx response
                or malformed token payload.
        """
        try:
            response = await self._client.post(
                self.endpoint("token"),
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": redirect_uri,
                    "client_id": self.settings.idp_client_id,
                    "client_secret": self.settings.idp_client_secret,
                },
            )
        except httpx.HTTPError as e:
            raise ExchangeFailed(f"token request failed: {type(e).__name__}") from e

        if not response.is_success:
            raise ExchangeFailed(f"token endpoint returned {response.status_code}")

        try:
            return ProviderTokens.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ExchangeFailed("token endpoint returned an invalid payload") from e

    async def fetch_userinfo(self, access_token: str) -> dict[str, Any] | None:
        """Call the userinfo endpoint.

        Returns None when the provider rejects the token or answers with an
        empty or non-JSON body.

        Raises:
            UpstreamUnreachable: the provider could not be reached, timed out
                or failed with a 5xx.
        """
        try:
            response = await self._client.get(
                self.endpoint("userinfo"),
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            raise UpstreamUnreachable(f"userinfo request failed: {type(e).__name__}") from e

        if response.status_code >= 500:
            raise UpstreamUnreachable(f"userinfo endpoint returned {response.status_code}")
        if not response.is_success:
            logger.info("Userinfo rejected access token", status_code=response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError:
            return None
        if not isinstance(payload, dict) or not payload:
            return None
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()
