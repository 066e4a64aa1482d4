"""Outbound authorization redirect."""

from src.sso_bridge.core.exceptions import ConfigurationError
from src.sso_bridge.core.identity_provider import IdentityProviderClient
from src.sso_bridge.core.logging import get_logger
from src.sso_bridge.core.security import StateCodec
from src.sso_bridge.core.urls import callback_url
from src.sso_bridge.models.public import Tenant

logger = get_logger(__name__)


class AuthorizationRequestBuilder:
    """Builds the IdP authorize URL with the tenant embedded in ``state``.

    Stateless: nothing is persisted between redirect and callback.
    """

    def __init__(self, idp: IdentityProviderClient, state_codec: StateCodec):
        self.idp = idp
        self.state_codec = state_codec

    def build(self, tenant: Tenant | None) -> str:
        """Return the authorize URL for ``tenant``.

        Raises:
            ConfigurationError: the request did not come from a tenant domain.
        """
        if tenant is None:
            raise ConfigurationError("SSO redirect requested without a tenant context")

        state = self.state_codec.encode(tenant.id)
        logger.info("Redirecting to identity provider", tenant_id=tenant.id)
        return self.idp.authorization_url(state=state, redirect_uri=callback_url())
