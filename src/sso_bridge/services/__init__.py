"""Service layer - SSO bridge orchestration."""

from src.sso_bridge.services.access_service import TenantAccessChecker, check_tenant_access
from src.sso_bridge.services.authorization_service import AuthorizationRequestBuilder
from src.sso_bridge.services.callback_service import (
    CallbackOutcome,
    CallbackProcessor,
    CallbackState,
)
from src.sso_bridge.services.handoff_service import CrossDomainHandoff, HandoffRedemption
from src.sso_bridge.services.identity_extraction import (
    IdentityExtractor,
    IdTokenClaimsStrategy,
    UserinfoStrategy,
)
from src.sso_bridge.services.identity_service import IdentityResolver

__all__ = [
    "AuthorizationRequestBuilder",
    "CallbackOutcome",
    "CallbackProcessor",
    "CallbackState",
    "CrossDomainHandoff",
    "HandoffRedemption",
    "IdTokenClaimsStrategy",
    "IdentityExtractor",
    "IdentityResolver",
    "TenantAccessChecker",
    "UserinfoStrategy",
    "check_tenant_access",
]
