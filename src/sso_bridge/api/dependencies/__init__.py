"""FastAPI dependency injection definitions - Lobby Pattern."""

from src.sso_bridge.api.dependencies.auth import (
    CurrentSession,
    OptionalSession,
    get_current_session,
    get_optional_session,
)
from src.sso_bridge.api.dependencies.db import PublicDBSession, get_db_session
from src.sso_bridge.api.dependencies.repositories import (
    HandoffCodeRepo,
    MembershipRepo,
    TenantRepo,
    UserRepo,
)
from src.sso_bridge.api.dependencies.services import (
    AuthorizationBuilderDep,
    CallbackProcessorDep,
    HandoffDep,
    IdentityProviderDep,
    IdentityResolverDep,
    StateCodecDep,
)
from src.sso_bridge.api.dependencies.tenant import (
    CurrentTenant,
    OptionalTenant,
    get_current_tenant,
    get_optional_tenant,
)

__all__ = [
    # Database
    "PublicDBSession",
    "get_db_session",
    # Tenant
    "CurrentTenant",
    "OptionalTenant",
    "get_current_tenant",
    "get_optional_tenant",
    # Auth
    "CurrentSession",
    "OptionalSession",
    "get_current_session",
    "get_optional_session",
    # Repositories
    "HandoffCodeRepo",
    "MembershipRepo",
    "TenantRepo",
    "UserRepo",
    # Services
    "AuthorizationBuilderDep",
    "CallbackProcessorDep",
    "HandoffDep",
    "IdentityProviderDep",
    "IdentityResolverDep",
    "StateCodecDep",
]
