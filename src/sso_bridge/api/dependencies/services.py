"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from src.sso_bridge.api.dependencies.db import PublicDBSession
from src.sso_bridge.api.dependencies.repositories import (
    HandoffCodeRepo,
    MembershipRepo,
    TenantRepo,
    UserRepo,
)
from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.identity_provider import IdentityProviderClient
from src.sso_bridge.core.security import StateCodec
from src.sso_bridge.core.tenant_context import TenantContextSwitcher
from src.sso_bridge.services import (
    AuthorizationRequestBuilder,
    CallbackProcessor,
    CrossDomainHandoff,
    IdentityResolver,
)


def get_identity_provider(request: Request) -> IdentityProviderClient:
    """The app-wide IdP client created in create_app()."""
    return request.app.state.identity_provider


def get_state_codec() -> StateCodec:
    return StateCodec.from_settings(get_settings())


IdentityProviderDep = Annotated[IdentityProviderClient, Depends(get_identity_provider)]
StateCodecDep = Annotated[StateCodec, Depends(get_state_codec)]


def get_identity_resolver(user_repo: UserRepo) -> IdentityResolver:
    return IdentityResolver(user_repo)


IdentityResolverDep = Annotated[IdentityResolver, Depends(get_identity_resolver)]


def get_authorization_builder(
    idp: IdentityProviderDep, state_codec: StateCodecDep
) -> AuthorizationRequestBuilder:
    return AuthorizationRequestBuilder(idp, state_codec)


def get_handoff(
    handoff_repo: HandoffCodeRepo,
    session: PublicDBSession,
    identity: IdentityResolverDep,
    membership_repo: MembershipRepo,
) -> CrossDomainHandoff:
    return CrossDomainHandoff(handoff_repo, session, identity, membership_repo)


HandoffDep = Annotated[CrossDomainHandoff, Depends(get_handoff)]


def get_callback_processor(
    idp: IdentityProviderDep,
    state_codec: StateCodecDep,
    tenant_repo: TenantRepo,
    identity: IdentityResolverDep,
    membership_repo: MembershipRepo,
    handoff: HandoffDep,
) -> CallbackProcessor:
    return CallbackProcessor(
        idp=idp,
        state_codec=state_codec,
        tenant_repo=tenant_repo,
        identity=identity,
        membership_repo=membership_repo,
        switcher=TenantContextSwitcher(),
        handoff=handoff,
    )


AuthorizationBuilderDep = Annotated[
    AuthorizationRequestBuilder, Depends(get_authorization_builder)
]
CallbackProcessorDep = Annotated[CallbackProcessor, Depends(get_callback_processor)]
