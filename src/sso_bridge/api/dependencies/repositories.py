"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.sso_bridge.api.dependencies.db import PublicDBSession
from src.sso_bridge.repositories import (
    HandoffCodeRepository,
    MembershipRepository,
    TenantRepository,
    UserRepository,
)


def get_user_repository(session: PublicDBSession) -> UserRepository:
    return UserRepository(session)


def get_membership_repository(session: PublicDBSession) -> MembershipRepository:
    return MembershipRepository(session)


def get_tenant_repository(session: PublicDBSession) -> TenantRepository:
    return TenantRepository(session)


def get_handoff_code_repository(session: PublicDBSession) -> HandoffCodeRepository:
    return HandoffCodeRepository(session)


UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
MembershipRepo = Annotated[MembershipRepository, Depends(get_membership_repository)]
TenantRepo = Annotated[TenantRepository, Depends(get_tenant_repository)]
HandoffCodeRepo = Annotated[HandoffCodeRepository, Depends(get_handoff_code_repository)]
