"""Per-request tenant access checks."""

from src.sso_bridge.core.db import get_public_session
from src.sso_bridge.repositories import MembershipRepository, UserRepository
from src.sso_bridge.services.identity_service import IdentityResolver


class TenantAccessChecker:
    """Answers whether a principal still belongs to a tenant."""

    def __init__(self, identity: IdentityResolver, membership_repo: MembershipRepository):
        self.identity = identity
        self.membership_repo = membership_repo

    async def has_access(self, email: str, tenant_id: str) -> bool:
        user = await self.identity.by_email(email)
        if user is None:
            return False
        return await self.membership_repo.exists(user.id, tenant_id)


async def check_tenant_access(email: str, tenant_id: str) -> bool:
    """Open a central-schema session and run the membership check."""
    async with get_public_session() as session:
        checker = TenantAccessChecker(
            IdentityResolver(UserRepository(session)),
            MembershipRepository(session),
        )
        return await checker.has_access(email, tenant_id)
