"""Repository for UserTenantMembership entity."""

from uuid import UUID

from sqlmodel import select

from src.sso_bridge.models.public import UserTenantMembership
from src.sso_bridge.repositories.base import BaseRepository


class MembershipRepository(BaseRepository[UserTenantMembership]):
    """Repository for user-tenant memberships in the central schema."""

    model = UserTenantMembership

    async def exists(self, user_id: UUID, tenant_id: str) -> bool:
        """Check membership for exactly this (user, tenant) pair."""
        result = await self.session.execute(
            select(UserTenantMembership.user_id).where(
                UserTenantMembership.user_id == user_id,
                UserTenantMembership.tenant_id == tenant_id,
            )
        )
        return result.first() is not None
