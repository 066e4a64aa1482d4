"""Repository for Tenant entity."""

from sqlmodel import select

from src.sso_bridge.models.public import Tenant
from src.sso_bridge.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """Repository for Tenant entity in the central schema."""

    model = Tenant

    async def get_routable(self, tenant_id: str) -> Tenant | None:
        """Get a tenant that can accept logins, else None.

        Soft-deleted, inactive and unprovisioned tenants resolve as absent.
        """
        tenant = await self.get_by_id(tenant_id)
        if tenant is None or not tenant.accepts_logins:
            return None
        return tenant

    async def get_by_domain(self, domain: str) -> Tenant | None:
        """Get the routable tenant serving ``domain`` (case-insensitive)."""
        result = await self.session.execute(
            select(Tenant).where(
                Tenant.domain == domain.lower(),
                Tenant.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        tenant = result.scalar_one_or_none()
        if tenant is None or not tenant.accepts_logins:
            return None
        return tenant
