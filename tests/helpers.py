"""Test helper functions for common data creation patterns."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.sso_bridge.core.db import get_tenant_session
from src.sso_bridge.models.public import Tenant, User, UserTenantMembership
from src.sso_bridge.models.tenant import TenantUser
from src.sso_bridge.repositories import TenantUserRepository
from tests.factories import TenantUserFactory, UserFactory, UserTenantMembershipFactory


async def create_user_with_membership(
    session: AsyncSession,
    tenant: Tenant,
    **user_kwargs,
) -> tuple[User, UserTenantMembership]:
    """Create a central user and their membership in a tenant.

    Args:
        session: Central-schema session (committed here)
        tenant: Tenant to create membership in
        **user_kwargs: Additional args passed to UserFactory
    """
    user = UserFactory.build(**user_kwargs)
    session.add(user)
    await session.flush()

    membership = UserTenantMembershipFactory.build(user_id=user.id, tenant_id=tenant.id)
    session.add(membership)
    await session.commit()

    return user, membership


async def provision_tenant_user(tenant: Tenant, email: str, name: str = "Test User") -> TenantUser:
    """Create the tenant-local account that SSO requires but never creates."""
    tenant_user = TenantUserFactory.build(email=email, name=name)
    async with get_tenant_session(tenant.schema_name) as session:
        session.add(tenant_user)
        await session.commit()
    return tenant_user


async def read_tenant_user(tenant: Tenant, email: str) -> TenantUser | None:
    async with get_tenant_session(tenant.schema_name) as session:
        return await TenantUserRepository(session).get_by_email(email)
