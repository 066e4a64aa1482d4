"""Scoped activation of a tenant's data store."""

from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.sso_bridge.core.db.session import get_tenant_session
from src.sso_bridge.core.logging import get_logger
from src.sso_bridge.models.public import Tenant

logger = get_logger(__name__)

TenantSessionFactory = Callable[[str], AbstractAsyncContextManager[AsyncSession]]


class TenantContextError(RuntimeError):
    """Raised on nested activation of a tenant context."""


@dataclass(frozen=True)
class TenantContext:
    """An active tenant and a session bound to its schema only."""

    tenant: Tenant
    session: AsyncSession


class TenantContextSwitcher:
    """Activates one tenant's data store at a time.

    The context is an explicit value handed to the caller, never a global, and
    it is released on every exit path including exceptions.
    """

    def __init__(self, session_factory: TenantSessionFactory = get_tenant_session):
        self._session_factory = session_factory
        self._active: Tenant | None = None

    @property
    def active_tenant(self) -> Tenant | None:
        return self._active

    @asynccontextmanager
    async def activate(self, tenant: Tenant) -> AsyncGenerator[TenantContext]:
        if self._active is not None:
            raise TenantContextError(
                f"Tenant context for {self._active.id} is already active; "
                f"cannot activate {tenant.id}"
            )

        self._active = tenant
        logger.debug("Tenant context activated", tenant_id=tenant.id)
        try:
            async with self._session_factory(tenant.schema_name) as session:
                yield TenantContext(tenant=tenant, session=session)
        finally:
            self._active = None
            logger.debug("Tenant context released", tenant_id=tenant.id)
