"""Integration test fixtures for database and HTTP client operations.

These fixtures require external resources (PostgreSQL database).
Uses polyfactory for type-safe test data generation.
"""

import asyncio
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from src.sso_bridge.core import db
from src.sso_bridge.core import redis as redis_core
from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.db import run_migrations_sync
from src.sso_bridge.core.health import reset_health_cache
from src.sso_bridge.main import create_app
from src.sso_bridge.models.public import Tenant, User
from tests.factories import TenantFactory
from tests.fakes import IdPStub, make_id_token, token_response
from tests.helpers import create_user_with_membership, provision_tenant_user
from tests.utils.cleanup import cleanup_tenant_cascade, cleanup_user_cascade, drop_tenant_schema


@pytest.fixture(autouse=True)
async def _reset_redis_between_tests() -> AsyncGenerator[None]:
    """Reset Redis state between tests to prevent event loop issues.

    Redis clients hold references to their event loop. When pytest creates
    a new event loop for each test, stale Redis clients cause
    'Event loop is closed' errors.
    """
    redis_core.reset_redis_state()
    yield
    await redis_core.close_redis()


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Create test database engine and ensure central schema migrations are applied."""
    await db.dispose_engine()

    settings = get_settings()
    test_engine = create_async_engine(settings.database_url, poolclass=NullPool)

    await asyncio.to_thread(run_migrations_sync, None)

    yield test_engine
    await test_engine.dispose()
    await db.dispose_engine()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Central-schema session. Tests must commit explicitly to persist."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


async def _create_tenant(db_session: AsyncSession, **kwargs) -> Tenant:
    tenant = TenantFactory.build(**kwargs)
    db_session.add(tenant)
    await db_session.commit()
    await asyncio.to_thread(run_migrations_sync, tenant.schema_name)
    return tenant


@pytest.fixture
async def tenant_factory(engine: AsyncEngine, db_session: AsyncSession) -> AsyncGenerator:
    """Create ready tenants with migrated schemas; all are dropped afterwards."""
    created: list[Tenant] = []

    async def _factory(**kwargs) -> Tenant:
        tenant = await _create_tenant(db_session, **kwargs)
        created.append(tenant)
        return tenant

    yield _factory

    async with engine.connect() as conn:
        for tenant in created:
            await drop_tenant_schema(conn, tenant.schema_name)
            await cleanup_tenant_cascade(conn, tenant.id)
        await conn.commit()


@pytest.fixture
async def acme(tenant_factory) -> Tenant:
    return await tenant_factory(name="Acme Dental")


@pytest.fixture
async def member(
    engine: AsyncEngine, db_session: AsyncSession, acme: Tenant
) -> AsyncGenerator[User]:
    """IdP-linked user with membership in acme and a provisioned tenant account."""
    user, _ = await create_user_with_membership(db_session, acme)
    await provision_tenant_user(acme, user.email, name="Old Name")

    yield user

    async with engine.connect() as conn:
        await cleanup_user_cascade(conn, user.id)
        await conn.commit()


@pytest.fixture
def idp_stub() -> IdPStub:
    return IdPStub()


@pytest.fixture
def signed_in_as(idp_stub: IdPStub):
    """Program the IdP to authenticate ``user``."""

    def _program(user: User, **claims) -> None:
        idp_stub.token = token_response(
            id_token=make_id_token(sub=user.external_subject_id, email=user.email, **claims)
        )
        idp_stub.userinfo = {"sub": user.external_subject_id}

    return _program


@pytest.fixture
async def browser(
    engine: AsyncEngine, acme: Tenant, idp_stub: IdPStub
) -> AsyncGenerator[AsyncClient]:
    """HTTP client on acme's domain, talking to the real app and database."""
    await db.dispose_engine()
    reset_health_cache()

    app = create_app(identity_provider=idp_stub.client())
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url=f"http://{acme.domain}",
    ) as client:
        yield client

    await db.dispose_engine()
