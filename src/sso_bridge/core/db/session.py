"""Database session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.sso_bridge.core.db.engine import get_engine
from src.sso_bridge.core.security.validators import validate_schema_name


@asynccontextmanager
async def get_session(
    tenant_schema: str | None = None,
    engine: AsyncEngine | None = None,
) -> AsyncGenerator[AsyncSession]:
    """Create a database session, optionally scoped to a tenant schema.

    Args:
        tenant_schema: If provided, session is scoped to this tenant schema.
                      If None, session uses the central (public) schema.
        engine: Optional engine override for testing.

    Note:
        A tenant session sees ONLY its own schema. Central tables must be
        qualified explicitly (public.users, ...).
    """
    if engine is None:
        engine = get_engine()

    async with engine.connect() as connection:
        try:
            if tenant_schema is not None:
                validate_schema_name(tenant_schema)
                quoted_schema = await connection.scalar(
                    text("SELECT quote_ident(:schema)").bindparams(schema=tenant_schema)
                )
                await connection.execute(text(f"SET search_path TO {quoted_schema}"))
            else:
                await connection.execute(text("SET search_path TO public"))

            await connection.commit()

            session_factory = async_sessionmaker(
                bind=connection,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            async with session_factory() as session:
                yield session
        finally:
            # Pooled connections must never keep a tenant search_path
            if tenant_schema is not None and not connection.closed:
                await connection.rollback()
                await connection.execute(text("SET search_path TO public"))
                await connection.commit()


@asynccontextmanager
async def get_public_session() -> AsyncGenerator[AsyncSession]:
    """Session bound to the central schema."""
    async with get_session() as session:
        yield session


@asynccontextmanager
async def get_tenant_session(tenant_schema: str) -> AsyncGenerator[AsyncSession]:
    """Session bound to exactly one tenant schema."""
    async with get_session(tenant_schema) as session:
        yield session
