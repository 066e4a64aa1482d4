"""Alembic environment for the central schema and per-tenant schemas.

``alembic upgrade head`` migrates the central (public) schema.
``alembic --tag tenant_<slug> upgrade head`` migrates one tenant schema.
"""

import os
from logging.config import fileConfig

from sqlalchemy import Connection, create_engine, pool, text
from sqlmodel import SQLModel

from alembic import context
from src.alembic.migration_utils import tenant_schema_tag
from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.security import validate_schema_name

# Import all models for metadata
from src.sso_bridge.models import (  # noqa: F401
    SSOHandoffCode,
    Tenant,
    TenantUser,
    User,
    UserTenantMembership,
)

config = context.config

if config.config_file_name is not None and os.path.exists(config.config_file_name):
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def get_sync_url() -> str:
    """Migrations URL (falling back to the app URL) with the async driver removed."""
    settings = get_settings()
    url = settings.database_migrations_url or settings.database_url
    return url.replace("+asyncpg", "")


def include_object(obj, name, type_, reflected, compare_to):  # type: ignore[no-untyped-def]
    """Keep central and tenant tables apart during autogenerate.

    Central runs only see ``public`` tables. Tenant runs see schema-less
    metadata tables and, on the reflected side, only the tagged schema.
    """
    if type_ != "table":
        return True

    schema = tenant_schema_tag()
    object_schema = getattr(obj, "schema", None)

    if schema is None:
        return object_schema == "public"
    if reflected:
        return object_schema == schema
    return object_schema is None


def _set_search_path(connection: Connection, schema: str, create: bool) -> None:
    quoted = connection.execute(text("SELECT quote_ident(:schema)").bindparams(schema=schema))
    quoted_schema = quoted.scalar()
    if create:
        connection.execute(text(f"CREATE SCHEMA IF NOT EXISTS {quoted_schema}"))
    connection.execute(text(f"SET search_path TO {quoted_schema}"))
    connection.commit()


def run_migrations_offline() -> None:
    context.configure(
        url=get_sync_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    schema = tenant_schema_tag()
    if schema is not None:
        # Reject anything that is not a tenant_<slug> name before any SQL runs
        validate_schema_name(schema)

    engine = create_engine(get_sync_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        _set_search_path(connection, schema or "public", create=schema is not None)
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            version_table_schema=schema or "public",
            include_schemas=schema is not None,
            compare_type=True,
            include_object=include_object,
        )
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
