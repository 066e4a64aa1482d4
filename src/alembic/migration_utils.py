from alembic import context


def tenant_schema_tag() -> str | None:
    """Tenant schema passed with ``--tag``, or None for a central-schema run."""
    return context.get_tag_argument() or None


def is_tenant_migration() -> bool:
    """Central-schema revisions no-op on tenant runs and vice versa."""
    return tenant_schema_tag() is not None
