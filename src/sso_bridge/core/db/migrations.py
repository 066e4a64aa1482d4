"""Reusable migration runner for both production and tests."""

from alembic.config import Config

from alembic import command


def run_migrations_sync(schema_name: str | None = None) -> None:
    """Run Alembic migrations synchronously.

    Args:
        schema_name: If provided, runs tenant migrations for this schema.
                    If None, runs central schema migrations.
    """
    alembic_cfg = Config("alembic.ini")
    if schema_name:
        command.upgrade(alembic_cfg, "head", tag=schema_name)
    else:
        command.upgrade(alembic_cfg, "head")
