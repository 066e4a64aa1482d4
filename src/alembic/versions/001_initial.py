"""Central schema: tenants, users, memberships and SSO handoff codes

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op
from src.alembic.migration_utils import is_tenant_migration

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    if is_tenant_migration():
        return

    op.create_table(
        "tenants",
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=56), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("domain", sqlmodel.sql.sqltypes.AutoString(length=253), nullable=False),
        sa.Column(
            "status",
            sqlmodel.sql.sqltypes.AutoString(length=50),
            nullable=False,
            server_default="provisioning",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        schema="public",
    )
    op.create_index("ix_public_tenants_domain", "tenants", ["domain"], unique=True, schema="public")

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column(
            "external_subject_id", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True
        ),
        sa.Column("full_name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        schema="public",
    )
    op.create_index("ix_public_users_email", "users", ["email"], unique=True, schema="public")
    op.create_index(
        "ix_public_users_external_subject_id",
        "users",
        ["external_subject_id"],
        unique=True,
        schema="public",
    )

    op.create_table(
        "user_tenant_membership",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sqlmodel.sql.sqltypes.AutoString(length=56), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["public.users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tenant_id"], ["public.tenants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "tenant_id"),
        schema="public",
    )
    op.create_index(
        "ix_user_tenant_membership_tenant_id",
        "user_tenant_membership",
        ["tenant_id"],
        unique=False,
        schema="public",
    )

    op.create_table(
        "sso_handoff_codes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("code_hash", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sqlmodel.sql.sqltypes.AutoString(length=56), nullable=False),
        sa.Column("target_path", sqlmodel.sql.sqltypes.AutoString(length=2048), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("consumed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("provider_access_token", sa.Text(), nullable=True),
        sa.Column("provider_refresh_token", sa.Text(), nullable=True),
        sa.Column("provider_id_token", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["public.users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tenant_id"], ["public.tenants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        schema="public",
    )
    op.create_index(
        "ix_public_sso_handoff_codes_code_hash",
        "sso_handoff_codes",
        ["code_hash"],
        unique=True,
        schema="public",
    )
    op.create_index(
        "ix_public_sso_handoff_codes_user_id",
        "sso_handoff_codes",
        ["user_id"],
        unique=False,
        schema="public",
    )
    # Expired-code sweeps scan by expiry
    op.create_index(
        "ix_public_sso_handoff_codes_expires_at",
        "sso_handoff_codes",
        ["expires_at"],
        unique=False,
        schema="public",
    )


def downgrade() -> None:
    if is_tenant_migration():
        return

    op.drop_index(
        "ix_public_sso_handoff_codes_expires_at", table_name="sso_handoff_codes", schema="public"
    )
    op.drop_index(
        "ix_public_sso_handoff_codes_user_id", table_name="sso_handoff_codes", schema="public"
    )
    op.drop_index(
        "ix_public_sso_handoff_codes_code_hash", table_name="sso_handoff_codes", schema="public"
    )
    op.drop_table("sso_handoff_codes", schema="public")

    op.drop_index(
        "ix_user_tenant_membership_tenant_id",
        table_name="user_tenant_membership",
        schema="public",
    )
    op.drop_table("user_tenant_membership", schema="public")

    op.drop_index("ix_public_users_external_subject_id", table_name="users", schema="public")
    op.drop_index("ix_public_users_email", table_name="users", schema="public")
    op.drop_table("users", schema="public")

    op.drop_index("ix_public_tenants_domain", table_name="tenants", schema="public")
    op.drop_table("tenants", schema="public")
