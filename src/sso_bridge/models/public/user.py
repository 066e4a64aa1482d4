"""Central user and membership models (Lobby Pattern)."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.sso_bridge.models.base import utc_now


class User(SQLModel, table=True):
    """Cross-tenant identity record.

    ``external_subject_id`` is the IdP ``sub`` claim and is only set for
    accounts that sign in through the identity provider.
    """

    __tablename__ = "users"
    __table_args__ = {"schema": "public"}

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    external_subject_id: str | None = Field(
        default=None, max_length=255, unique=True, index=True
    )
    full_name: str = Field(max_length=100)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class UserTenantMembership(SQLModel, table=True):
    """Existence of a row authorizes the user for the tenant."""

    __tablename__ = "user_tenant_membership"
    __table_args__ = {"schema": "public"}

    user_id: UUID = Field(foreign_key="public.users.id", primary_key=True)
    tenant_id: str = Field(foreign_key="public.tenants.id", primary_key=True, max_length=56)
    created_at: datetime = Field(default_factory=utc_now)
