"""Tenant-local user record."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.sso_bridge.models.base import utc_now


class TenantUser(SQLModel, table=True):
    """User record inside one tenant's schema.

    Note: No schema= argument in __table_args__ - relies on the search_path
    set by the tenant session. Rows are provisioned out-of-band and never
    created during login.
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    name: str = Field(max_length=200)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
