"""Tenant model - registry in the central schema."""

from datetime import datetime

from sqlmodel import Field, SQLModel

from src.sso_bridge.core.security.validators import (
    MAX_TENANT_SLUG_LENGTH,
    slug_to_schema_name,
    validate_schema_name,
)
from src.sso_bridge.models.base import utc_now
from src.sso_bridge.models.enums import TenantStatus


class Tenant(SQLModel, table=True):
    """A practice workspace with its own domain and data schema.

    ``id`` is the routable slug; it travels in the OAuth state and never changes.
    """

    __tablename__ = "tenants"
    __table_args__ = {"schema": "public"}

    id: str = Field(max_length=MAX_TENANT_SLUG_LENGTH, primary_key=True)
    name: str = Field(max_length=100)
    domain: str = Field(max_length=253, unique=True, index=True)
    status: str = Field(default=TenantStatus.PROVISIONING.value, max_length=50)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = Field(default=None)

    @property
    def schema_name(self) -> str:
        """Schema holding this tenant's data, e.g. 'tenant_acme_dental'.

        Raises:
            ValueError: If the resulting schema name is invalid.
        """
        name = slug_to_schema_name(self.id)
        validate_schema_name(name)
        return name

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def accepts_logins(self) -> bool:
        """Soft-deleted, inactive and unprovisioned tenants resolve as absent."""
        return not self.is_deleted and self.is_active and self.status == TenantStatus.READY.value
