"""One-time SSO handoff codes bridging the callback domain to a tenant domain."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from src.sso_bridge.models.base import utc_now


class SSOHandoffCode(SQLModel, table=True):
    """Only the SHA-256 of the code is stored.

    ``consumed_at`` moves from NULL exactly once. Provider tokens are scrubbed
    in the same transaction that consumes the code.
    """

    __tablename__ = "sso_handoff_codes"
    __table_args__ = {"schema": "public"}

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    code_hash: str = Field(max_length=64, unique=True, index=True)
    user_id: UUID = Field(foreign_key="public.users.id", index=True)
    tenant_id: str = Field(foreign_key="public.tenants.id", max_length=56)
    target_path: str = Field(max_length=2048)
    expires_at: datetime = Field(index=True)
    consumed_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    provider_access_token: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    provider_refresh_token: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    provider_id_token: str | None = Field(default=None, sa_column=Column(Text, nullable=True))

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or utc_now())
