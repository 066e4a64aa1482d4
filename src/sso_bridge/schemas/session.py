"""Tenant-domain session schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class TenantSession(BaseModel):
    """Server-side session record for one tenant domain.

    Provider tokens live here and are never sent to the browser.
    """

    user_id: UUID
    tenant_id: str
    email: str
    external_subject_id: str | None = None
    csrf_token: str
    provider_access_token: str | None = None
    provider_refresh_token: str | None = None
    provider_id_token: str | None = None
    created_at: datetime
    last_validated_at: datetime | None = None


class SessionRead(BaseModel):
    """Public view of the current principal."""

    user_id: UUID
    email: str
    tenant_id: str
    tenant_name: str
    created_at: datetime


class LoginPage(BaseModel):
    """Data for the login page rendered by the frontend."""

    tenant_id: str | None
    tenant_name: str | None
    sso_start_url: str | None
    error: str | None = None
    message: str | None = None


class DashboardRead(BaseModel):
    tenant_name: str
    email: str
