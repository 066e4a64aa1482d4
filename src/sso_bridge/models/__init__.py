"""SQLModel tables for the central schema and tenant schemas."""

from src.sso_bridge.models.enums import TenantStatus
from src.sso_bridge.models.public import SSOHandoffCode, Tenant, User, UserTenantMembership
from src.sso_bridge.models.tenant import TenantUser

__all__ = [
    "SSOHandoffCode",
    "Tenant",
    "TenantStatus",
    "TenantUser",
    "User",
    "UserTenantMembership",
]
