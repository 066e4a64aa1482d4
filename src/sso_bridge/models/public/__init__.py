"""Central schema models - Lobby Pattern.

Identity, membership and handoff records live here.
Tenant-specific data models go in models/tenant/.
"""

from src.sso_bridge.models.enums import TenantStatus
from src.sso_bridge.models.public.handoff import SSOHandoffCode
from src.sso_bridge.models.public.tenant import Tenant
from src.sso_bridge.models.public.user import User, UserTenantMembership

__all__ = [
    "SSOHandoffCode",
    "Tenant",
    "TenantStatus",
    "User",
    "UserTenantMembership",
]
