"""Central schema repositories.

Identity, membership and handoff repositories live here.
Tenant-specific repositories go in repositories/tenant/.
"""

from src.sso_bridge.repositories.public.handoff import HandoffCodeRepository, HandoffCodeStore
from src.sso_bridge.repositories.public.membership import MembershipRepository
from src.sso_bridge.repositories.public.tenant import TenantRepository
from src.sso_bridge.repositories.public.user import UserRepository

__all__ = [
    "HandoffCodeRepository",
    "HandoffCodeStore",
    "MembershipRepository",
    "TenantRepository",
    "UserRepository",
]
