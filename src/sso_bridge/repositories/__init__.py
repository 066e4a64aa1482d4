"""Repository layer - Lobby Pattern."""

from src.sso_bridge.repositories.base import BaseRepository
from src.sso_bridge.repositories.public import (
    HandoffCodeRepository,
    HandoffCodeStore,
    MembershipRepository,
    TenantRepository,
    UserRepository,
)
from src.sso_bridge.repositories.tenant import TenantUserRepository

__all__ = [
    "BaseRepository",
    "HandoffCodeRepository",
    "HandoffCodeStore",
    "MembershipRepository",
    "TenantRepository",
    "TenantUserRepository",
    "UserRepository",
]
