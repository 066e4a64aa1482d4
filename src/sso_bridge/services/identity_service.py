"""Central user lookups (read-only)."""

from uuid import UUID

from src.sso_bridge.models.public import User
from src.sso_bridge.repositories import UserRepository


class IdentityResolver:
    """Resolves central users by IdP subject, email or id.

    Inactive users resolve as absent. Subject lookups are exact matches and
    never fall back to email.
    """

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def by_external_subject(self, subject: str | None) -> User | None:
        if not subject:
            return None
        return _active(await self.user_repo.get_by_external_subject(subject))

    async def by_email(self, email: str | None) -> User | None:
        if not email:
            return None
        return _active(await self.user_repo.get_by_email(email))

    async def by_id(self, user_id: UUID) -> User | None:
        return _active(await self.user_repo.get_by_id(user_id))


def _active(user: User | None) -> User | None:
    if user is None or not user.is_active:
        return None
    return user
