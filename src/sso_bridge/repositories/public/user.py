"""Repository for central User entity."""

from sqlmodel import select

from src.sso_bridge.models.public import User
from src.sso_bridge.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entity in the central schema."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_external_subject(self, subject: str) -> User | None:
        """Exact match on the IdP subject; never falls back to email."""
        result = await self.session.execute(
            select(User).where(User.external_subject_id == subject)
        )
        return result.scalar_one_or_none()
