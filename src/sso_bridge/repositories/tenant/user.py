"""Repository for tenant-local users."""

from sqlmodel import select

from src.sso_bridge.models.base import utc_now
from src.sso_bridge.models.tenant import TenantUser
from src.sso_bridge.repositories.base import BaseRepository


class TenantUserRepository(BaseRepository[TenantUser]):
    """Reads and updates ``users`` in whichever tenant schema the session is bound to."""

    model = TenantUser

    async def get_by_email(self, email: str) -> TenantUser | None:
        result = await self.session.execute(select(TenantUser).where(TenantUser.email == email))
        return result.scalar_one_or_none()

    def rename(self, user: TenantUser, name: str) -> None:
        """Set the display name (add to session, no commit)."""
        user.name = name
        user.updated_at = utc_now()
        self.session.add(user)
