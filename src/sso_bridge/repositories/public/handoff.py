"""Repository for SSO handoff codes."""

from datetime import datetime, timedelta
from typing import Protocol

from sqlalchemy import delete, or_, update
from sqlmodel import select

from src.sso_bridge.models.public import SSOHandoffCode
from src.sso_bridge.repositories.base import BaseRepository
from src.sso_bridge.schemas.sso import ClaimedHandoff, ProviderTokens


class HandoffCodeStore(Protocol):
    """Storage seam for handoff codes.

    ``consume`` must be atomic: of any number of concurrent calls for the
    same code, at most one gets a result.
    """

    def add(self, entity: SSOHandoffCode) -> None: ...

    async def consume(
        self, code_hash: str, tenant_id: str, now: datetime
    ) -> ClaimedHandoff | None: ...

    async def get_by_hash(self, code_hash: str) -> SSOHandoffCode | None: ...

    async def cleanup_expired(self, now: datetime, retention: timedelta) -> int: ...


class HandoffCodeRepository(BaseRepository[SSOHandoffCode]):
    """SQL-backed handoff code store in the central schema."""

    model = SSOHandoffCode

    async def get_by_hash(self, code_hash: str) -> SSOHandoffCode | None:
        result = await self.session.execute(
            select(SSOHandoffCode).where(SSOHandoffCode.code_hash == code_hash)
        )
        return result.scalar_one_or_none()

    async def consume(
        self, code_hash: str, tenant_id: str, now: datetime
    ) -> ClaimedHandoff | None:
        """Mark the code consumed if it is unused, unexpired and for this tenant.

        A single conditional UPDATE decides the winner; the row lock it takes is
        held until commit, so the token scrub below lands in the same transaction.
        """
        claim = (
            update(SSOHandoffCode)
            .where(
                SSOHandoffCode.code_hash == code_hash,
                SSOHandoffCode.tenant_id == tenant_id,
                SSOHandoffCode.consumed_at.is_(None),  # type: ignore[union-attr]
                SSOHandoffCode.expires_at > now,
            )
            .values(consumed_at=now)
            .returning(
                SSOHandoffCode.id,
                SSOHandoffCode.user_id,
                SSOHandoffCode.tenant_id,
                SSOHandoffCode.target_path,
                SSOHandoffCode.provider_access_token,
                SSOHandoffCode.provider_refresh_token,
                SSOHandoffCode.provider_id_token,
            )
            .execution_options(synchronize_session=False)
        )
        row = (await self.session.execute(claim)).first()
        if row is None:
            return None

        await self.session.execute(
            update(SSOHandoffCode)
            .where(SSOHandoffCode.id == row.id)
            .values(
                provider_access_token=None,
                provider_refresh_token=None,
                provider_id_token=None,
            )
            .execution_options(synchronize_session=False)
        )

        tokens = None
        if row.provider_access_token:
            tokens = ProviderTokens(
                access_token=row.provider_access_token,
                refresh_token=row.provider_refresh_token,
                id_token=row.provider_id_token,
            )
        return ClaimedHandoff(
            user_id=row.user_id,
            tenant_id=row.tenant_id,
            target_path=row.target_path,
            tokens=tokens,
        )

    async def cleanup_expired(self, now: datetime, retention: timedelta) -> int:
        """Scrub provider tokens from expired codes and delete codes past retention.

        Tokens of a code nobody redeemed never outlive its expiry. The rows
        themselves stay for ``retention`` so a late replay is still reported as
        used or expired rather than unknown.

        Returns:
            Number of codes deleted
        """
        await self.session.execute(
            update(SSOHandoffCode)
            .where(
                SSOHandoffCode.expires_at <= now,
                or_(
                    SSOHandoffCode.provider_access_token.is_not(None),  # type: ignore[union-attr]
                    SSOHandoffCode.provider_refresh_token.is_not(None),  # type: ignore[union-attr]
                    SSOHandoffCode.provider_id_token.is_not(None),  # type: ignore[union-attr]
                ),
            )
            .values(
                provider_access_token=None,
                provider_refresh_token=None,
                provider_id_token=None,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            delete(SSOHandoffCode)
            .where(SSOHandoffCode.expires_at < now - retention)  # type: ignore[arg-type]
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
