"""One-time handoff codes from the callback domain to a tenant domain."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.exceptions import (
    CodeAlreadyUsed,
    CodeExpired,
    CodeNotFound,
    NotAMember,
    SSOError,
    UserNotFound,
)
from src.sso_bridge.core.logging import code_fingerprint, get_logger
from src.sso_bridge.core.security import generate_handoff_code, hash_token, is_safe_target_path
from src.sso_bridge.models.base import utc_now
from src.sso_bridge.models.public import SSOHandoffCode, Tenant, User
from src.sso_bridge.repositories import HandoffCodeStore, MembershipRepository
from src.sso_bridge.schemas.sso import ProviderTokens
from src.sso_bridge.services.identity_service import IdentityResolver

logger = get_logger(__name__)


@dataclass(frozen=True)
class HandoffRedemption:
    user: User
    tenant: Tenant
    target_path: str
    tokens: ProviderTokens | None


class CrossDomainHandoff:
    """Issues and redeems single-use, short-lived handoff codes.

    Only the SHA-256 of a code is stored and logs carry a fingerprint, never
    the code itself.
    """

    def __init__(
        self,
        store: HandoffCodeStore,
        session: AsyncSession,
        identity: IdentityResolver,
        membership_repo: MembershipRepository,
        ttl_seconds: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.session = session
        self.identity = identity
        self.membership_repo = membership_repo
        self.ttl_seconds = ttl_seconds or get_settings().sso_code_ttl_seconds
        self.retention = timedelta(hours=get_settings().sso_code_retention_hours)
        self.clock = clock

    async def issue(
        self,
        user: User,
        tenant: Tenant,
        target_path: str,
        tokens: ProviderTokens | None = None,
    ) -> str:
        """Create a code for (user, tenant, target_path) and return it.

        Codes that expired unredeemed are swept in the same transaction.
        """
        if not is_safe_target_path(target_path):
            logger.warning("Rejected unsafe handoff target path", tenant_id=tenant.id)
            target_path = get_settings().sso_default_landing_path

        code = generate_handoff_code()
        now = self.clock()
        swept = await self.store.cleanup_expired(now, self.retention)
        if swept:
            logger.info("Expired SSO handoff codes deleted", count=swept)
        self.store.add(
            SSOHandoffCode(
                code_hash=hash_token(code),
                user_id=user.id,
                tenant_id=tenant.id,
                target_path=target_path,
                expires_at=now + timedelta(seconds=self.ttl_seconds),
                created_at=now,
                provider_access_token=tokens.access_token if tokens else None,
                provider_refresh_token=tokens.refresh_token if tokens else None,
                provider_id_token=tokens.id_token if tokens else None,
            )
        )
        await self.session.commit()

        logger.info(
            "SSO handoff code issued",
            code=code_fingerprint(code),
            user_id=str(user.id),
            tenant_id=tenant.id,
            expires_in=self.ttl_seconds,
        )
        return code

    async def redeem(self, code: str | None, tenant: Tenant) -> HandoffRedemption:
        """Consume ``code`` for ``tenant`` exactly once.

        Membership is re-checked because it may have been revoked between
        issue and redemption.

        Raises:
            CodeNotFound, CodeAlreadyUsed, CodeExpired: the code cannot be used.
            UserNotFound, NotAMember: the code was valid but access is gone.
        """
        if not code:
            raise CodeNotFound("no code supplied")

        code_hash = hash_token(code)
        now = self.clock()
        claim = await self.store.consume(code_hash, tenant.id, now)
        if claim is None:
            await self.session.rollback()
            error = await self._classify_failure(code_hash, tenant, now)
            logger.warning(
                "SSO handoff redemption refused",
                code=code_fingerprint(code),
                tenant_id=tenant.id,
                error_code=error.code,
            )
            raise error

        # Consumption and token scrub are durable before any further check
        await self.session.commit()

        user = await self.identity.by_id(claim.user_id)
        if user is None:
            raise UserNotFound(f"user {claim.user_id} no longer active")
        if not await self.membership_repo.exists(user.id, tenant.id):
            raise NotAMember(f"membership of {user.id} in {tenant.id} revoked before redemption")

        logger.info(
            "SSO handoff code redeemed",
            code=code_fingerprint(code),
            user_id=str(user.id),
            tenant_id=tenant.id,
        )
        return HandoffRedemption(
            user=user,
            tenant=tenant,
            target_path=claim.target_path,
            tokens=claim.tokens,
        )

    async def _classify_failure(self, code_hash: str, tenant: Tenant, now: datetime) -> SSOError:
        record = await self.store.get_by_hash(code_hash)
        if record is None or record.tenant_id != tenant.id:
            return CodeNotFound("no such code for this tenant")
        if record.consumed_at is not None:
            return CodeAlreadyUsed(f"consumed at {record.consumed_at.isoformat()}")
        if record.is_expired(now):
            return CodeExpired(f"expired at {record.expires_at.isoformat()}")
        return CodeAlreadyUsed("lost a concurrent redemption")
