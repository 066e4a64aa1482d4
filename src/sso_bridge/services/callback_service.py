"""IdP callback processing: from authorization code to tenant handoff redirect."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.exceptions import (
    MissingParameters,
    MissingSubject,
    NoTenantAccount,
    NotAMember,
    ProviderError,
    SSOError,
    UnknownTenant,
    UserNotFound,
)
from src.sso_bridge.core.identity_provider import IdentityProviderClient
from src.sso_bridge.core.logging import bind_tenant_context, get_logger
from src.sso_bridge.core.security import StateCodec
from src.sso_bridge.core.tenant_context import TenantContext, TenantContextSwitcher
from src.sso_bridge.core.urls import callback_url, login_url, redemption_url
from src.sso_bridge.models.public import Tenant, User
from src.sso_bridge.repositories import MembershipRepository, TenantRepository, TenantUserRepository
from src.sso_bridge.schemas.sso import ProviderIdentity
from src.sso_bridge.services.handoff_service import CrossDomainHandoff
from src.sso_bridge.services.identity_extraction import IdentityExtractor
from src.sso_bridge.services.identity_service import IdentityResolver

logger = get_logger(__name__)


class CallbackState(str, Enum):
    RECEIVED_CALLBACK = "received_callback"
    STATE_DECODED = "state_decoded"
    TOKENS_EXCHANGED = "tokens_exchanged"
    IDENTITY_EXTRACTED = "identity_extracted"
    USER_RESOLVED = "user_resolved"
    MEMBERSHIP_VERIFIED = "membership_verified"
    TENANT_ACTIVATED = "tenant_activated"
    TENANT_USER_RESOLVED = "tenant_user_resolved"
    HANDOFF_ISSUED = "handoff_issued"
    REDIRECTED = "redirected"
    ERROR_REDIRECT = "error_redirect"


@dataclass
class CallbackOutcome:
    """Terminal result of one callback.

    ``reached`` is the last state entered before the terminal one.
    """

    redirect_url: str
    state: CallbackState
    reached: CallbackState
    transitions: list[CallbackState] = field(default_factory=list)
    tenant: Tenant | None = None
    error: SSOError | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is CallbackState.REDIRECTED


class CallbackProcessor:
    """Turns an IdP callback into a verified, tenant-scoped handoff redirect.

    Failures before the tenant is known redirect to the central login page;
    every later failure redirects to that tenant's own login page. Browsers
    only ever see generic messages, diagnostics go to the logs.
    """

    def __init__(
        self,
        *,
        idp: IdentityProviderClient,
        state_codec: StateCodec,
        tenant_repo: TenantRepository,
        identity: IdentityResolver,
        membership_repo: MembershipRepository,
        switcher: TenantContextSwitcher,
        handoff: CrossDomainHandoff,
        extractor: IdentityExtractor | None = None,
        tenant_user_repo_factory: Callable[[AsyncSession], TenantUserRepository] = (
            TenantUserRepository
        ),
        landing_path: str | None = None,
    ):
        self.idp = idp
        self.state_codec = state_codec
        self.tenant_repo = tenant_repo
        self.identity = identity
        self.membership_repo = membership_repo
        self.switcher = switcher
        self.handoff = handoff
        self.extractor = extractor or IdentityExtractor.default(idp)
        self.tenant_user_repo_factory = tenant_user_repo_factory
        self.landing_path = landing_path or get_settings().sso_default_landing_path

    async def process(self, params: Mapping[str, str]) -> CallbackOutcome:
        transitions = [CallbackState.RECEIVED_CALLBACK]
        tenant: Tenant | None = None

        try:
            oauth_state = self.state_codec.decode(params.get("state"))
            transitions.append(CallbackState.STATE_DECODED)

            tenant = await self.tenant_repo.get_routable(oauth_state.tenant_id)
            if tenant is None:
                raise UnknownTenant(f"tenant {oauth_state.tenant_id!r} not found or not routable")
            bind_tenant_context(tenant.id)

            if params.get("error"):
                raise ProviderError(
                    f"{params['error']}: {params.get('error_description') or 'no description'}"
                )

            code = params.get("code")
            if not code or not params.get("state"):
                raise MissingParameters("callback without authorization code")

            tokens = await self.idp.exchange_code(code, callback_url())
            transitions.append(CallbackState.TOKENS_EXCHANGED)

            identity = await self.extractor.extract(tokens)
            transitions.append(CallbackState.IDENTITY_EXTRACTED)

            if not identity.subject:
                raise MissingSubject("identity has no sub claim")

            user = await self.identity.by_external_subject(identity.subject)
            if user is None:
                raise UserNotFound("no active central user for subject")
            transitions.append(CallbackState.USER_RESOLVED)

            # Scoped to the tenant from state; other memberships are irrelevant
            if not await self.membership_repo.exists(user.id, tenant.id):
                raise NotAMember(f"user {user.id} is not a member of {tenant.id}")
            transitions.append(CallbackState.MEMBERSHIP_VERIFIED)

            async with self.switcher.activate(tenant) as context:
                transitions.append(CallbackState.TENANT_ACTIVATED)
                await self._sync_tenant_user(context, user, identity)
                transitions.append(CallbackState.TENANT_USER_RESOLVED)

            handoff_code = await self.handoff.issue(user, tenant, self.landing_path, tokens)
            transitions.append(CallbackState.HANDOFF_ISSUED)

            redirect = redemption_url(tenant, handoff_code)
            transitions.append(CallbackState.REDIRECTED)
            return CallbackOutcome(
                redirect_url=redirect,
                state=CallbackState.REDIRECTED,
                reached=CallbackState.HANDOFF_ISSUED,
                transitions=transitions,
                tenant=tenant,
            )

        except SSOError as e:
            logger.warning(
                "SSO callback failed",
                error_code=e.code,
                detail=e.detail,
                reached=transitions[-1].value,
                tenant_id=tenant.id if tenant else None,
            )
            reached = transitions[-1]
            transitions.append(CallbackState.ERROR_REDIRECT)
            return CallbackOutcome(
                redirect_url=login_url(tenant, e),
                state=CallbackState.ERROR_REDIRECT,
                reached=reached,
                transitions=transitions,
                tenant=tenant,
                error=e,
            )

    async def _sync_tenant_user(
        self, context: TenantContext, user: User, identity: ProviderIdentity
    ) -> None:
        """Require the tenant-local account and refresh its display name.

        Never creates the account.
        """
        tenant_user_repo = self.tenant_user_repo_factory(context.session)
        tenant_user = await tenant_user_repo.get_by_email(user.email)
        if tenant_user is None:
            raise NoTenantAccount(f"no tenant user for central user {user.id}")

        display_name = identity.display_name
        if display_name and display_name != tenant_user.name:
            tenant_user_repo.rename(tenant_user, display_name)
            await context.session.commit()
            logger.info("Tenant user name synced from identity provider")
