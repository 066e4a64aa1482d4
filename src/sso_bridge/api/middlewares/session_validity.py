"""Periodic re-validation of the upstream identity provider session."""

from datetime import timedelta

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from src.sso_bridge.api.cookies import end_browser_session
from src.sso_bridge.core.config import Settings, get_settings
from src.sso_bridge.core.exceptions import ProviderSessionExpired, UpstreamUnreachable
from src.sso_bridge.core.identity_provider import IdentityProviderClient
from src.sso_bridge.core.logging import get_logger
from src.sso_bridge.core.sessions import destroy_session, save_session
from src.sso_bridge.core.urls import login_url
from src.sso_bridge.models.base import utc_now
from src.sso_bridge.models.public import Tenant
from src.sso_bridge.schemas.session import TenantSession

logger = get_logger(__name__)

# Headers sent by XHR, Inertia and htmx partial requests
_PARTIAL_REQUEST_HEADERS = (
    "x-inertia",
    "x-inertia-partial-data",
    "x-inertia-partial-component",
    "hx-request",
)


def is_full_page_request(request: Request) -> bool:
    """True for top-level browser navigations only."""
    if request.method not in ("GET", "HEAD"):
        return False
    if "application/json" in request.headers.get("accept", "").lower():
        return False
    if request.headers.get("x-requested-with", "").lower() == "xmlhttprequest":
        return False
    return not any(header in request.headers for header in _PARTIAL_REQUEST_HEADERS)


class SessionValidityMonitor(BaseHTTPMiddleware):
    """Ends the local session once the IdP session is gone.

    Only full-page requests by IdP-linked principals are checked. If the IdP
    cannot be reached the request proceeds; this is the only place that fails
    open.
    """

    def __init__(self, app: ASGIApp, settings: Settings | None = None):
        super().__init__(app)
        self.settings = settings or get_settings()
        self.skip_paths = frozenset(
            {
                self.settings.logged_out_path,
                self.settings.login_path,
                self.settings.logout_path,
                self.settings.sso_redirect_path,
                self.settings.sso_callback_path,
                self.settings.sso_redemption_path,
                "/health",
                "/metrics",
            }
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self.skip_paths or not is_full_page_request(request):
            return await call_next(request)

        tenant: Tenant | None = getattr(request.state, "tenant", None)
        auth_session: TenantSession | None = getattr(request.state, "auth_session", None)
        if tenant is None or auth_session is None or not auth_session.external_subject_id:
            return await call_next(request)

        if not auth_session.provider_access_token:
            return await self._terminate(request, tenant, "no cached access token")

        if self._recently_validated(auth_session):
            return await call_next(request)

        idp: IdentityProviderClient = request.app.state.identity_provider
        try:
            claims = await idp.fetch_userinfo(auth_session.provider_access_token)
        except UpstreamUnreachable as e:
            logger.warning("Identity provider unreachable, skipping session check", reason=e.detail)
            return await call_next(request)

        if claims is None:
            return await self._terminate(request, tenant, "userinfo rejected access token")
        if claims.get("sub") not in (None, auth_session.external_subject_id):
            return await self._terminate(request, tenant, "userinfo subject mismatch")

        validated = auth_session.model_copy(update={"last_validated_at": utc_now()})
        await save_session(request.state.session_id, validated)
        request.state.auth_session = validated
        return await call_next(request)

    def _recently_validated(self, auth_session: TenantSession) -> bool:
        interval = self.settings.session_validity_check_interval_seconds
        if interval <= 0 or auth_session.last_validated_at is None:
            return False
        return utc_now() - auth_session.last_validated_at < timedelta(seconds=interval)

    async def _terminate(self, request: Request, tenant: Tenant, reason: str) -> Response:
        await destroy_session(request.state.session_id)
        request.state.auth_session = None
        logger.info("Provider session ended, local session destroyed", reason=reason)

        response = RedirectResponse(login_url(tenant, ProviderSessionExpired()), status_code=302)
        end_browser_session(response, self.settings)
        return response
