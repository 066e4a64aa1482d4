"""Per-request membership enforcement for the active tenant."""

from collections.abc import Awaitable, Callable

from asgi_correlation_id import correlation_id
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from src.sso_bridge.core.config import Settings, get_settings
from src.sso_bridge.core.logging import get_logger
from src.sso_bridge.services.access_service import check_tenant_access

logger = get_logger(__name__)

AccessCheck = Callable[[str, str], Awaitable[bool]]


class TenantAccessGuard(BaseHTTPMiddleware):
    """Rejects requests whose principal lost membership in the active tenant.

    Denial applies to this request only; ending the session is left to the
    caller. Central-domain and anonymous requests pass through.
    """

    def __init__(
        self,
        app: ASGIApp,
        access_check: AccessCheck | None = None,
        settings: Settings | None = None,
    ):
        super().__init__(app)
        self.access_check = access_check or check_tenant_access
        settings = settings or get_settings()
        # Login and logout flows run their own checks
        self.exempt_paths = frozenset(
            {
                settings.login_path,
                settings.logout_path,
                settings.logged_out_path,
                settings.sso_redirect_path,
                settings.sso_callback_path,
                settings.sso_redemption_path,
                "/health",
                "/metrics",
            }
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        tenant = getattr(request.state, "tenant", None)
        auth_session = getattr(request.state, "auth_session", None)
        if tenant is None or auth_session is None or request.url.path in self.exempt_paths:
            return await call_next(request)

        if not await self.access_check(auth_session.email, tenant.id):
            logger.warning("Tenant access denied, membership missing")
            return JSONResponse(
                status_code=403,
                content={
                    "detail": "This account no longer has access to this practice",
                    "request_id": correlation_id.get(),
                },
            )

        return await call_next(request)
