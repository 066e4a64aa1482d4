"""Loads the tenant-domain session from its cookie."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.sso_bridge.core.config import Settings, get_settings
from src.sso_bridge.core.logging import bind_user_context, get_logger
from src.sso_bridge.core.sessions import load_session

logger = get_logger(__name__)


class TenantSessionMiddleware(BaseHTTPMiddleware):
    """Sets ``request.state.session_id`` and ``request.state.auth_session``.

    A session is only honoured on the domain of the tenant it was minted for.
    """

    def __init__(self, app: ASGIApp, settings: Settings | None = None):
        super().__init__(app)
        self.settings = settings or get_settings()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.session_id = None
        request.state.auth_session = None

        tenant = getattr(request.state, "tenant", None)
        session_id = request.cookies.get(self.settings.session_cookie_name)
        if tenant is None or not session_id:
            return await call_next(request)

        auth_session = await load_session(session_id)
        if auth_session is not None and auth_session.tenant_id == tenant.id:
            request.state.session_id = session_id
            request.state.auth_session = auth_session
            bind_user_context(auth_session.user_id, auth_session.email)
        elif auth_session is not None:
            logger.warning(
                "Ignoring session minted for another tenant",
                session_tenant_id=auth_session.tenant_id,
            )

        return await call_next(request)
