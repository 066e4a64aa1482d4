"""Maps the request Host to the tenant it serves."""

from collections.abc import Awaitable, Callable

from asgi_correlation_id import correlation_id
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from src.sso_bridge.core.config import Settings, get_settings
from src.sso_bridge.core.db import get_public_session
from src.sso_bridge.core.logging import bind_tenant_context, get_logger
from src.sso_bridge.models.public import Tenant
from src.sso_bridge.repositories import TenantRepository

logger = get_logger(__name__)

TenantLookup = Callable[[str], Awaitable[Tenant | None]]

_UNSCOPED_PATHS = frozenset({"/health", "/metrics"})


async def lookup_tenant_by_domain(domain: str) -> Tenant | None:
    async with get_public_session() as session:
        return await TenantRepository(session).get_by_domain(domain)


class TenantResolutionMiddleware(BaseHTTPMiddleware):
    """Sets ``request.state.tenant``.

    Central domains resolve to no tenant. Unknown hosts get a 404 before any
    route runs.
    """

    def __init__(
        self,
        app: ASGIApp,
        tenant_lookup: TenantLookup | None = None,
        settings: Settings | None = None,
    ):
        super().__init__(app)
        self.tenant_lookup = tenant_lookup or lookup_tenant_by_domain
        self.central_domains = frozenset((settings or get_settings()).central_domains)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.tenant = None
        if request.url.path in _UNSCOPED_PATHS:
            return await call_next(request)

        host = (request.url.hostname or "").lower()
        if host in self.central_domains:
            return await call_next(request)

        tenant = await self.tenant_lookup(host) if host else None
        if tenant is None:
            logger.info("Request for unknown tenant host", host=host)
            return JSONResponse(
                status_code=404,
                content={"detail": "Tenant not found", "request_id": correlation_id.get()},
            )

        request.state.tenant = tenant
        bind_tenant_context(tenant.id)
        return await call_next(request)
