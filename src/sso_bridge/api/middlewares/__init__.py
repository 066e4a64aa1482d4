"""Application middlewares."""

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI

from src.sso_bridge.core.config import Settings

from .access_guard import TenantAccessGuard
from .logging_context import logging_context_middleware
from .security_headers import SecurityHeadersMiddleware
from .session_validity import SessionValidityMonitor, is_full_page_request
from .tenant_resolution import TenantResolutionMiddleware
from .tenant_session import TenantSessionMiddleware

__all__ = [
    "setup_middlewares",
    "SecurityHeadersMiddleware",
    "SessionValidityMonitor",
    "TenantAccessGuard",
    "TenantResolutionMiddleware",
    "TenantSessionMiddleware",
    "is_full_page_request",
    "logging_context_middleware",
]


def setup_middlewares(app: FastAPI, settings: Settings) -> None:
    """Configure all application middlewares.

    Starlette wraps in reverse registration order: the last one added is the
    outermost. Request flow is CorrelationId -> SecurityHeaders -> logging
    context -> tenant resolution -> session loading -> validity monitor ->
    access guard -> route.
    """
    app.add_middleware(TenantAccessGuard, settings=settings)
    app.add_middleware(SessionValidityMonitor, settings=settings)
    app.add_middleware(TenantSessionMiddleware, settings=settings)
    app.add_middleware(TenantResolutionMiddleware, settings=settings)

    @app.middleware("http")
    async def _logging_context(request, call_next):  # type: ignore[no-untyped-def]
        return await logging_context_middleware(request, call_next)

    csp = None
    if not settings.enable_openapi and settings.csp_production:
        csp = settings.csp_production
    app.add_middleware(SecurityHeadersMiddleware, content_security_policy=csp, settings=settings)

    app.add_middleware(CorrelationIdMiddleware)
