"""Security headers middleware (Helmet-style)."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.sso_bridge.core.config import Settings, get_settings


def no_cache_paths(settings: Settings) -> frozenset[str]:
    """Endpoints whose responses carry codes, sessions or principal data."""
    return frozenset(
        {
            settings.sso_redirect_path,
            settings.sso_callback_path,
            settings.sso_redemption_path,
            settings.logout_path,
            settings.logged_out_path,
            "/api/v1/session",
        }
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers to all responses (similar to Helmet.js)."""

    # Swagger UI needs inline scripts and CDN assets
    DEFAULT_CSP = (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' cdn.jsdelivr.net; "
        "img-src 'self' data: cdn.jsdelivr.net; "
        "frame-ancestors 'none'"
    )

    def __init__(
        self,
        app: ASGIApp,
        content_security_policy: str | None = None,
        strict_transport_security: str = "max-age=31536000; includeSubDomains",
        settings: Settings | None = None,
    ):
        super().__init__(app)
        csp = content_security_policy if content_security_policy is not None else self.DEFAULT_CSP
        self.headers: dict[str, str] = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            # Handoff codes sit in the redemption URL; keep them out of Referer
            "Referrer-Policy": "no-referrer",
            "X-Permitted-Cross-Domain-Policies": "none",
        }
        if csp:
            self.headers["Content-Security-Policy"] = csp
        if strict_transport_security:
            self.headers["Strict-Transport-Security"] = strict_transport_security
        self.no_cache_paths = no_cache_paths(settings or get_settings())

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        for header, value in self.headers.items():
            response.headers[header] = value

        if request.url.path in self.no_cache_paths:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"

        return response
