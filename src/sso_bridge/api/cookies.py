"""Tenant-domain cookie handling.

Cookies are host-only (no Domain attribute) so a session minted on one tenant
domain is never sent to another.
"""

from starlette.responses import Response

from src.sso_bridge.core.config import Settings, get_settings
from src.sso_bridge.core.security import generate_csrf_token


def set_session_cookies(
    response: Response, session_id: str, csrf_token: str, settings: Settings | None = None
) -> None:
    settings = settings or get_settings()
    response.set_cookie(
        settings.session_cookie_name,
        session_id,
        max_age=settings.session_ttl_minutes * 60,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=True,
        samesite="lax",
    )
    set_csrf_cookie(response, csrf_token, settings)


def set_csrf_cookie(response: Response, csrf_token: str, settings: Settings | None = None) -> None:
    """Readable by page scripts, which echo it back in the CSRF header."""
    settings = settings or get_settings()
    response.set_cookie(
        settings.csrf_cookie_name,
        csrf_token,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=False,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    response.delete_cookie(
        settings.session_cookie_name,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=True,
        samesite="lax",
    )


def end_browser_session(response: Response, settings: Settings | None = None) -> None:
    """Drop the session cookie and rotate the anti-forgery token."""
    clear_session_cookie(response, settings)
    set_csrf_cookie(response, generate_csrf_token(), settings)
