"""Absolute URL construction for central and tenant domains."""

from urllib.parse import urlencode

from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.exceptions import SSOError
from src.sso_bridge.models.public import Tenant


def _origin(host: str) -> str:
    settings = get_settings()
    port = f":{settings.public_url_port}" if settings.public_url_port else ""
    return f"{settings.public_url_scheme}://{host}{port}"


def _with_query(url: str, query: dict[str, str] | None) -> str:
    if not query:
        return url
    return f"{url}?{urlencode(query)}"


def central_url(path: str, query: dict[str, str] | None = None) -> str:
    """URL on the primary central domain."""
    return _with_query(f"{_origin(get_settings().central_domains[0])}{path}", query)


def tenant_url(tenant: Tenant, path: str, query: dict[str, str] | None = None) -> str:
    return _with_query(f"{_origin(tenant.domain)}{path}", query)


def callback_url() -> str:
    """redirect_uri registered with the identity provider."""
    return central_url(get_settings().sso_callback_path)


def error_query(error: SSOError) -> dict[str, str]:
    return {"error": error.code}


def login_url(tenant: Tenant | None, error: SSOError | None = None) -> str:
    """Tenant login page, or the central one when no tenant is known."""
    path = get_settings().login_path
    query = error_query(error) if error else None
    if tenant is None:
        return central_url(path, query)
    return tenant_url(tenant, path, query)


def redemption_url(tenant: Tenant, code: str) -> str:
    return tenant_url(tenant, get_settings().sso_redemption_path, {"code": code})


def logged_out_url(tenant: Tenant) -> str:
    return tenant_url(tenant, get_settings().logged_out_path)
