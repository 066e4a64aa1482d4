"""Minimal JSON pages backing the out-of-scope frontend."""

from fastapi import APIRouter, status
from starlette.responses import RedirectResponse

from src.sso_bridge.api.dependencies import CurrentTenant, OptionalSession, OptionalTenant
from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.exceptions import user_message_for
from src.sso_bridge.schemas.session import DashboardRead, LoginPage

settings = get_settings()

router = APIRouter(tags=["pages"])


@router.get(settings.login_path, response_model=LoginPage)
async def login_page(tenant: OptionalTenant, error: str | None = None) -> LoginPage:
    """Login page data; on the central domain there is no SSO entry point.

    Only the error code is read from the query. The message shown is the one
    registered for that code, and unknown codes are dropped.
    """
    message = user_message_for(error)
    return LoginPage(
        tenant_id=tenant.id if tenant else None,
        tenant_name=tenant.name if tenant else None,
        sso_start_url=settings.sso_redirect_path if tenant else None,
        error=error if message else None,
        message=message,
    )


@router.get(settings.sso_default_landing_path, response_model=None)
async def dashboard(
    tenant: CurrentTenant, auth_session: OptionalSession
) -> DashboardRead | RedirectResponse:
    if auth_session is None:
        return RedirectResponse(settings.login_path, status_code=status.HTTP_302_FOUND)
    return DashboardRead(tenant_name=tenant.name, email=auth_session.email)
