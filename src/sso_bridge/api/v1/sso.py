"""Browser-facing SSO endpoints: redirect, callback, redemption, logout."""

from fastapi import APIRouter, HTTPException, status
from starlette.requests import Request
from starlette.responses import RedirectResponse

from src.sso_bridge.api.cookies import end_browser_session, set_session_cookies
from src.sso_bridge.api.dependencies import (
    AuthorizationBuilderDep,
    CallbackProcessorDep,
    CurrentSession,
    CurrentTenant,
    HandoffDep,
    IdentityProviderDep,
    OptionalTenant,
)
from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.exceptions import ConfigurationError, SSOError
from src.sso_bridge.core.logging import get_logger
from src.sso_bridge.core.rate_limit import limiter
from src.sso_bridge.core.security import generate_csrf_token, tokens_match
from src.sso_bridge.core.sessions import create_session, destroy_session
from src.sso_bridge.core.urls import logged_out_url, login_url
from src.sso_bridge.models.base import utc_now
from src.sso_bridge.schemas.session import TenantSession

logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(tags=["sso"], include_in_schema=False)


@router.get(settings.sso_redirect_path)
@limiter.limit(settings.sso_rate_limit)
async def sso_redirect(
    request: Request, tenant: OptionalTenant, builder: AuthorizationBuilderDep
) -> RedirectResponse:
    """Send the browser to the identity provider, remembering the tenant in state."""
    try:
        url = builder.build(tenant)
    except ConfigurationError as e:
        logger.warning("SSO redirect refused", error_code=e.code, detail=e.detail)
        return RedirectResponse(login_url(None, e), status_code=status.HTTP_302_FOUND)
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get(settings.sso_callback_path)
@limiter.limit(settings.sso_rate_limit)
async def sso_callback(request: Request, processor: CallbackProcessorDep) -> RedirectResponse:
    """Identity provider callback. Always answers with a redirect."""
    outcome = await processor.process(dict(request.query_params))
    return RedirectResponse(outcome.redirect_url, status_code=status.HTTP_302_FOUND)


@router.get(settings.sso_redemption_path)
@limiter.limit(settings.sso_rate_limit)
async def redeem_handoff(
    request: Request,
    tenant: CurrentTenant,
    handoff: HandoffDep,
    code: str | None = None,
) -> RedirectResponse:
    """Exchange a one-time handoff code for a session on this tenant domain.

    This is the only place a tenant session is created.
    """
    try:
        redemption = await handoff.redeem(code, tenant)
    except SSOError as e:
        return RedirectResponse(login_url(tenant, e), status_code=status.HTTP_302_FOUND)

    # Never carry a previous principal's session across a new login
    await destroy_session(request.cookies.get(settings.session_cookie_name))

    now = utc_now()
    csrf_token = generate_csrf_token()
    tokens = redemption.tokens
    session_id = await create_session(
        TenantSession(
            user_id=redemption.user.id,
            tenant_id=tenant.id,
            email=redemption.user.email,
            external_subject_id=redemption.user.external_subject_id,
            csrf_token=csrf_token,
            provider_access_token=tokens.access_token if tokens else None,
            provider_refresh_token=tokens.refresh_token if tokens else None,
            provider_id_token=tokens.id_token if tokens else None,
            created_at=now,
            last_validated_at=now,
        )
    )

    response = RedirectResponse(redemption.target_path, status_code=status.HTTP_302_FOUND)
    set_session_cookies(response, session_id, csrf_token, settings)
    return response


@router.post(settings.logout_path)
async def logout(
    request: Request,
    tenant: CurrentTenant,
    auth_session: CurrentSession,
    idp: IdentityProviderDep,
) -> RedirectResponse:
    """End the local session, then the identity provider session."""
    if not tokens_match(auth_session.csrf_token, request.headers.get(settings.csrf_header_name)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid CSRF token",
        )

    await destroy_session(request.state.session_id)
    logger.info("User logged out")

    url = idp.end_session_url(
        post_logout_redirect_uri=logged_out_url(tenant),
        id_token_hint=auth_session.provider_id_token,
    )
    response = RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)
    end_browser_session(response, settings)
    return response


@router.get(settings.logged_out_path)
async def logged_out(request: Request, tenant: CurrentTenant) -> RedirectResponse:
    """Identity provider post-logout landing; drops anything left locally."""
    await destroy_session(request.cookies.get(settings.session_cookie_name))
    response = RedirectResponse(login_url(tenant), status_code=status.HTTP_302_FOUND)
    end_browser_session(response, settings)
    return response
