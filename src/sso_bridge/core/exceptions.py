"""SSO error taxonomy and exception handlers with request_id in responses.

Every SSO failure carries a stable ``code`` (sent to the browser in the error
redirect), a generic ``user_message`` and a ``remediation`` hint. Diagnostic
details passed to the constructor only ever reach the structured logs.
"""

from enum import Enum

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.sso_bridge.core.logging import get_logger

logger = get_logger(__name__)


class Remediation(str, Enum):
    """What the user can do about an SSO failure."""

    RETRY = "retry"
    CONTACT_ADMIN = "contact_admin"


class SSOError(Exception):
    """Base class for all SSO bridge failures."""

    code: str = "sso_error"
    user_message: str = "Sign-in failed. Please try again."
    remediation: Remediation = Remediation.RETRY
    transient: bool = False

    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__(detail or self.code)


class ConfigurationError(SSOError):
    code = "configuration_error"
    user_message = "Single sign-on is not set up for this address. Ask your administrator."
    remediation = Remediation.CONTACT_ADMIN


class InvalidState(SSOError):
    code = "invalid_state"
    user_message = "Your sign-in request could not be verified. Please try again."


class UnknownTenant(SSOError):
    code = "unknown_tenant"
    user_message = "The practice you were signing in to could not be found. Ask your administrator."
    remediation = Remediation.CONTACT_ADMIN


class ProviderError(SSOError):
    code = "provider_error"
    user_message = "Authentication failed. Please try again."


class MissingParameters(SSOError):
    code = "missing_parameters"
    user_message = "The sign-in response was incomplete. Please try again."


class ExchangeFailed(SSOError):
    code = "exchange_failed"
    user_message = "Failed to authenticate. Please try again."


class MissingIdentity(SSOError):
    code = "missing_identity"
    user_message = "Your account details could not be read. Please try again."


class MissingSubject(SSOError):
    code = "missing_subject"
    user_message = "The identity provider returned no account identifier. Ask your administrator."
    remediation = Remediation.CONTACT_ADMIN


class UserNotFound(SSOError):
    code = "user_not_found"
    user_message = "Account not found. Please contact your administrator."
    remediation = Remediation.CONTACT_ADMIN


class NotAMember(SSOError):
    code = "not_a_member"
    user_message = (
        "This account does not have access to this practice. Please contact your administrator."
    )
    remediation = Remediation.CONTACT_ADMIN


class NoTenantAccount(SSOError):
    code = "no_tenant_account"
    user_message = "Your account has not been set up in this practice. Ask your administrator."
    remediation = Remediation.CONTACT_ADMIN


class CodeExpired(SSOError):
    code = "code_expired"
    user_message = "Your sign-in link has expired. Please sign in again."


class CodeAlreadyUsed(SSOError):
    code = "code_already_used"
    user_message = "This sign-in link has already been used. Please sign in again."


class CodeNotFound(SSOError):
    code = "code_not_found"
    user_message = "This sign-in link is not valid. Please sign in again."


class ProviderSessionExpired(SSOError):
    code = "session_expired"
    user_message = "Your single sign-on session has expired. Please log in again."


class UpstreamUnreachable(SSOError):
    code = "upstream_unreachable"
    user_message = "The identity provider could not be reached. Please try again shortly."
    transient = True


ALL_SSO_ERRORS: tuple[type[SSOError], ...] = (
    ConfigurationError,
    InvalidState,
    UnknownTenant,
    ProviderError,
    MissingParameters,
    ExchangeFailed,
    MissingIdentity,
    MissingSubject,
    UserNotFound,
    NotAMember,
    NoTenantAccount,
    CodeExpired,
    CodeAlreadyUsed,
    CodeNotFound,
    ProviderSessionExpired,
    UpstreamUnreachable,
)

_ERRORS_BY_CODE: dict[str, type[SSOError]] = {error.code: error for error in ALL_SSO_ERRORS}


def user_message_for(code: str | None) -> str | None:
    """Canonical user message for an error code; unknown codes have none."""
    error = _ERRORS_BY_CODE.get(code or "")
    return error.user_message if error else None


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=exc.headers,
        )

    @app.exception_handler(SSOError)
    async def sso_exception_handler(request: Request, exc: SSOError) -> JSONResponse:
        # SSO endpoints turn these into redirects; this covers the JSON surface.
        logger.warning(
            "SSO error outside redirect flow",
            error_code=exc.code,
            detail=exc.detail,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=503 if exc.transient else 400,
            content={
                "detail": exc.user_message,
                "error": exc.code,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
