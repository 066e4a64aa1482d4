"""Authenticated principal dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.sso_bridge.schemas.session import TenantSession


def get_optional_session(request: Request) -> TenantSession | None:
    return getattr(request.state, "auth_session", None)


def get_current_session(
    auth_session: Annotated[TenantSession | None, Depends(get_optional_session)],
) -> TenantSession:
    if auth_session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return auth_session


OptionalSession = Annotated[TenantSession | None, Depends(get_optional_session)]
CurrentSession = Annotated[TenantSession, Depends(get_current_session)]
