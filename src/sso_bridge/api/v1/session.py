"""Current session endpoint."""

from fastapi import APIRouter

from src.sso_bridge.api.dependencies import CurrentSession, CurrentTenant
from src.sso_bridge.schemas.session import SessionRead

router = APIRouter(prefix="/session", tags=["session"])


@router.get(
    "",
    response_model=SessionRead,
    responses={401: {"description": "No session on this tenant domain"}},
)
async def read_session(auth_session: CurrentSession, tenant: CurrentTenant) -> SessionRead:
    """Return the principal of the current tenant session."""
    return SessionRead(
        user_id=auth_session.user_id,
        email=auth_session.email,
        tenant_id=tenant.id,
        tenant_name=tenant.name,
        created_at=auth_session.created_at,
    )
