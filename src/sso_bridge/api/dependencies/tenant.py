"""Active tenant dependencies (resolved from Host by middleware)."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.sso_bridge.models.public import Tenant


def get_optional_tenant(request: Request) -> Tenant | None:
    """Tenant for this domain, or None on the central domain."""
    return getattr(request.state, "tenant", None)


def get_current_tenant(
    tenant: Annotated[Tenant | None, Depends(get_optional_tenant)],
) -> Tenant:
    if tenant is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tenant not found",
        )
    return tenant


OptionalTenant = Annotated[Tenant | None, Depends(get_optional_tenant)]
CurrentTenant = Annotated[Tenant, Depends(get_current_tenant)]
