"""Pydantic schemas."""

from src.sso_bridge.schemas.session import DashboardRead, LoginPage, SessionRead, TenantSession
from src.sso_bridge.schemas.sso import ClaimedHandoff, ProviderIdentity, ProviderTokens

__all__ = [
    "ClaimedHandoff",
    "DashboardRead",
    "LoginPage",
    "ProviderIdentity",
    "ProviderTokens",
    "SessionRead",
    "TenantSession",
]
