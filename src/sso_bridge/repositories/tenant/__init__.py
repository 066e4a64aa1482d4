"""Tenant schema repositories."""

from src.sso_bridge.repositories.tenant.user import TenantUserRepository

__all__ = ["TenantUserRepository"]
