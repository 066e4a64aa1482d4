"""Tenant schema models."""

from src.sso_bridge.models.tenant.user import TenantUser

__all__ = ["TenantUser"]
