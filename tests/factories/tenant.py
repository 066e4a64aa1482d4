"""Tenant factory for test data generation."""

from polyfactory import Use

from src.sso_bridge.models.enums import TenantStatus
from src.sso_bridge.models.public import Tenant
from tests.factories.base import BaseFactory, short_id, utc_now


def _slug() -> str:
    return f"practice_{short_id()}"


class TenantFactory(BaseFactory):
    """Factory for generating Tenant test data.

    Builds a routable tenant (ready, active) whose domain derives from its id
    unless one is given.
    """

    __model__ = Tenant

    id = Use(_slug)
    name = Use(lambda: f"Test Practice {short_id()}")
    domain = None
    status = TenantStatus.READY.value
    is_active = True
    created_at = Use(utc_now)
    deleted_at = None

    @classmethod
    def build(cls, **kwargs):
        tenant = super().build(**kwargs)
        if not tenant.domain:
            tenant.domain = f"{tenant.id.replace('_', '-')}.test"
        return tenant

    @classmethod
    def provisioning(cls, **kwargs):
        """Create a tenant in provisioning status."""
        return cls.build(status=TenantStatus.PROVISIONING.value, **kwargs)

    @classmethod
    def inactive(cls, **kwargs):
        return cls.build(is_active=False, **kwargs)

    @classmethod
    def deleted(cls, **kwargs):
        """Create a soft-deleted tenant."""
        return cls.build(deleted_at=utc_now(), **kwargs)
