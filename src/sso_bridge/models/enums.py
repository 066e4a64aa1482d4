"""Shared enums for models."""

from enum import Enum


class TenantStatus(str, Enum):
    """Tenant provisioning status."""

    PROVISIONING = "provisioning"
    READY = "ready"
    FAILED = "failed"
