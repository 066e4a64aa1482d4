"""Security validators for tenant identifiers and redirect targets."""

import re
from typing import Final
from urllib.parse import urlsplit

MAX_SCHEMA_LENGTH: Final[int] = 63  # PostgreSQL identifier limit
TENANT_SCHEMA_PREFIX: Final[str] = "tenant_"
MAX_TENANT_SLUG_LENGTH: Final[int] = MAX_SCHEMA_LENGTH - len(TENANT_SCHEMA_PREFIX)  # 56
TENANT_SLUG_REGEX: Final[str] = r"^[a-z][a-z0-9]*([-_][a-z0-9]+)*$"
TENANT_SCHEMA_REGEX: Final[str] = rf"^{TENANT_SCHEMA_PREFIX}[a-z][a-z0-9]*(_[a-z0-9]+)*$"
MAX_TARGET_PATH_LENGTH: Final[int] = 2048

_TENANT_SLUG_PATTERN: Final[re.Pattern[str]] = re.compile(TENANT_SLUG_REGEX)
_TENANT_SCHEMA_PATTERN: Final[re.Pattern[str]] = re.compile(TENANT_SCHEMA_REGEX)


def validate_tenant_slug_format(slug: str) -> str:
    """Validate tenant id (slug) format.

    Tenant ids travel through the OAuth state and become schema names, so they
    are held to the same character set as the schema.
    """
    if len(slug) > MAX_TENANT_SLUG_LENGTH:
        raise ValueError(f"Slug exceeds {MAX_TENANT_SLUG_LENGTH} characters")
    if not _TENANT_SLUG_PATTERN.match(slug):
        raise ValueError(
            "Slug must start with a letter and contain only lowercase letters, numbers, "
            "and single hyphens or underscores as separators"
        )
    return slug


def is_valid_tenant_slug(slug: str) -> bool:
    try:
        validate_tenant_slug_format(slug)
    except ValueError:
        return False
    return True


def slug_to_schema_name(slug: str) -> str:
    """Convert a tenant slug to a PostgreSQL schema name.

    Hyphens are converted to underscores for PostgreSQL compatibility.
    E.g., 'acme-dental' -> 'tenant_acme_dental'
    """
    return f"{TENANT_SCHEMA_PREFIX}{slug.replace('-', '_')}"


def validate_schema_name(schema_name: str) -> None:
    """Validate schema name follows strict tenant naming convention.

    Schema names must:
    - Start with 'tenant_' prefix
    - Contain only lowercase letters, numbers, and single underscores as separators
    - Not exceed 63 characters (PostgreSQL limit)
    - Not contain forbidden patterns

    Raises:
        ValueError: If schema name is invalid

    Examples:
        >>> validate_schema_name("tenant_acme")  # Valid
        >>> validate_schema_name("acme")  # Invalid - missing prefix
        >>> validate_schema_name("tenant__acme")  # Invalid - consecutive underscores
    """
    if len(schema_name) > MAX_SCHEMA_LENGTH:
        raise ValueError(
            f"Schema name exceeds PostgreSQL limit: {len(schema_name)} > {MAX_SCHEMA_LENGTH}"
        )

    if not _TENANT_SCHEMA_PATTERN.match(schema_name):
        raise ValueError(
            f"Invalid schema name format: {schema_name}. "
            "Must be 'tenant_' followed by lowercase alphanumeric "
            "with single underscores as separators."
        )

    forbidden = ["pg_", "information_schema", "public", "--", ";", "/*", "*/"]
    if any(pattern in schema_name.lower() for pattern in forbidden):
        raise ValueError(f"Schema name contains forbidden pattern: {schema_name}")


def is_safe_target_path(path: str) -> bool:
    """Check that a post-login target stays on the current host.

    Only local absolute paths are accepted: no scheme, no host, no
    protocol-relative '//' prefix and no backslashes (browsers treat '\\' as '/').
    """
    if not path or len(path) > MAX_TARGET_PATH_LENGTH:
        return False
    if not path.startswith("/") or path.startswith("//") or "\\" in path:
        return False
    if any(ord(char) < 0x20 for char in path):
        return False
    parts = urlsplit(path)
    return not parts.scheme and not parts.netloc
