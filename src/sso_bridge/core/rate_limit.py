"""Rate limiting for the SSO endpoints with optional Redis backend.

Uses Redis for distributed rate limiting when REDIS_URL is configured.
Falls back to in-memory storage (per-process) when it is not.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.logging import get_logger

logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """Rate limit by client IP only.

    Never include user-controlled values (query parameters, Host) in the key:
    rotating them would mint unlimited fresh buckets.
    """
    return get_remote_address(request) or "unknown"


def create_limiter() -> Limiter:
    """Create rate limiter with appropriate storage backend.

    Disabled in testing environment.
    """
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Rate limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    if settings.redis_url:
        logger.info("Rate limiter using Redis backend")
        return Limiter(key_func=get_rate_limit_key, storage_uri=settings.redis_url)

    logger.info("Rate limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key)


# Reads settings at import time; reconfiguration requires a restart.
limiter = create_limiter()
