"""Redis client with connection pooling and graceful fallback.

Redis is optional. Tenant sessions fall back to in-process storage when it is
not configured or unreachable (see core/sessions.py).
"""

from redis.asyncio import ConnectionPool, Redis

from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.logging import get_logger

logger = get_logger(__name__)

_pool: ConnectionPool | None = None
_redis: Redis | None = None
_connection_attempted: bool = False


async def get_redis() -> Redis | None:
    """Get Redis client. Returns None if unavailable (graceful degradation).

    The connection is lazily initialized on first call and reused thereafter.
    """
    global _pool, _redis, _connection_attempted

    if _redis is not None:
        return _redis

    # Don't retry until close_redis() resets the flag
    if _connection_attempted:
        return None

    _connection_attempted = True
    settings = get_settings()

    if not settings.redis_url:
        logger.info("Redis not configured (REDIS_URL not set)")
        return None

    try:
        _pool = ConnectionPool.from_url(
            settings.redis_url,
            max_connections=settings.redis_pool_size,
            decode_responses=True,
        )
        _redis = Redis(connection_pool=_pool)
        await _redis.ping()  # type: ignore[misc]
        logger.info("Redis connected successfully")
        return _redis

    except Exception as e:
        logger.warning("Redis connection failed, falling back to in-process sessions", error=str(e))
        if _redis:
            await _redis.aclose()
            _redis = None
        if _pool:
            await _pool.disconnect()
            _pool = None
        return None


async def close_redis() -> None:
    """Close Redis connection pool. Called during application shutdown."""
    global _pool, _redis, _connection_attempted

    if _redis:
        await _redis.aclose()
        logger.info("Redis connection closed")
    if _pool:
        await _pool.disconnect()

    _redis = None
    _pool = None
    _connection_attempted = False


def reset_redis_state() -> None:
    """Reset Redis state for testing purposes."""
    global _pool, _redis, _connection_attempted
    _redis = None
    _pool = None
    _connection_attempted = False
