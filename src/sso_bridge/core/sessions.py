"""Tenant-domain session storage with Redis backend and in-process fallback.

The browser only ever holds an opaque session id. Redis keys use the SHA-256 of
that id so a leaked keyspace dump cannot be replayed as cookies.
"""

import secrets
import time

from src.sso_bridge.core.config import get_settings
from src.sso_bridge.core.logging import get_logger
from src.sso_bridge.core.redis import get_redis
from src.sso_bridge.core.security.tokens import hash_token
from src.sso_bridge.schemas.session import TenantSession

logger = get_logger(__name__)

PREFIX_SESSION = "session"

# Fallback storage when Redis is unavailable: key -> (expires_at, payload)
_memory_sessions: dict[str, tuple[float, str]] = {}


def _key(session_id: str) -> str:
    return f"{PREFIX_SESSION}:{hash_token(session_id)}"


def _ttl_seconds() -> int:
    return get_settings().session_ttl_minutes * 60


async def create_session(data: TenantSession) -> str:
    """Store a new session and return its opaque id (the cookie value)."""
    session_id = secrets.token_urlsafe(32)
    await _write(session_id, data, _ttl_seconds())
    return session_id


async def load_session(session_id: str | None) -> TenantSession | None:
    """Load a session. Unknown, expired or corrupt records return None."""
    if not session_id:
        return None

    redis = await get_redis()
    if redis:
        raw = await redis.get(_key(session_id))
    else:
        entry = _memory_sessions.get(_key(session_id))
        raw = None
        if entry is not None:
            expires_at, payload = entry
            if expires_at > time.time():
                raw = payload
            else:
                _memory_sessions.pop(_key(session_id), None)

    if raw is None:
        return None
    try:
        return TenantSession.model_validate_json(raw)
    except ValueError:
        logger.warning("Discarding unreadable session record")
        await destroy_session(session_id)
        return None


async def save_session(session_id: str, data: TenantSession) -> None:
    """Overwrite an existing session, keeping its remaining lifetime."""
    redis = await get_redis()
    if redis:
        remaining = await redis.ttl(_key(session_id))
        ttl = remaining if remaining and remaining > 0 else _ttl_seconds()
    else:
        entry = _memory_sessions.get(_key(session_id))
        ttl = int(entry[0] - time.time()) if entry else _ttl_seconds()
        ttl = max(ttl, 1)
    await _write(session_id, data, ttl)


async def destroy_session(session_id: str | None) -> None:
    if not session_id:
        return
    redis = await get_redis()
    if redis:
        await redis.delete(_key(session_id))
    else:
        _memory_sessions.pop(_key(session_id), None)


async def _write(session_id: str, data: TenantSession, ttl: int) -> None:
    payload = data.model_dump_json()
    redis = await get_redis()
    if redis:
        await redis.setex(_key(session_id), ttl, payload)
    else:
        now = time.time()
        _prune_memory_sessions(now)
        _memory_sessions[_key(session_id)] = (now + ttl, payload)


def _prune_memory_sessions(now: float) -> None:
    expired = [key for key, (expires_at, _) in _memory_sessions.items() if expires_at <= now]
    for key in expired:
        del _memory_sessions[key]


def reset_memory_sessions() -> None:
    """Clear the in-process fallback store (for testing)."""
    _memory_sessions.clear()
