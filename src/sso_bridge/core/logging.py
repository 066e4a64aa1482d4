"""Logging configuration using structlog."""

import logging
import sys
from hashlib import sha256
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars


def setup_logging(debug: bool = False) -> None:
    """Configure structlog for structured logging.

    Args:
        debug: If True, use colored console output. If False, use JSON for production.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors = shared_processors + [structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Token exchange and userinfo calls go through httpx
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None) -> None:
    """Bind the correlation ID to all subsequent log calls."""
    if request_id:
        bind_contextvars(request_id=request_id)


def bind_tenant_context(tenant_id: str) -> None:
    """Bind the active tenant to all subsequent log calls."""
    bind_contextvars(tenant_id=tenant_id)


def bind_user_context(user_id: UUID, email: str | None = None) -> None:
    """Bind the authenticated principal to all subsequent log calls.

    The email is only bound when settings.log_user_emails is True (GDPR compliance).
    """
    from src.sso_bridge.core.config import get_settings

    bind_contextvars(user_id=str(user_id))
    if email and get_settings().log_user_emails:
        bind_contextvars(user_email=email)


def clear_request_context() -> None:
    """Clear all request-scoped context."""
    clear_contextvars()


def code_fingerprint(code: str) -> str:
    """Short, non-reversible label for a one-time code, safe to log."""
    return sha256(code.encode()).hexdigest()[:12]
