"""Database utilities - engine, session, migrations."""

from src.sso_bridge.core.db.engine import dispose_engine, get_engine
from src.sso_bridge.core.db.migrations import run_migrations_sync
from src.sso_bridge.core.db.session import get_public_session, get_session, get_tenant_session

__all__ = [
    # Engine
    "dispose_engine",
    "get_engine",
    # Session
    "get_public_session",
    "get_session",
    "get_tenant_session",
    # Migrations
    "run_migrations_sync",
]
