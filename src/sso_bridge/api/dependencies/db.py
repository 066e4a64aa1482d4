"""Database session dependencies - Lobby Pattern."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.sso_bridge.core.db import get_public_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """Get database session for the central schema (Lobby Pattern)."""
    async with get_public_session() as session:
        yield session


PublicDBSession = Annotated[AsyncSession, Depends(get_db_session)]
