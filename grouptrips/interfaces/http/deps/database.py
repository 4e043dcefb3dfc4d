"""Database session dependency."""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from grouptrips.infrastructure.database.session import get_session


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


__all__ = ["get_db_session"]
