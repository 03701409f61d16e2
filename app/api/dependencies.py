"""Зависимости для API."""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db


async def get_session() -> AsyncIterator[AsyncSession]:
    """Сессия БД на время запроса; в тестах подменяется через dependency_overrides."""
    async for session in get_db():
        yield session
