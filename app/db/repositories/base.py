"""Базовый репозиторий."""

from typing import Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Базовый репозиторий для работы с БД."""

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    @property
    def _pk(self):
        return self.model.__mapper__.primary_key[0]

    async def get_by_id(self, id: str, for_update: bool = False) -> ModelType | None:
        """Получить запись по первичному ключу."""
        query = select(self.model).where(self._pk == id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists(self, id: str) -> bool:
        """Проверить существование записи."""
        result = await self.session.execute(select(self._pk).where(self._pk == id))
        return result.scalar_one_or_none() is not None

    async def add(self, instance: ModelType) -> ModelType:
        """Добавить запись."""
        self.session.add(instance)
        await self.session.flush()
        return instance
