"""Базовый класс для сервисов."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import CacheService, get_cache
from app.core.exceptions import InvalidInputException
from app.domain.reviewers.selector import RandomSource, ReviewerSelector


class BaseService:
    """Базовый класс для всех сервисов."""

    def __init__(self, session: AsyncSession, rng: Optional[RandomSource] = None):
        self.session = session
        self.selector = ReviewerSelector(rng)

    async def _get_cache_service(self) -> CacheService:
        """Получить сервис кеширования."""
        redis_client = await get_cache()
        return CacheService(redis_client)

    @staticmethod
    def _require(**fields: str):
        """Отклонить пустые обязательные поля до обращения к БД."""
        for name, value in fields.items():
            if not value or not value.strip():
                raise InvalidInputException(name)
