"""Сервис для работы со статистикой."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import STATS_KEY
from app.db.repositories.pr_repository import PRRepository
from app.db.repositories.user_repository import UserRepository
from app.domain.base_service import BaseService


class StatsService(BaseService):
    """Сервис для работы со статистикой."""

    def __init__(self, session: AsyncSession):
        super().__init__(session)
        self.user_repo = UserRepository(session)
        self.pr_repo = PRRepository(session)

    async def get_stats(self) -> dict:
        """Получить статистику по пользователям и PR."""
        cache_service = await self._get_cache_service()

        cached_result = await cache_service.get(STATS_KEY)
        if cached_result is not None:
            return cached_result

        result = {
            "users": await self.user_repo.get_all_with_stats(),
            "pull_requests": await self.pr_repo.get_stats(),
        }

        await cache_service.set(STATS_KEY, result)
        return result
