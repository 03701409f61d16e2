"""Сервис для работы с пользователями."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import reviews_key, team_key
from app.core.exceptions import NotFoundException
from app.db.repositories.pr_repository import PRRepository
from app.db.repositories.user_repository import UserRepository
from app.domain.base_service import BaseService
from app.domain.reviewers.reassignment import ReviewerReassigner
from app.domain.reviewers.selector import RandomSource

logger = logging.getLogger(__name__)


class UserService(BaseService):
    """Сервис для работы с пользователями."""

    def __init__(self, session: AsyncSession, rng: Optional[RandomSource] = None):
        super().__init__(session, rng)
        self.user_repo = UserRepository(session)
        self.pr_repo = PRRepository(session)
        self.reassigner = ReviewerReassigner(session, self.selector, self.pr_repo, self.user_repo)

    async def set_is_active(self, user_id: str, is_active: bool) -> dict:
        """
        Установить флаг активности пользователя.
        При деактивации пользователь снимается со своих открытых PR так же,
        как при деактивации всей команды.
        """
        self._require(user_id=user_id)

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundException("User")
        was_active = user.is_active

        user = await self.user_repo.update_active(user_id, is_active)
        user_data = {
            "user_id": user.user_id,
            "username": user.username,
            "team_name": user.team_name,
            "is_active": user.is_active,
        }
        logger.info("user %s is_active=%s", user_id, is_active)

        affected = {user_id}
        if was_active and not is_active:
            await self.session.commit()
            released = await self.reassigner.release_reviewer(user_id)
            affected |= released.affected_user_ids
            logger.info(
                "user %s released from open PRs: reassigned=%d errors=%d",
                user_id,
                released.reassigned,
                released.errors,
            )

        cache_service = await self._get_cache_service()
        await cache_service.invalidate_reviews(*affected)
        await cache_service.delete(team_key(user_data["team_name"]))

        return {"user": user_data}

    async def get_reviews(self, user_id: str) -> dict:
        """PR'ы, где пользователь назначен ревьювером. Для неизвестного ID список пуст."""
        cache_service = await self._get_cache_service()
        cache_key = reviews_key(user_id)

        cached_result = await cache_service.get(cache_key)
        if cached_result is not None:
            return cached_result

        prs = await self.pr_repo.get_by_reviewer(user_id)
        result = {
            "user_id": user_id,
            "pull_requests": [
                {
                    "pull_request_id": pr.pull_request_id,
                    "pull_request_name": pr.pull_request_name,
                    "author_id": pr.author_id,
                    "status": pr.status,
                }
                for pr in prs
            ],
        }

        await cache_service.set(cache_key, result)
        return result
