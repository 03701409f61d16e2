"""Сервис для работы с командами."""

import logging
import time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import team_key
from app.core.exceptions import NotFoundException, TeamExistsException
from app.db.models import Team, User
from app.db.repositories.pr_repository import PRRepository
from app.db.repositories.team_repository import TeamRepository
from app.db.repositories.user_repository import UserRepository
from app.domain.base_service import BaseService
from app.domain.reviewers.reassignment import ReviewerReassigner
from app.domain.reviewers.selector import RandomSource
from app.schemas.team import TeamMemberSchema

logger = logging.getLogger(__name__)


class TeamService(BaseService):
    """Сервис для работы с командами."""

    def __init__(self, session: AsyncSession, rng: Optional[RandomSource] = None):
        super().__init__(session, rng)
        self.team_repo = TeamRepository(session)
        self.user_repo = UserRepository(session)
        self.reassigner = ReviewerReassigner(
            session, self.selector, PRRepository(session), self.user_repo
        )

    async def create_team(self, team_name: str, members: list[dict]) -> dict:
        """Создать команду; существующие пользователи переводятся в нее."""
        self._require(team_name=team_name)

        if await self.team_repo.exists(team_name):
            raise TeamExistsException()

        await self.team_repo.add(Team(team_name=team_name))

        cache_service = await self._get_cache_service()
        moved_from = set()
        for member_data in members:
            member = TeamMemberSchema(**member_data)
            user = await self.user_repo.get_by_id(member.user_id)
            if user:
                moved_from.add(user.team_name)
                user.username = member.username
                user.is_active = member.is_active
                user.team_name = team_name
            else:
                self.session.add(
                    User(
                        user_id=member.user_id,
                        username=member.username,
                        team_name=team_name,
                        is_active=member.is_active,
                    )
                )
        await self.session.flush()
        logger.info("team %s created with %d members", team_name, len(members))

        await cache_service.delete(*(team_key(name) for name in moved_from | {team_name}))
        await cache_service.invalidate_reviews()

        team = await self.team_repo.get_by_name(team_name, load_members=True)
        team_data = self._team_to_schema(team)
        await cache_service.set(team_key(team_name), team_data)

        return {"team": team_data}

    async def get_team(self, team_name: str) -> dict:
        """Получить команду с участниками."""
        cache_service = await self._get_cache_service()
        cached_result = await cache_service.get(team_key(team_name))
        if cached_result is not None:
            return {"team": cached_result}

        team = await self.team_repo.get_by_name(team_name, load_members=True)
        if not team:
            raise NotFoundException("Team")

        team_data = self._team_to_schema(team)
        await cache_service.set(team_key(team_name), team_data)

        return {"team": team_data}

    async def bulk_deactivate_team(self, team_name: str) -> dict:
        """
        Деактивировать всех активных участников команды и освободить их открытые PR.

        Деактивация выполняется одним запросом и фиксируется сразу. Затем
        PR обрабатываются по одному: ревьювер заменяется по той же цепочке
        поиска, что и при ручном переназначении, а если кандидатов нет,
        снимается без замены (это успех, а не ошибка). Сбой на отдельном PR
        учитывается в error_count и не прерывает операцию.
        """
        self._require(team_name=team_name)
        started = time.perf_counter()

        members = await self.user_repo.get_team_members(team_name)
        if not members:
            raise NotFoundException("Team")

        result = {
            "team_name": team_name,
            "deactivated_user_ids": [],
            "reassigned_count": 0,
            "error_count": 0,
        }
        if not any(member.is_active for member in members):
            logger.info("team %s has no active members to deactivate", team_name)
            return result

        deactivated_ids = await self.user_repo.bulk_deactivate_team_members(team_name)
        await self.session.commit()
        result["deactivated_user_ids"] = deactivated_ids
        logger.info("team %s: deactivated %d members", team_name, len(deactivated_ids))

        affected = set(deactivated_ids)
        for user_id in deactivated_ids:
            released = await self.reassigner.release_reviewer(user_id)
            result["reassigned_count"] += released.reassigned
            result["error_count"] += released.errors
            affected |= released.affected_user_ids

        cache_service = await self._get_cache_service()
        await cache_service.invalidate_reviews(*affected)
        await cache_service.delete(team_key(team_name))

        logger.info(
            "team %s bulk deactivation done: deactivated=%d reassigned=%d errors=%d in %.1fms",
            team_name,
            len(deactivated_ids),
            result["reassigned_count"],
            result["error_count"],
            (time.perf_counter() - started) * 1000,
        )
        return result

    def _team_to_schema(self, team: Team) -> dict:
        """Преобразовать модель в схему."""
        return {
            "team_name": team.team_name,
            "members": [
                {
                    "user_id": member.user_id,
                    "username": member.username,
                    "is_active": member.is_active,
                }
                for member in team.members
            ],
        }
