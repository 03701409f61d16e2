"""Сервис для работы с Pull Request'ами."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    NoCandidateException,
    NotAssignedException,
    NotFoundException,
    PRExistsException,
)
from app.db.models import PullRequest
from app.db.repositories.pr_repository import PRRepository
from app.db.repositories.user_repository import UserRepository
from app.domain.base_service import BaseService
from app.domain.reviewers.reassignment import ReviewerReassigner
from app.domain.reviewers.selector import RandomSource

logger = logging.getLogger(__name__)


class PullRequestService(BaseService):
    """Сервис для работы с Pull Request'ами."""

    def __init__(self, session: AsyncSession, rng: Optional[RandomSource] = None):
        super().__init__(session, rng)
        self.pr_repo = PRRepository(session)
        self.user_repo = UserRepository(session)
        self.reassigner = ReviewerReassigner(session, self.selector, self.pr_repo, self.user_repo)

    async def create_pr(self, pr_id: str, pr_name: str, author_id: str) -> dict:
        """Создать PR и автоматически назначить до двух ревьюверов из команды автора."""
        self._require(pull_request_id=pr_id, pull_request_name=pr_name, author_id=author_id)

        if await self.pr_repo.exists(pr_id):
            raise PRExistsException()

        author = await self.user_repo.get_by_id(author_id)
        if not author:
            raise NotFoundException("Author")

        pr = await self.pr_repo.create(pr_id, pr_name, author_id)
        logger.info("pr %s created by %s", pr_id, author_id)

        team_members = await self.user_repo.get_team_members(author.team_name)
        reviewer_ids = self.selector.select(
            team_members, excluded={author_id}, count=settings.REVIEWERS_PER_PR
        )

        if reviewer_ids:
            await self.pr_repo.set_reviewers(pr_id, reviewer_ids)
            logger.info("pr %s: reviewers assigned %s", pr_id, reviewer_ids)
        else:
            logger.warning("pr %s: no eligible reviewers in team %s", pr_id, author.team_name)

        cache_service = await self._get_cache_service()
        await cache_service.invalidate_reviews(*reviewer_ids)

        return {"pr": await self._pr_to_schema(pr)}

    async def get_pr(self, pr_id: str) -> dict:
        """Получить PR по идентификатору."""
        pr = await self.pr_repo.get_by_id(pr_id)
        if not pr:
            raise NotFoundException("PR")

        return {"pr": await self._pr_to_schema(pr)}

    async def merge_pr(self, pr_id: str) -> dict:
        """Пометить PR как MERGED (идемпотентная операция)."""
        self._require(pull_request_id=pr_id)

        pr = await self.pr_repo.merge(pr_id)
        if not pr:
            raise NotFoundException("PR")

        result = {"pr": await self._pr_to_schema(pr)}
        logger.info("pr %s merged", pr_id)

        cache_service = await self._get_cache_service()
        await cache_service.invalidate_reviews(*result["pr"]["assigned_reviewers"])
        return result

    async def reassign_reviewer(self, pr_id: str, old_user_id: str) -> dict:
        """
        Переназначить ревьювера.

        Замена ищется в команде старого ревьювера, затем в команде автора,
        затем среди остальных активных пользователей. Если кандидатов нет
        нигде, вызывающий получает NO_CANDIDATE, а PR не меняется.
        """
        self._require(pull_request_id=pr_id, old_user_id=old_user_id)

        pr, current_reviewers = await self.reassigner.load_assignment(pr_id, old_user_id)
        candidates = await self.reassigner.find_candidates(pr, old_user_id, current_reviewers)

        new_reviewer_id = self.selector.pick_one(candidates)
        if new_reviewer_id is None:
            raise NoCandidateException()

        if not await self.pr_repo.swap_reviewer(pr_id, old_user_id, new_reviewer_id):
            raise NotAssignedException()
        logger.info("pr %s: reviewer %s reassigned to %s", pr_id, old_user_id, new_reviewer_id)

        cache_service = await self._get_cache_service()
        await cache_service.invalidate_reviews(old_user_id, new_reviewer_id)

        return {"pr": await self._pr_to_schema(pr), "replaced_by": new_reviewer_id}

    async def _pr_to_schema(self, pr: PullRequest) -> dict:
        """Преобразовать модель в схему."""
        return {
            "pull_request_id": pr.pull_request_id,
            "pull_request_name": pr.pull_request_name,
            "author_id": pr.author_id,
            "status": pr.status,
            "assigned_reviewers": await self.pr_repo.get_reviewers(pr.pull_request_id),
            "createdAt": pr.created_at.isoformat() if pr.created_at else None,
            "mergedAt": pr.merged_at.isoformat() if pr.merged_at else None,
        }
