"""Замена ревьюверов на открытых PR."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    NotAssignedException,
    NotFoundException,
    PRMergedException,
    ServiceException,
)
from app.db.models import PullRequest
from app.db.repositories.pr_repository import PRRepository
from app.db.repositories.user_repository import UserRepository
from app.domain.reviewers.selector import ReviewerSelector
from app.domain.reviewers.tiers import first_candidates, replacement_tiers

logger = logging.getLogger(__name__)


@dataclass
class ReleaseResult:
    """Итог снятия пользователя со всех его открытых PR."""

    reassigned: int = 0
    errors: int = 0
    affected_user_ids: set[str] = field(default_factory=set)


class ReviewerReassigner:
    """
    Общая логика поиска замены для ручного переназначения и деактивации.

    Политики при отсутствии кандидатов разные: ручное переназначение
    сообщает NO_CANDIDATE вызывающему (см. PullRequestService), а при
    деактивации ревьювер просто снимается с PR (replace_or_remove).
    """

    def __init__(
        self,
        session: AsyncSession,
        selector: ReviewerSelector,
        pr_repo: Optional[PRRepository] = None,
        user_repo: Optional[UserRepository] = None,
    ):
        self.session = session
        self.selector = selector
        self.pr_repo = pr_repo or PRRepository(session)
        self.user_repo = user_repo or UserRepository(session)

    async def load_assignment(
        self, pr_id: str, reviewer_id: str
    ) -> tuple[PullRequest, list[str]]:
        """
        Заблокировать PR и проверить, что его можно менять.
        Проверки идут строго по порядку: существование, статус, назначение.
        """
        pr = await self.pr_repo.get_by_id(pr_id, for_update=True)
        if not pr:
            raise NotFoundException("PR")
        if pr.is_merged:
            raise PRMergedException()

        current_reviewers = await self.pr_repo.get_reviewers(pr_id)
        if reviewer_id not in current_reviewers:
            raise NotAssignedException()
        return pr, current_reviewers

    async def find_candidates(
        self, pr: PullRequest, old_reviewer_id: str, current_reviewers: list[str]
    ) -> list[str]:
        """Кандидаты на место old_reviewer_id из первого непустого уровня поиска."""
        old_reviewer = await self.user_repo.get_by_id(old_reviewer_id)
        if not old_reviewer:
            raise NotFoundException("User")
        author = await self.user_repo.get_by_id(pr.author_id)
        if not author:
            raise NotFoundException("Author")

        tiers = replacement_tiers(self.user_repo, old_reviewer.team_name, author.team_name)
        excluded = {pr.author_id, old_reviewer_id, *current_reviewers}
        candidates, tier = await first_candidates(tiers, excluded)
        if candidates:
            logger.debug(
                "pr %s: %d candidates for %s in tier %s",
                pr.pull_request_id,
                len(candidates),
                old_reviewer_id,
                tier,
            )
        return candidates

    async def replace_or_remove(self, pr_id: str, old_reviewer_id: str) -> Optional[str]:
        """
        Заменить ревьювера случайным кандидатом, а если кандидатов нет,
        снять его без замены. Возвращает ID нового ревьювера или None.
        """
        pr, current_reviewers = await self.load_assignment(pr_id, old_reviewer_id)
        candidates = await self.find_candidates(pr, old_reviewer_id, current_reviewers)

        new_reviewer_id = self.selector.pick_one(candidates)
        if new_reviewer_id is None:
            if not await self.pr_repo.remove_reviewer(pr_id, old_reviewer_id):
                raise NotAssignedException()
            logger.warning(
                "pr %s: no candidates, reviewer %s removed without replacement",
                pr_id,
                old_reviewer_id,
            )
            return None

        if not await self.pr_repo.swap_reviewer(pr_id, old_reviewer_id, new_reviewer_id):
            raise NotAssignedException()
        logger.info("pr %s: reviewer %s replaced by %s", pr_id, old_reviewer_id, new_reviewer_id)
        return new_reviewer_id

    async def release_reviewer(self, user_id: str) -> ReleaseResult:
        """
        Снять пользователя со всех открытых PR.

        Каждый PR обрабатывается и фиксируется отдельно: сбой на одном PR
        откатывает только его изменения, увеличивает счетчик ошибок и не
        останавливает обход.
        """
        result = ReleaseResult()
        try:
            pr_ids = await self.pr_repo.get_open_pr_ids_for_reviewer(user_id)
        except SQLAlchemyError:
            logger.exception("failed to list open PRs for reviewer %s", user_id)
            await self.session.rollback()
            result.errors += 1
            return result

        if pr_ids:
            logger.info("reviewer %s has %d open PRs to release", user_id, len(pr_ids))

        for pr_id in pr_ids:
            try:
                new_reviewer_id = await self.replace_or_remove(pr_id, user_id)
                await self.session.commit()
            except (ServiceException, SQLAlchemyError) as exc:
                await self.session.rollback()
                logger.error("pr %s: failed to release reviewer %s: %s", pr_id, user_id, exc)
                result.errors += 1
                continue

            result.reassigned += 1
            result.affected_user_ids.add(user_id)
            if new_reviewer_id:
                result.affected_user_ids.add(new_reviewer_id)

        return result
