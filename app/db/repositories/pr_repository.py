"""Репозиторий для работы с Pull Request'ами."""

from datetime import datetime
from typing import Iterable, List

from sqlalchemy import case, delete, func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PRExistsException
from app.db.models import PR_STATUS_MERGED, PR_STATUS_OPEN, PullRequest, pr_reviewers
from app.db.repositories.base import BaseRepository


class PRRepository(BaseRepository[PullRequest]):
    """Репозиторий Pull Request'ов."""

    def __init__(self, session: AsyncSession):
        super().__init__(PullRequest, session)

    async def create(self, pr_id: str, pr_name: str, author_id: str) -> PullRequest:
        """Создать PR в статусе OPEN без ревьюверов."""
        pr = PullRequest(
            pull_request_id=pr_id,
            pull_request_name=pr_name,
            author_id=author_id,
            status=PR_STATUS_OPEN,
            created_at=datetime.utcnow(),
        )
        self.session.add(pr)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # Параллельное создание с тем же ID
            raise PRExistsException() from exc
        return pr

    async def set_reviewers(self, pr_id: str, reviewer_ids: Iterable[str]):
        """Назначить ревьюверов на PR."""
        assigned_at = datetime.utcnow()
        values = [
            {"pr_id": pr_id, "reviewer_id": reviewer_id, "assigned_at": assigned_at}
            for reviewer_id in reviewer_ids
        ]
        if values:
            await self.session.execute(insert(pr_reviewers).values(values))
            await self.session.flush()

    async def get_reviewers(self, pr_id: str) -> List[str]:
        """ID ревьюверов PR в порядке назначения."""
        result = await self.session.execute(
            select(pr_reviewers.c.reviewer_id)
            .where(pr_reviewers.c.pr_id == pr_id)
            .order_by(pr_reviewers.c.assigned_at, pr_reviewers.c.reviewer_id)
        )
        return list(result.scalars().all())

    async def remove_reviewer(self, pr_id: str, reviewer_id: str) -> bool:
        """Снять ревьювера с PR. False, если он не был назначен."""
        result = await self.session.execute(
            delete(pr_reviewers).where(
                pr_reviewers.c.pr_id == pr_id, pr_reviewers.c.reviewer_id == reviewer_id
            )
        )
        await self.session.flush()
        return bool(result.rowcount)

    async def swap_reviewer(self, pr_id: str, old_reviewer_id: str, new_reviewer_id: str) -> bool:
        """Заменить ревьювера в рамках текущей транзакции. False, если старый не назначен."""
        if not await self.remove_reviewer(pr_id, old_reviewer_id):
            return False
        await self.set_reviewers(pr_id, [new_reviewer_id])
        return True

    async def get_open_pr_ids_for_reviewer(self, user_id: str) -> List[str]:
        """ID открытых PR, где пользователь назначен ревьювером."""
        result = await self.session.execute(
            select(PullRequest.pull_request_id)
            .join(pr_reviewers, PullRequest.pull_request_id == pr_reviewers.c.pr_id)
            .where(pr_reviewers.c.reviewer_id == user_id, PullRequest.status == PR_STATUS_OPEN)
            .order_by(PullRequest.created_at, PullRequest.pull_request_id)
        )
        return list(result.scalars().all())

    async def get_by_reviewer(self, user_id: str) -> List[PullRequest]:
        """Все PR, где пользователь ревьювер, новые первыми."""
        result = await self.session.execute(
            select(PullRequest)
            .join(pr_reviewers, PullRequest.pull_request_id == pr_reviewers.c.pr_id)
            .where(pr_reviewers.c.reviewer_id == user_id)
            .order_by(PullRequest.created_at.desc(), PullRequest.pull_request_id)
        )
        return list(result.scalars().all())

    async def merge(self, pr_id: str) -> PullRequest | None:
        """Пометить PR как MERGED (идемпотентная операция)."""
        pr = await self.get_by_id(pr_id, for_update=True)
        if not pr:
            return None

        if pr.status == PR_STATUS_MERGED:
            return pr

        pr.status = PR_STATUS_MERGED
        pr.merged_at = datetime.utcnow()
        await self.session.flush()

        return pr

    async def get_stats(self) -> dict:
        """Получить статистику по PR."""
        stats_query = select(
            func.count(PullRequest.pull_request_id).label("total_prs"),
            func.sum(case((PullRequest.status == PR_STATUS_OPEN, 1), else_=0)).label("open_prs"),
            func.sum(case((PullRequest.status == PR_STATUS_MERGED, 1), else_=0)).label(
                "merged_prs"
            ),
        )
        row = (await self.session.execute(stats_query)).one()
        total_count = int(row.total_prs or 0)

        pr_reviewer_counts = (
            select(
                PullRequest.pull_request_id,
                func.count(pr_reviewers.c.reviewer_id).label("reviewer_count"),
            )
            .outerjoin(pr_reviewers, PullRequest.pull_request_id == pr_reviewers.c.pr_id)
            .group_by(PullRequest.pull_request_id)
            .subquery()
        )

        count_query = select(
            func.sum(case((pr_reviewer_counts.c.reviewer_count == 0, 1), else_=0)).label("count_0"),
            func.sum(case((pr_reviewer_counts.c.reviewer_count == 1, 1), else_=0)).label("count_1"),
            func.sum(case((pr_reviewer_counts.c.reviewer_count == 2, 1), else_=0)).label("count_2"),
            func.coalesce(func.sum(pr_reviewer_counts.c.reviewer_count), 0).label("assignments"),
        ).select_from(pr_reviewer_counts)
        count_row = (await self.session.execute(count_query)).one()

        assignments = int(count_row.assignments or 0)
        return {
            "total_prs": total_count,
            "open_prs": int(row.open_prs or 0),
            "merged_prs": int(row.merged_prs or 0),
            "prs_with_0_reviewers": int(count_row.count_0 or 0),
            "prs_with_1_reviewer": int(count_row.count_1 or 0),
            "prs_with_2_reviewers": int(count_row.count_2 or 0),
            "avg_reviewers_per_pr": round(assignments / total_count, 2) if total_count else 0.0,
        }
