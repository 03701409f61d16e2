"""Репозиторий для работы с пользователями."""

from typing import Iterable, List, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import PR_STATUS_OPEN, PullRequest, User, pr_reviewers
from app.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Репозиторий пользователей."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_team_members(self, team_name: str) -> List[User]:
        """Все участники команды, включая неактивных."""
        query = (
            select(User)
            .where(User.team_name == team_name)
            .order_by(User.user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_active_users_excluding_teams(self, team_names: Iterable[str]) -> List[User]:
        """Активные пользователи всех команд, кроме перечисленных."""
        query = select(User).where(User.is_active == True)  # noqa: E712
        team_names = [name for name in team_names if name]
        if team_names:
            query = query.where(User.team_name.notin_(team_names))
        query = query.order_by(User.user_id).execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update_active(self, user_id: str, is_active: bool) -> Optional[User]:
        """Обновить флаг активности."""
        user = await self.get_by_id(user_id, for_update=True)
        if user:
            user.is_active = is_active
            await self.session.flush()
        return user

    async def bulk_deactivate_team_members(self, team_name: str) -> List[str]:
        """
        Деактивировать всех активных участников команды.
        Возвращает ID пользователей, которые были активны до вызова.
        """
        locked = await self.session.execute(
            select(User.user_id)
            .where(User.team_name == team_name, User.is_active == True)  # noqa: E712
            .order_by(User.user_id)
            .with_for_update()
        )
        user_ids = list(locked.scalars().all())
        if not user_ids:
            return []

        await self.session.execute(
            update(User)
            .where(User.user_id.in_(user_ids))
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return user_ids

    async def get_all_with_stats(self) -> List[dict]:
        """Получить всех пользователей со статистикой ревью."""
        review_stats = (
            select(
                pr_reviewers.c.reviewer_id,
                func.count(pr_reviewers.c.pr_id).label("total_reviews"),
                func.sum(case((PullRequest.status == PR_STATUS_OPEN, 1), else_=0)).label(
                    "open_reviews"
                ),
            )
            .join(PullRequest, pr_reviewers.c.pr_id == PullRequest.pull_request_id)
            .group_by(pr_reviewers.c.reviewer_id)
            .subquery()
        )

        query = (
            select(
                User.user_id,
                User.username,
                User.team_name,
                func.coalesce(review_stats.c.total_reviews, 0).label("total_reviews"),
                func.coalesce(review_stats.c.open_reviews, 0).label("open_reviews"),
            )
            .outerjoin(review_stats, User.user_id == review_stats.c.reviewer_id)
            .order_by(User.user_id)
        )

        result = await self.session.execute(query)
        return [
            {
                "user_id": row.user_id,
                "username": row.username,
                "team_name": row.team_name,
                "total_reviews": int(row.total_reviews or 0),
                "open_reviews": int(row.open_reviews or 0),
                "merged_reviews": int((row.total_reviews or 0) - (row.open_reviews or 0)),
            }
            for row in result.all()
        ]
