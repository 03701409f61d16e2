"""Цепочка пулов кандидатов для замены ревьювера."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Sequence

from app.db.models import User
from app.db.repositories.user_repository import UserRepository
from app.domain.reviewers.selector import filter_candidates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateTier:
    """Уровень поиска: имя для логов и ленивый загрузчик пула."""

    name: str
    load: Callable[[], Awaitable[Sequence[User]]]


def replacement_tiers(
    user_repo: UserRepository, reviewer_team: str, author_team: str
) -> list[CandidateTier]:
    """
    Порядок поиска замены: команда ревьювера, затем команда автора
    (если она другая), затем активные пользователи остальных команд.
    """
    tiers = [
        CandidateTier("reviewer_team", lambda: user_repo.get_team_members(reviewer_team)),
    ]
    searched = [reviewer_team]
    if author_team and author_team != reviewer_team:
        tiers.append(CandidateTier("author_team", lambda: user_repo.get_team_members(author_team)))
        searched.append(author_team)
    tiers.append(
        CandidateTier(
            "other_teams", lambda: user_repo.get_active_users_excluding_teams(searched)
        )
    )
    return tiers


async def first_candidates(
    tiers: Iterable[CandidateTier], excluded: Iterable[str]
) -> tuple[list[str], str | None]:
    """
    Пройти уровни по порядку и вернуть кандидатов первого непустого.
    Следующий уровень не загружается, если предыдущий дал результат.
    """
    excluded = set(excluded)
    for tier in tiers:
        candidates = filter_candidates(await tier.load(), excluded)
        if candidates:
            return candidates, tier.name
        logger.debug("no candidates in tier %s", tier.name)
    return [], None
