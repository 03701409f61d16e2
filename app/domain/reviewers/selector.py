"""Выбор ревьюверов из пула кандидатов."""

import random
from typing import Iterable, Optional, Protocol

from app.db.models import User


class RandomSource(Protocol):
    """Источник случайности; совместим с random.Random."""

    def sample(self, population: list, k: int) -> list: ...


def filter_candidates(pool: Iterable[User], excluded: Iterable[str]) -> list[str]:
    """
    Активные пользователи пула, не попавшие в исключения.

    Результат отсортирован и без повторов, поэтому дальнейший выбор
    не зависит от порядка, в котором пришел пул.
    """
    excluded = set(excluded)
    return sorted(
        {user.user_id for user in pool if user.is_active and user.user_id not in excluded}
    )


class ReviewerSelector:
    """
    Чистая логика выбора: без обращений к БД и без общего состояния.

    Если кандидатов не больше, чем нужно, возвращаются все. Иначе берется
    равномерная выборка без возвращения: каждая перестановка и каждый
    кандидат равновероятны.
    """

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng or random.Random()

    def choose(self, candidate_ids: list[str], count: int) -> list[str]:
        """Выбрать до count ID из уже отфильтрованного списка."""
        if count <= 0:
            return []
        candidates = sorted(set(candidate_ids))
        if len(candidates) <= count:
            return candidates
        return self.rng.sample(candidates, count)

    def select(self, pool: Iterable[User], excluded: Iterable[str], count: int) -> list[str]:
        """Отфильтровать пул и выбрать до count ревьюверов."""
        return self.choose(filter_candidates(pool, excluded), count)

    def pick_one(self, candidate_ids: list[str]) -> Optional[str]:
        """Один случайный кандидат или None для пустого списка."""
        chosen = self.choose(candidate_ids, 1)
        return chosen[0] if chosen else None
