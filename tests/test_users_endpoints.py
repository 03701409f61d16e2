"""Тесты для сервиса пользователей."""

import pytest

from app.core.exceptions import NotFoundException
from app.db.repositories.pr_repository import PRRepository
from app.domain.users.service import UserService
from conftest import add_pr, add_team


@pytest.mark.asyncio
async def test_set_user_active(session, mock_cache, sample_team):
    """Тест установки флага активности пользователя."""
    service = UserService(session)
    result = await service.set_is_active("u1", False)
    assert result["user"] == {
        "user_id": "u1",
        "username": "U1",
        "team_name": "backend",
        "is_active": False,
    }

    result = await service.set_is_active("u1", True)
    assert result["user"]["is_active"] is True


@pytest.mark.asyncio
async def test_set_nonexistent_user_active(session, mock_cache):
    """Тест установки флага активности несуществующего пользователя."""
    service = UserService(session)
    with pytest.raises(NotFoundException):
        await service.set_is_active("nonexistent", False)


@pytest.mark.asyncio
async def test_deactivated_user_released_from_open_prs(session, rng):
    await add_team(session, "backend", {"u1": True, "u2": True, "u3": True})
    await add_pr(session, "pr-1", "u1", ["u2"])

    await UserService(session, rng).set_is_active("u2", False)

    assert await PRRepository(session).get_reviewers("pr-1") == ["u3"]


@pytest.mark.asyncio
async def test_deactivating_inactive_user_changes_nothing(session, rng):
    await add_team(session, "backend", {"u1": True, "u2": False, "u3": True})
    await add_pr(session, "pr-1", "u1", ["u2"])

    await UserService(session, rng).set_is_active("u2", False)

    assert await PRRepository(session).get_reviewers("pr-1") == ["u2"]


@pytest.mark.asyncio
async def test_get_reviews(session, mock_cache, sample_team):
    """Тест получения PR'ов пользователя."""
    await add_pr(session, "pr-1", "u1", ["u2"])
    await add_pr(session, "pr-2", "u3", ["u4"])

    result = await UserService(session).get_reviews("u2")
    assert result == {
        "user_id": "u2",
        "pull_requests": [
            {
                "pull_request_id": "pr-1",
                "pull_request_name": "PR pr-1",
                "author_id": "u1",
                "status": "OPEN",
            }
        ],
    }
    assert "users:get_reviews:u2" in mock_cache.store


@pytest.mark.asyncio
async def test_get_reviews_unknown_user(session):
    result = await UserService(session).get_reviews("ghost")
    assert result == {"user_id": "ghost", "pull_requests": []}
