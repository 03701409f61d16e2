"""Тесты для сервиса команд."""

import pytest

from app.core.exceptions import NotFoundException, TeamExistsException
from app.domain.teams.service import TeamService
from conftest import add_team


@pytest.mark.asyncio
async def test_create_team(session, mock_cache):
    """Тест создания команды."""
    service = TeamService(session)
    members = [
        {"user_id": "u1", "username": "Alice", "is_active": True},
        {"user_id": "u2", "username": "Bob", "is_active": True},
    ]
    result = await service.create_team("backend", members)
    assert result["team"]["team_name"] == "backend"
    assert [m["user_id"] for m in result["team"]["members"]] == ["u1", "u2"]


@pytest.mark.asyncio
async def test_create_duplicate_team(session, mock_cache):
    """Тест создания дублирующейся команды."""
    service = TeamService(session)
    members = [{"user_id": "u1", "username": "Alice", "is_active": True}]
    await service.create_team("backend", members)

    with pytest.raises(TeamExistsException):
        await service.create_team("backend", members)


@pytest.mark.asyncio
async def test_create_team_moves_existing_user(session, mock_cache):
    """Пользователь всегда состоит ровно в одной команде."""
    service = TeamService(session)
    await service.create_team("backend", [{"user_id": "u1", "username": "Alice", "is_active": True}])
    await service.create_team(
        "frontend", [{"user_id": "u1", "username": "Alice B.", "is_active": False}]
    )

    backend = await service.get_team("backend")
    frontend = await service.get_team("frontend")
    assert backend["team"]["members"] == []
    assert frontend["team"]["members"] == [
        {"user_id": "u1", "username": "Alice B.", "is_active": False}
    ]


@pytest.mark.asyncio
async def test_get_team(session, mock_cache, sample_team):
    """Тест получения команды."""
    service = TeamService(session)
    result = await service.get_team("backend")
    assert result["team"]["team_name"] == "backend"
    assert len(result["team"]["members"]) == 4
    assert "teams:get_team:backend" in mock_cache.store


@pytest.mark.asyncio
async def test_get_nonexistent_team(session, mock_cache):
    """Тест получения несуществующей команды."""
    service = TeamService(session)
    with pytest.raises(NotFoundException):
        await service.get_team("nonexistent")


@pytest.mark.asyncio
async def test_bulk_deactivate_unknown_team(session):
    with pytest.raises(NotFoundException):
        await TeamService(session).bulk_deactivate_team("nonexistent")


@pytest.mark.asyncio
async def test_bulk_deactivate_team_without_active_members(session):
    await add_team(session, "legacy", {"l1": False, "l2": False})

    result = await TeamService(session).bulk_deactivate_team("legacy")

    assert result == {
        "team_name": "legacy",
        "deactivated_user_ids": [],
        "reassigned_count": 0,
        "error_count": 0,
    }


@pytest.mark.asyncio
async def test_bulk_deactivate_invalidates_team_cache(session, mock_cache, sample_team):
    service = TeamService(session)
    await service.get_team("backend")

    await service.bulk_deactivate_team("backend")

    team = await service.get_team("backend")
    assert all(not member["is_active"] for member in team["team"]["members"])
