"""Конфигурация тестов."""

import random

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.db.models import Team, User
from app.db.repositories.pr_repository import PRRepository


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Без mock_cache тесты работают без Redis."""
    monkeypatch.setattr("app.core.cache.settings.CACHE_ENABLED", False)
    monkeypatch.setattr("app.core.cache.redis_client", None)


@pytest.fixture(scope="function")
async def test_db():
    """Создать тестовую БД в памяти."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_session_maker

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def session(test_db):
    """Создать сессию БД для теста."""
    async with test_db() as session:
        yield session


@pytest.fixture
def rng():
    """Детерминированный источник случайности."""
    return random.Random(20251116)


@pytest.fixture(scope="function")
async def mock_cache(monkeypatch):
    """Mock Redis кеш."""
    cache_dict = {}

    class MockRedis:
        store = cache_dict

        async def get(self, key: str):
            return cache_dict.get(key)

        async def setex(self, key: str, ttl: int, value: str):
            cache_dict[key] = value

        async def delete(self, *keys):
            for key in keys:
                cache_dict.pop(key, None)

        async def aclose(self):
            pass

    mock_redis = MockRedis()
    monkeypatch.setattr("app.core.cache.redis_client", mock_redis)
    return mock_redis


async def add_team(session, team_name: str, members: dict[str, bool]):
    """Команда с участниками {user_id: is_active}."""
    session.add(Team(team_name=team_name))
    await session.flush()
    for user_id, is_active in members.items():
        session.add(
            User(
                user_id=user_id,
                username=user_id.upper(),
                team_name=team_name,
                is_active=is_active,
            )
        )
    await session.commit()


async def add_pr(session, pr_id: str, author_id: str, reviewers: list[str]):
    """PR с заранее заданными ревьюверами, минуя автоназначение."""
    repo = PRRepository(session)
    await repo.create(pr_id, f"PR {pr_id}", author_id)
    await repo.set_reviewers(pr_id, reviewers)
    await session.commit()


@pytest.fixture
async def sample_team(session):
    """Создать тестовую команду."""
    await add_team(session, "backend", {"u1": True, "u2": True, "u3": True, "u4": True})


@pytest.fixture
async def client(session):
    """HTTP клиент с подмененной сессией БД."""
    from app.api.dependencies import get_session
    from app.main import app

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
