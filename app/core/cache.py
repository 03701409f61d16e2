"""Настройка кеширования Redis."""

import json
import logging
from typing import Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.core.config import settings

logger = logging.getLogger(__name__)

redis_client: Optional[Redis] = None

STATS_KEY = "stats:get_stats"


def reviews_key(user_id: str) -> str:
    return f"users:get_reviews:{user_id}"


def team_key(team_name: str) -> str:
    return f"teams:get_team:{team_name}"


async def init_cache():
    """
    Инициализация Redis.
    При ошибке подключения redis_client остается None, и кеширование пропускается.
    """
    global redis_client
    if redis_client is not None or not settings.CACHE_ENABLED:
        return

    client = redis.from_url(settings.REDIS_URL, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("redis unavailable, caching disabled: %s", exc)
        await client.aclose()
        return
    redis_client = client


async def close_cache():
    """Закрытие соединения с Redis."""
    global redis_client
    if redis_client is None:
        return
    try:
        await redis_client.aclose()
    except (RedisError, OSError) as exc:
        logger.warning("failed to close redis connection: %s", exc)
    finally:
        redis_client = None


async def get_cache() -> Optional[Redis]:
    """Клиент Redis или None, если Redis недоступен."""
    if redis_client is None:
        await init_cache()
    return redis_client


class CacheService:
    """
    Сервис для работы с кешем.
    Устойчив к сбоям Redis: после первой ошибки кеш отключается до конца запроса,
    операции становятся промахами и не прерывают бизнес-логику.
    """

    def __init__(self, redis_client_instance: Optional[Redis], ttl: int = settings.REDIS_TTL):
        self.redis = redis_client_instance
        self.ttl = ttl
        self._is_available = self.redis is not None

    def _disable(self, operation: str, exc: Exception):
        logger.warning("cache %s failed, disabling cache for this request: %s", operation, exc)
        self._is_available = False

    async def get(self, key: str) -> Optional[dict]:
        if not self._is_available:
            return None
        try:
            value = await self.redis.get(key)
        except (RedisError, OSError) as exc:
            self._disable("get", exc)
            return None
        return json.loads(value) if value else None

    async def set(self, key: str, value: dict, ttl: Optional[int] = None):
        if not self._is_available:
            return
        try:
            await self.redis.setex(key, ttl or self.ttl, json.dumps(value))
        except (RedisError, OSError) as exc:
            self._disable("set", exc)

    async def delete(self, *keys: str):
        if not self._is_available or not keys:
            return
        try:
            await self.redis.delete(*keys)
        except (RedisError, OSError) as exc:
            self._disable("delete", exc)

    async def invalidate_reviews(self, *user_ids: str):
        """Сбросить списки ревью пользователей и общую статистику."""
        await self.delete(STATS_KEY, *(reviews_key(user_id) for user_id in user_ids if user_id))
