"""Redis storage adapter"""

import json
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from loguru import logger

from .base import StorageAdapter
from ..config import Config


class RedisStorage(StorageAdapter):
    """Redis-based cache; an unreachable server behaves like a cache miss"""

    def __init__(self, config: Config):
        if not config.redis_url:
            raise ValueError("Redis URL not configured")
        self.config = config
        self.redis_client: Optional[redis.Redis] = None

    def _client(self) -> redis.Redis:
        if self.redis_client is None:
            self.redis_client = redis.from_url(self.config.redis_url, decode_responses=True)
        return self.redis_client

    async def get_cache(self, key: str) -> Optional[Any]:
        try:
            value = await self._client().get(key)
            if value:
                return json.loads(value)
            return None
        except (RedisError, ValueError) as e:
            logger.debug(f"Redis get_cache error: {e}")
            return None

    async def set_cache(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        try:
            serialized = json.dumps(value, default=str)
            await self._client().setex(key, ttl if ttl is not None else self.config.cache_ttl, serialized)
        except (RedisError, TypeError) as e:
            logger.debug(f"Redis set_cache error: {e}")

    async def delete_cache(self, key: str) -> None:
        try:
            await self._client().delete(key)
        except RedisError as e:
            logger.debug(f"Redis delete_cache error: {e}")

    async def close(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None
