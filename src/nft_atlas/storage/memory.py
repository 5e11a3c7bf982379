"""In-memory storage adapter"""

import asyncio
from typing import Any, Optional, Tuple
from cachetools import TLRUCache

from .base import StorageAdapter
from ..config import Config


def _time_to_use(key: str, entry: Tuple[Any, int], now: float) -> float:
    return now + entry[1]


class MemoryStorage(StorageAdapter):
    """In-memory cache with a per-entry TTL"""

    def __init__(self, config: Config, max_size: int = 10000):
        self.config = config
        self.cache: TLRUCache = TLRUCache(maxsize=max_size, ttu=_time_to_use)
        self._lock = asyncio.Lock()

    async def get_cache(self, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self.cache.get(key)
        return entry[0] if entry is not None else None

    async def set_cache(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        async with self._lock:
            self.cache[key] = (value, ttl if ttl is not None else self.config.cache_ttl)

    async def delete_cache(self, key: str) -> None:
        async with self._lock:
            self.cache.pop(key, None)
