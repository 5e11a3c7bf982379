"""Storage adapters for caching provider results"""

from loguru import logger

from .base import StorageAdapter
from .memory import MemoryStorage
from .redis_adapter import RedisStorage

__all__ = ["MemoryStorage", "RedisStorage", "StorageAdapter", "get_storage_adapter"]


def get_storage_adapter(config) -> StorageAdapter:
    """Get appropriate storage adapter based on config"""
    if config.cache_type == "redis":
        if config.redis_url:
            return RedisStorage(config)
        logger.warning("CACHE_TYPE=redis but REDIS_URL is not set, using in-memory cache")
    return MemoryStorage(config)
