"""
Unit tests for cache storage adapters.
"""

import asyncio

from nft_atlas.config import Config
from nft_atlas.storage import MemoryStorage, RedisStorage, get_storage_adapter


class TestMemoryStorage:
    async def test_set_get_delete(self, settings):
        storage = MemoryStorage(settings)

        await storage.set_cache("nfts:ethereum:0xabc", [{"id": "x"}])
        assert await storage.get_cache("nfts:ethereum:0xabc") == [{"id": "x"}]

        await storage.delete_cache("nfts:ethereum:0xabc")
        assert await storage.get_cache("nfts:ethereum:0xabc") is None

    async def test_entries_expire(self, settings):
        """
        Given an entry stored with a very short TTL
        When reading it after the TTL
        Then it is gone
        """
        storage = MemoryStorage(settings)

        await storage.set_cache("short", "value", ttl=0.05)
        await asyncio.sleep(0.1)

        assert await storage.get_cache("short") is None


class TestAdapterSelection:
    def test_memory_by_default(self):
        assert isinstance(get_storage_adapter(Config()), MemoryStorage)

    def test_redis_without_url_falls_back_to_memory(self):
        assert isinstance(get_storage_adapter(Config(cache_type="redis")), MemoryStorage)

    def test_redis_with_url(self):
        adapter = get_storage_adapter(Config(cache_type="redis", redis_url="redis://localhost:6379/0"))

        assert isinstance(adapter, RedisStorage)
        assert adapter.redis_client is None
