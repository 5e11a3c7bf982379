"""Base storage adapter"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class StorageAdapter(ABC):
    """Cache interface consulted by providers before any upstream"""

    @abstractmethod
    async def get_cache(self, key: str) -> Optional[Any]:
        """Get cached value"""
        pass

    @abstractmethod
    async def set_cache(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Set cached value; ``ttl`` defaults to the configured cache TTL"""
        pass

    @abstractmethod
    async def delete_cache(self, key: str) -> None:
        """Delete cached value"""
        pass

    async def close(self) -> None:
        """Release connections"""
        return None
