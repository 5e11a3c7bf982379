"""Chain provider contract"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from loguru import logger

from ..models import ChainConfig, ConnectionReport, NFTCollection, NFTItem
from ..normalizer import group_collections


class ChainProvider(ABC):
    """
    Uniform NFT retrieval capability set for one blockchain.

    Implementations never raise from the read operations: a failed
    lookup degrades to an empty list (or None for single-token lookups).
    """

    chain: ChainConfig
    is_connected: bool = False

    @property
    def chain_id(self) -> int:
        return self.chain.chain_id

    @abstractmethod
    async def get_nfts(self, address: str) -> List[NFTItem]:
        pass

    @abstractmethod
    async def get_nft_metadata(self, contract_address: str, token_id: str) -> Optional[NFTItem]:
        pass

    async def get_collections(self, address: str) -> List[NFTCollection]:
        """Group the address's items by contract"""
        try:
            return group_collections(await self.get_nfts(address))
        except Exception as e:
            logger.error(f"Collection lookup failed on {self.chain.slug} for {address}: {e}")
            return []

    @abstractmethod
    async def search_nfts(self, query: str, limit: int = 20) -> List[NFTItem]:
        pass

    @abstractmethod
    async def get_trending_nfts(self, limit: int = 20) -> List[NFTItem]:
        pass

    @abstractmethod
    def update_config(self, partial: Dict[str, Any]) -> None:
        """Apply a partial ProviderConfig and recompute ``is_connected``"""
        pass

    @abstractmethod
    async def test_connection(self) -> ConnectionReport:
        pass
