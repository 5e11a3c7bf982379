"""
NFT Atlas - Multi-chain NFT retrieval and aggregation engine
"""

__version__ = "1.0.0"
__author__ = "NFT Atlas Team"

from .aggregator import MultiChainNFTAggregator
from .chains import ChainCatalog
from .metadata import MetadataResolver
from .models import NFTItem, NFTCollection, SearchQuery, SearchResult, TokenStandard
from .providers import ChainProvider, ProviderFactory, ProviderRegistry

__all__ = [
    "MultiChainNFTAggregator",
    "ChainCatalog",
    "MetadataResolver",
    "NFTItem",
    "NFTCollection",
    "SearchQuery",
    "SearchResult",
    "TokenStandard",
    "ChainProvider",
    "ProviderFactory",
    "ProviderRegistry",
]
