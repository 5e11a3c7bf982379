"""API clients for NFT indexing services"""

from .base import BaseAPIClient
from .alchemy import AlchemyClient
from .opensea import OpenSeaClient
from .moralis import MoralisClient
from .simplehash import SimpleHashClient
from .quicknode import QuickNodeClient
from .joepegs import JoepegsClient
from .helius import HeliusClient
from .magiceden import MagicEdenClient
from .internal import InternalIndexClient

CLIENT_CLASSES = {
    "alchemy": AlchemyClient,
    "opensea": OpenSeaClient,
    "moralis": MoralisClient,
    "simplehash": SimpleHashClient,
    "quicknode": QuickNodeClient,
    "joepegs": JoepegsClient,
    "helius": HeliusClient,
    "magiceden": MagicEdenClient,
}

# Sources that answer without an API key
KEYLESS_SOURCES = frozenset({"magiceden"})

__all__ = [
    "BaseAPIClient",
    "AlchemyClient",
    "OpenSeaClient",
    "MoralisClient",
    "SimpleHashClient",
    "QuickNodeClient",
    "JoepegsClient",
    "HeliusClient",
    "MagicEdenClient",
    "InternalIndexClient",
    "CLIENT_CLASSES",
    "KEYLESS_SOURCES",
]
