"""Chain providers and their construction"""

from .base import ChainProvider
from .factory import ProviderFactory, ProviderRegistry
from .generic import ConfiguredChainProvider
from .placeholder import PlaceholderPolicy
from .profiles import PROFILES, ChainProfile, get_profile
from .scan import EvmScanner, SolanaScanner

__all__ = [
    "ChainProvider",
    "ChainProfile",
    "ConfiguredChainProvider",
    "EvmScanner",
    "PROFILES",
    "PlaceholderPolicy",
    "ProviderFactory",
    "ProviderRegistry",
    "SolanaScanner",
    "get_profile",
]
