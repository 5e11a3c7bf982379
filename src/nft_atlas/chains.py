"""
Static catalog of supported chains
"""

from typing import Dict, List, Optional, Union

from .models import ChainConfig

EVM_STANDARDS = frozenset({"ERC721", "ERC1155"})

SUPPORTED_CHAINS: List[ChainConfig] = [
    ChainConfig(
        chain_id=8888,
        display_name="OmniCoin",
        slug="omnicoin",
        explorer_url="https://explorer.omnicoin.network",
        token_standards=EVM_STANDARDS,
        native_currency="XOM",
        enabled_by_default=True,
        marketplaces=["OmniBazaar"],
    ),
    ChainConfig(
        chain_id=1,
        display_name="Ethereum",
        slug="ethereum",
        explorer_url="https://etherscan.io",
        token_standards=EVM_STANDARDS,
        native_currency="ETH",
        enabled_by_default=True,
        marketplaces=["OpenSea", "LooksRare", "X2Y2", "Blur"],
    ),
    ChainConfig(
        chain_id=137,
        display_name="Polygon",
        slug="polygon",
        explorer_url="https://polygonscan.com",
        token_standards=EVM_STANDARDS,
        native_currency="MATIC",
        enabled_by_default=True,
        marketplaces=["OpenSea", "Rarible"],
    ),
    ChainConfig(
        chain_id=56,
        display_name="Binance Smart Chain",
        slug="bsc",
        explorer_url="https://bscscan.com",
        token_standards=frozenset({"ERC721", "ERC1155", "BEP721", "BEP1155"}),
        native_currency="BNB",
        enabled_by_default=True,
        marketplaces=["Treasureland", "BakerySwap"],
    ),
    ChainConfig(
        chain_id=43114,
        display_name="Avalanche",
        slug="avalanche",
        explorer_url="https://snowtrace.io",
        token_standards=EVM_STANDARDS,
        native_currency="AVAX",
        marketplaces=["Joepegs", "Kalao"],
    ),
    ChainConfig(
        chain_id=42161,
        display_name="Arbitrum",
        slug="arbitrum",
        explorer_url="https://arbiscan.io",
        token_standards=EVM_STANDARDS,
        native_currency="ETH",
        marketplaces=["OpenSea", "Treasure"],
    ),
    ChainConfig(
        chain_id=10,
        display_name="Optimism",
        slug="optimism",
        explorer_url="https://optimistic.etherscan.io",
        token_standards=EVM_STANDARDS,
        native_currency="ETH",
        marketplaces=["OpenSea", "Quix"],
    ),
    ChainConfig(
        chain_id=8453,
        display_name="Base",
        slug="base",
        explorer_url="https://basescan.org",
        token_standards=EVM_STANDARDS,
        native_currency="ETH",
        marketplaces=["OpenSea"],
    ),
    ChainConfig(
        chain_id=101,
        display_name="Solana",
        slug="solana",
        explorer_url="https://explorer.solana.com",
        token_standards=frozenset({"SPL", "Metaplex"}),
        native_currency="SOL",
        marketplaces=["Magic Eden", "Tensor"],
    ),
    ChainConfig(
        chain_id=13068200,
        display_name="COTI",
        slug="coti",
        explorer_url="https://explorer.coti.io",
        token_standards=EVM_STANDARDS,
        native_currency="COTI",
    ),
]


class ChainCatalog:
    """Read-only lookup over the supported chain descriptors"""

    def __init__(self, chains: Optional[List[ChainConfig]] = None):
        self._chains: Dict[int, ChainConfig] = {
            chain.chain_id: chain for chain in (chains if chains is not None else SUPPORTED_CHAINS)
        }

    def all(self) -> List[ChainConfig]:
        return list(self._chains.values())

    def ids(self) -> List[int]:
        return list(self._chains)

    def get(self, chain_id: int) -> Optional[ChainConfig]:
        return self._chains.get(chain_id)

    def __contains__(self, chain_id: int) -> bool:
        return chain_id in self._chains

    def default_enabled(self) -> List[int]:
        return [c.chain_id for c in self._chains.values() if c.enabled_by_default]

    def resolve(self, value: Union[int, str, None]) -> Optional[ChainConfig]:
        """Find a chain by id, slug or display name (case-insensitive)"""
        if value is None:
            return None
        if isinstance(value, int):
            return self.get(value)
        text = str(value).strip().lower()
        if text.isdigit():
            return self.get(int(text))
        for chain in self._chains.values():
            if text in (chain.slug, chain.display_name.lower()):
                return chain
        return None

    def display_name(self, slug: str) -> str:
        """Display name for a slug, the slug itself when unknown"""
        chain = self.resolve(slug)
        return chain.display_name if chain else slug

    def order_key(self, chain_id: int):
        """Sort key: catalog order first, then unknown ids ascending"""
        ids = self.ids()
        if chain_id in self._chains:
            return (0, ids.index(chain_id))
        return (1, chain_id)
