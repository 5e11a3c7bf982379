"""
Pytest configuration and shared fixtures for nft-atlas tests.
"""

from typing import Any, Dict, List, Optional

import pytest

from nft_atlas.chains import ChainCatalog
from nft_atlas.clients.base import BaseAPIClient
from nft_atlas.config import Config
from nft_atlas.models import ConnectionReport, NFTItem, Trait
from nft_atlas.providers.base import ChainProvider


@pytest.fixture
def settings():
    """Configuration with no credentials and short timeouts."""
    return Config(source_timeout=2, provider_timeout=5, timeout=2, max_retries=1)


@pytest.fixture
def catalog():
    return ChainCatalog()


@pytest.fixture
def ethereum(catalog):
    return catalog.get(1)


@pytest.fixture
def polygon(catalog):
    return catalog.get(137)


@pytest.fixture
def solana(catalog):
    return catalog.get(101)


@pytest.fixture
def sample_wallet_address():
    """Sample Ethereum wallet address for testing."""
    return "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"  # vitalik.eth


@pytest.fixture
def sample_solana_address():
    """Sample Solana wallet address for testing."""
    return "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


def make_item(
    blockchain: str = "ethereum",
    contract: str = "0xabc",
    token_id: str = "1",
    name: Optional[str] = None,
    price: Optional[str] = None,
    category: Optional[str] = None,
    **fields: Any,
) -> NFTItem:
    attributes = [Trait(trait_type="Category", value=category)] if category else []
    return NFTItem(
        id=NFTItem.make_id(blockchain, contract, token_id),
        token_id=token_id,
        name=name or f"Token #{token_id}",
        contract_address=contract,
        blockchain=blockchain,
        attributes=attributes,
        price=price,
        **fields,
    )


class FakeProvider(ChainProvider):
    """In-memory ChainProvider recording its calls."""

    def __init__(self, chain, items=None, error: Optional[BaseException] = None, connected: bool = True):
        self.chain = chain
        self.items = list(items or [])
        self.error = error
        self.is_connected = connected
        self.calls: List[str] = []

    async def get_nfts(self, address):
        self.calls.append(f"get_nfts:{address}")
        if self.error:
            raise self.error
        return list(self.items)

    async def get_nft_metadata(self, contract_address, token_id):
        return next((i for i in self.items if i.token_id == token_id), None)

    async def search_nfts(self, query, limit=20):
        self.calls.append(f"search:{query}:{limit}")
        if self.error:
            raise self.error
        return list(self.items)[:limit]

    async def get_trending_nfts(self, limit=20):
        self.calls.append(f"trending:{limit}")
        if self.error:
            raise self.error
        return list(self.items)[:limit]

    def update_config(self, partial):
        self.is_connected = bool(partial.get("rpc_url"))

    async def test_connection(self):
        return ConnectionReport(connected=self.is_connected, working_sources=["fake"] if self.is_connected else [])


class FakeClient(BaseAPIClient):
    """Indexing client returning canned payloads or raising canned errors."""

    def __init__(self, name: str, wallet: Any = None, token: Any = None, search: Any = None, trending: Any = None):
        super().__init__(["key"], "https://fake.invalid", rate_limit=1000)
        self.source_name = name
        self.wallet = wallet
        self.token = token
        self.search = search
        self.trending = trending
        self.calls: List[str] = []

    @staticmethod
    async def _answer(value):
        if isinstance(value, BaseException):
            raise value
        if value is None:
            raise NotImplementedError("not configured")
        return value

    async def get_wallet_nfts(self, wallet_address, chain, page_size=100):
        self.calls.append("wallet")
        return await self._answer(self.wallet)

    async def get_token_metadata(self, contract_address, token_id, chain):
        self.calls.append("token")
        return await self._answer(self.token)

    async def search_nfts(self, query, chain, limit=20):
        self.calls.append(f"search:{query}")
        return await self._answer(self.search)

    async def get_trending_nfts(self, contracts, chain, limit=20):
        self.calls.append("trending")
        return await self._answer(self.trending)


class FakeLedger:
    """LedgerClient stand-in keyed by (contract, method, args)."""

    def __init__(self, views: Optional[Dict[tuple, Any]] = None, logs: Optional[Dict[str, List[Dict]]] = None):
        self.views = views or {}
        self.logs = logs or {}
        self.calls: List[tuple] = []

    async def call_view(self, contract_address, method, *args):
        key = (contract_address, method) + tuple(args)
        self.calls.append(key)
        if key not in self.views:
            raise ValueError(f"execution reverted: {method}")
        value = self.views[key]
        if isinstance(value, BaseException):
            raise value
        return value

    async def get_logs(self, contract_address, topics, from_block="earliest", to_block="latest"):
        return self.logs.get(contract_address, [])

    async def block_number(self):
        return 1

    async def ping(self):
        return True
