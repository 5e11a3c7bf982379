"""
Multi-chain NFT aggregator - fan-out, merge, search and facets
"""

import asyncio
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from loguru import logger

from .chains import ChainCatalog
from .config import Config
from .models import (
    ChainConfig,
    ChainStatus,
    FacetEntry,
    MarketplaceListing,
    NFTItem,
    PriceRange,
    SearchFilters,
    SearchQuery,
    SearchResult,
    WalletCollectionsResult,
    WalletNFTsResult,
)
from .providers import ChainProvider, ProviderFactory, ProviderRegistry
from .utils import has_positive_price, parse_price, parse_token_id

PRICE_SORTS = {"price_asc": False, "price_desc": True}
CREATED_SORTS = {"created_desc": True, "created_asc": False}


class MultiChainNFTAggregator:
    """
    Unified NFT view over every enabled chain.

    Each enabled chain's provider is queried concurrently; a chain whose
    provider is missing, raises or times out contributes an empty list.
    """

    def __init__(
        self,
        settings: Optional[Config] = None,
        catalog: Optional[ChainCatalog] = None,
        registry: Optional[ProviderRegistry] = None,
        factory: Optional[ProviderFactory] = None,
    ):
        self.settings = settings or Config()
        self.catalog = catalog or ChainCatalog()
        self.registry = registry if registry is not None else ProviderRegistry()
        self._factory = factory
        self.enabled_chains = set(self.catalog.default_enabled())
        self._semaphore: Optional[asyncio.Semaphore] = None

    def _workers(self) -> asyncio.Semaphore:
        # Created inside the running loop
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.settings.max_workers)
        return self._semaphore

    @property
    def factory(self) -> ProviderFactory:
        if self._factory is None:
            self._factory = ProviderFactory(self.settings, self.catalog)
        return self._factory

    # -- chain set ----------------------------------------------------

    def get_supported_chains(self) -> List[ChainConfig]:
        return self.catalog.all()

    def get_enabled_chains(self) -> List[int]:
        """Enabled chain ids, catalog order first"""
        return sorted(self.enabled_chains, key=self.catalog.order_key)

    def toggle_chain(self, chain_id: int, enabled: bool) -> None:
        if enabled:
            self.enabled_chains.add(chain_id)
        else:
            self.enabled_chains.discard(chain_id)

    # -- providers ----------------------------------------------------

    def register_provider(self, chain_id: int, provider: ChainProvider) -> None:
        self.registry.register(chain_id, provider)

    async def initialize_providers(
        self, credentials_by_chain: Optional[Dict[Union[int, str], Dict[str, Any]]] = None
    ) -> List[int]:
        """
        Build and register providers. Keys are chain ids or slugs; values
        are credential maps such as ``{"alchemy": "key"}``. Without
        arguments every supported chain gets a provider built from the
        environment configuration.
        """
        if credentials_by_chain is None:
            credentials_by_chain = {chain_id: {} for chain_id in self.factory.supported_chain_ids()}

        registered = []
        for key, credentials in credentials_by_chain.items():
            chain = self.catalog.resolve(key)
            if chain is None:
                logger.warning(f"Unknown chain '{key}', skipping provider initialization")
                continue
            partial = {"credentials": dict(credentials or {})}
            provider = self.factory.create(chain.chain_id, partial)
            if provider is None:
                continue
            self.register_provider(chain.chain_id, provider)
            registered.append(chain.chain_id)
        logger.info(f"Initialized providers for chains {registered}")
        return registered

    # -- fan-out ------------------------------------------------------

    async def _call_provider(self, chain_id: int, call: Callable[[ChainProvider], Awaitable[List[Any]]]) -> List[Any]:
        provider = self.registry.get(chain_id)
        if provider is None:
            return []
        async with self._workers():
            result = await asyncio.wait_for(call(provider), timeout=self.settings.provider_timeout)
        return list(result or [])

    async def _fan_out(
        self,
        chain_ids: Iterable[int],
        call: Callable[[ChainProvider], Awaitable[List[Any]]],
    ) -> "OrderedDict[int, List[Any]]":
        chain_ids = list(chain_ids)
        results = await asyncio.gather(
            *(self._call_provider(chain_id, call) for chain_id in chain_ids),
            return_exceptions=True,
        )
        per_chain: "OrderedDict[int, List[Any]]" = OrderedDict()
        for chain_id, result in zip(chain_ids, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.TimeoutError):
                    logger.warning(f"Chain {chain_id} timed out")
                else:
                    logger.error(f"Chain {chain_id} failed: {result}")
                per_chain[chain_id] = []
            else:
                per_chain[chain_id] = result
        return per_chain

    async def get_all_nfts(self, address: str) -> WalletNFTsResult:
        per_chain = await self._fan_out(self.get_enabled_chains(), lambda p: p.get_nfts(address))
        nfts = [item for items in per_chain.values() for item in items]
        logger.info(f"Found {len(nfts)} NFTs for {address} across {len(per_chain)} chains")
        return WalletNFTsResult(nfts=nfts, chains=dict(per_chain), total_count=len(nfts))

    async def get_all_collections(self, address: str) -> WalletCollectionsResult:
        per_chain = await self._fan_out(self.get_enabled_chains(), lambda p: p.get_collections(address))
        collections = [c for chain_collections in per_chain.values() for c in chain_collections]
        return WalletCollectionsResult(collections=collections, chains=dict(per_chain))

    # -- search -------------------------------------------------------

    def _chain_matches(self, chain_id: int, blockchain: Optional[str]) -> bool:
        if not blockchain:
            return True
        wanted = blockchain.strip().lower()
        chain = self.catalog.get(chain_id)
        if chain is None:
            return wanted == str(chain_id)
        return wanted in (str(chain_id), chain.slug, chain.display_name.lower())

    def _item_matches_chain(self, item: NFTItem, blockchain: Optional[str]) -> bool:
        if not blockchain:
            return True
        chain = self.catalog.resolve(item.blockchain)
        if chain is None:
            return item.blockchain.lower() == blockchain.strip().lower()
        return self._chain_matches(chain.chain_id, blockchain)

    @staticmethod
    def _matches(item: NFTItem, query: SearchQuery) -> bool:
        if query.category and item.category != query.category:
            return False
        if query.price_min is not None or query.price_max is not None:
            price = parse_price(item.price)
            if query.price_min is not None and price < query.price_min:
                return False
            if query.price_max is not None and price > query.price_max:
                return False
        return True

    def _build_filters(self, items: List[NFTItem]) -> SearchFilters:
        categories: "OrderedDict[str, int]" = OrderedDict()
        blockchains: "OrderedDict[str, int]" = OrderedDict()
        prices = []
        for item in items:
            category = item.category
            if category:
                categories[category] = categories.get(category, 0) + 1
            blockchains[item.blockchain] = blockchains.get(item.blockchain, 0) + 1
            if has_positive_price(item.price):
                prices.append(parse_price(item.price))

        return SearchFilters(
            categories=[FacetEntry(id=c, name=c, count=n) for c, n in categories.items()],
            blockchains=[
                FacetEntry(id=slug, name=self.catalog.display_name(slug), count=n)
                for slug, n in blockchains.items()
            ],
            price_range=PriceRange(min=min(prices), max=max(prices)) if prices else PriceRange(),
        )

    @staticmethod
    def _sort(items: List[NFTItem], sort_by: Optional[str], sort_order: Optional[str]) -> List[NFTItem]:
        if not sort_by:
            return items
        descending = sort_order == "desc"
        if sort_by in PRICE_SORTS or sort_by == "price":
            descending = PRICE_SORTS.get(sort_by, descending)
            return sorted(items, key=lambda item: parse_price(item.price), reverse=descending)
        if sort_by in CREATED_SORTS or sort_by == "created":
            descending = CREATED_SORTS.get(sort_by, descending)
            return sorted(items, key=lambda item: parse_token_id(item.token_id), reverse=descending)
        logger.debug(f"Unknown sort '{sort_by}', keeping input order")
        return items

    @staticmethod
    def to_listing(item: NFTItem) -> MarketplaceListing:
        now_ms = int(time.time() * 1000)
        category = item.category or "general"
        return MarketplaceListing(
            id=f"listing_{item.id}",
            nft_id=item.id,
            token_id=item.token_id,
            contract=item.contract_address,
            blockchain=item.blockchain,
            seller=item.owner or "unknown",
            price=item.price or "0",
            currency=item.currency or "ETH",
            title=item.name,
            description=item.description,
            image_url=item.image_url or item.image,
            category=category,
            created_at=now_ms,
            updated_at=now_ms,
        )

    async def search_nfts(self, query: Union[SearchQuery, Dict[str, Any], None] = None) -> SearchResult:
        if query is None:
            query = SearchQuery()
        elif isinstance(query, dict):
            query = SearchQuery(**query)

        chain_ids = [c for c in self.get_enabled_chains() if self._chain_matches(c, query.blockchain)]
        fetch_count = query.offset + query.limit
        text = (query.text or "").strip()
        if text:
            call = lambda p: p.search_nfts(text, fetch_count)
        else:
            call = lambda p: p.get_trending_nfts(fetch_count)

        per_chain = await self._fan_out(chain_ids, call)
        merged = [item for items in per_chain.values() for item in items]
        matched = [
            item for item in merged
            if self._matches(item, query) and self._item_matches_chain(item, query.blockchain)
        ]

        filters = self._build_filters(matched)
        ordered = self._sort(matched, query.sort_by, query.sort_order)
        page = ordered[query.offset: query.offset + query.limit]

        total = len(ordered)
        return SearchResult(
            items=[self.to_listing(item) for item in page],
            total=total,
            has_more=query.offset + query.limit < total,
            filters=filters,
        )

    # -- status -------------------------------------------------------

    def get_chain_statistics(self) -> Dict[int, ChainStatus]:
        stats = {}
        for chain in self.catalog.all():
            provider = self.registry.get(chain.chain_id)
            stats[chain.chain_id] = ChainStatus(
                name=chain.display_name,
                enabled=chain.chain_id in self.enabled_chains,
                is_connected=bool(provider.is_connected) if provider is not None else False,
            )
        return stats

    async def test_connections(self) -> Dict[int, Any]:
        """test_connection for every registered provider"""
        registered = list(self.registry.items())
        chain_ids = [chain_id for chain_id, _ in registered]
        reports = await asyncio.gather(
            *(provider.test_connection() for _, provider in registered),
            return_exceptions=True,
        )
        results = {}
        for chain_id, report in zip(chain_ids, reports):
            if isinstance(report, BaseException):
                logger.error(f"Connection test failed for chain {chain_id}: {report}")
                continue
            results[chain_id] = report
        return results
