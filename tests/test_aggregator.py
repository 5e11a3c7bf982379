"""
Unit tests for the multi-chain aggregator.

Tests follow the Given/When/Then pattern for clarity.
"""

import asyncio

import pytest
from pydantic import ValidationError

from nft_atlas.aggregator import MultiChainNFTAggregator
from nft_atlas.config import Config
from nft_atlas.providers import ProviderFactory, ProviderRegistry
from nft_atlas.providers.generic import ConfiguredChainProvider

from conftest import FakeProvider, make_item

OWNER = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


@pytest.fixture
def aggregator(settings, catalog):
    return MultiChainNFTAggregator(settings, catalog, ProviderRegistry(), ProviderFactory(settings, catalog))


def register(aggregator, chain, items=None, **kwargs):
    provider = FakeProvider(chain, items, **kwargs)
    aggregator.register_provider(chain.chain_id, provider)
    return provider


class TestChainSet:
    def test_default_enabled_chains(self, aggregator):
        assert aggregator.get_enabled_chains() == [8888, 1, 137, 56]

    def test_toggle_round_trip(self, aggregator):
        """
        Given the default chain set
        When Solana is enabled and Polygon disabled, then both reverted
        Then the set changes and comes back unchanged
        """
        before = aggregator.get_enabled_chains()

        aggregator.toggle_chain(101, True)
        aggregator.toggle_chain(137, False)
        assert aggregator.get_enabled_chains() == [8888, 1, 56, 101]

        aggregator.toggle_chain(101, False)
        aggregator.toggle_chain(137, True)
        assert aggregator.get_enabled_chains() == before

    def test_toggle_is_idempotent(self, aggregator):
        aggregator.toggle_chain(1, True)
        aggregator.toggle_chain(42, False)

        assert aggregator.get_enabled_chains() == [8888, 1, 137, 56]

    def test_supported_chains_come_from_catalog(self, aggregator, catalog):
        assert [c.chain_id for c in aggregator.get_supported_chains()] == catalog.ids()


class TestWalletQueries:
    async def test_failing_chain_contributes_empty_list(self, aggregator, ethereum, polygon, catalog):
        """
        Given Ethereum with 3 NFTs, BSC with 1, Polygon raising and OmniCoin without provider
        When querying all NFTs
        Then 4 NFTs are returned and every enabled chain is keyed
        """
        # Given
        register(aggregator, ethereum, [make_item(token_id=str(n)) for n in range(3)])
        register(aggregator, catalog.get(56), [make_item(blockchain="bsc")])
        register(aggregator, polygon, error=RuntimeError("rpc down"))

        # When
        result = await aggregator.get_all_nfts(OWNER)

        # Then
        assert result.total_count == 4
        assert len(result.nfts) == 4
        assert set(result.chains) == {8888, 1, 137, 56}
        assert result.chains[137] == []
        assert result.chains[8888] == []
        assert len(result.chains[1]) == 3

    async def test_disabled_chains_are_not_queried(self, aggregator, ethereum, solana):
        eth = register(aggregator, ethereum, [make_item()])
        sol = register(aggregator, solana, [make_item(blockchain="solana")])

        result = await aggregator.get_all_nfts(OWNER)

        assert 101 not in result.chains
        assert sol.calls == []
        assert eth.calls == [f"get_nfts:{OWNER}"]

    async def test_slow_chain_times_out(self, catalog, ethereum, polygon):
        """
        Given a provider slower than the provider timeout
        When querying all NFTs
        Then its chain is empty and the others still answer
        """

        class SlowProvider(FakeProvider):
            async def get_nfts(self, address):
                await asyncio.sleep(1)
                return [make_item(blockchain="polygon")]

        settings = Config(provider_timeout=0.05)
        aggregator = MultiChainNFTAggregator(settings, catalog, ProviderRegistry())
        register(aggregator, ethereum, [make_item()])
        aggregator.register_provider(137, SlowProvider(polygon))

        result = await aggregator.get_all_nfts(OWNER)

        assert result.chains[137] == []
        assert result.total_count == 1

    def test_worker_limit_built_inside_running_loop(self, catalog, ethereum, polygon):
        """
        Given an aggregator built outside any event loop with a single worker
        When querying all NFTs from a fresh loop
        Then both chains answer one at a time
        """
        active = []
        peak = []

        class CountingProvider(FakeProvider):
            async def get_nfts(self, address):
                active.append(address)
                peak.append(len(active))
                await asyncio.sleep(0.01)
                active.pop()
                return list(self.items)

        # Given
        aggregator = MultiChainNFTAggregator(Config(max_workers=1), catalog, ProviderRegistry())
        aggregator.register_provider(1, CountingProvider(ethereum, [make_item()]))
        aggregator.register_provider(137, CountingProvider(polygon, [make_item(blockchain="polygon")]))
        assert aggregator._semaphore is None

        # When
        result = asyncio.run(aggregator.get_all_nfts(OWNER))

        # Then
        assert result.total_count == 2
        assert max(peak) == 1

    async def test_collections_grouped_per_chain(self, aggregator, ethereum, polygon):
        register(aggregator, ethereum, [make_item(name="Foo #1"), make_item(token_id="2", name="Foo #2")])
        register(aggregator, polygon, [make_item(blockchain="polygon", name="Bar #1")])

        result = await aggregator.get_all_collections(OWNER)

        assert [c.name for c in result.collections] == ["Foo", "Bar"]
        assert len(result.chains[1][0].items) == 2
        assert result.chains[56] == []


class TestSearch:
    @pytest.fixture
    def priced(self, aggregator, ethereum, polygon):
        register(aggregator, ethereum, [
            make_item(token_id="1", price="1.5", category="art", currency="ETH"),
            make_item(token_id="2", price="10", category="gaming"),
            make_item(token_id="3", price="40", category="art"),
        ])
        register(aggregator, polygon, [
            make_item(blockchain="polygon", token_id="4", price="100", category="art"),
            make_item(blockchain="polygon", token_id="5"),
        ])
        return aggregator

    async def test_empty_text_uses_trending(self, priced):
        result = await priced.search_nfts({"limit": 3})

        providers = [priced.registry.get(1), priced.registry.get(137)]
        assert all(p.calls == ["trending:3"] for p in providers)
        assert result.total == 5

    async def test_text_uses_provider_search(self, priced):
        await priced.search_nfts({"text": " foo ", "offset": 2, "limit": 3})

        assert priced.registry.get(1).calls == ["search:foo:5"]

    async def test_pagination(self, priced):
        """
        Given five items across two chains
        When searching with limit 2
        Then two listings are returned and more are available
        """
        result = await priced.search_nfts({"limit": 2})

        assert len(result.items) == 2
        assert result.total == 4
        assert result.has_more is True

        last_page = await priced.search_nfts({"offset": 4, "limit": 2})
        assert len(last_page.items) == 1
        assert last_page.has_more is False

    async def test_price_desc_ordering(self, priced):
        result = await priced.search_nfts({"sort_by": "price_desc"})

        assert [l.price for l in result.items] == ["100", "40", "10", "1.5", "0"]

    async def test_bare_price_sort_with_order(self, priced):
        result = await priced.search_nfts({"sort_by": "price", "sort_order": "asc"})

        assert [l.token_id for l in result.items] == ["5", "1", "2", "3", "4"]

    async def test_created_sort_uses_token_id(self, priced):
        result = await priced.search_nfts({"sort_by": "created_desc"})

        assert [l.token_id for l in result.items] == ["5", "4", "3", "2", "1"]

    async def test_price_range_filter_is_inclusive(self, priced):
        """
        Given items priced 1.5, 10, 40, 100 and unpriced
        When filtering to 10..40
        Then exactly the 10 and 40 items match
        """
        result = await priced.search_nfts({"price_min": 10, "price_max": 40})

        assert sorted(l.token_id for l in result.items) == ["2", "3"]

    async def test_price_filter_excludes_cheaper_items(self, aggregator, ethereum):
        register(aggregator, ethereum, [make_item(token_id="1", price="5"), make_item(token_id="2", price="50")])

        result = await aggregator.search_nfts({"price_min": 10})

        assert [l.token_id for l in result.items] == ["2"]

    async def test_category_and_blockchain_filters(self, priced):
        result = await priced.search_nfts({"category": "art", "blockchain": "Polygon"})

        assert [l.token_id for l in result.items] == ["4"]
        assert priced.registry.get(1).calls == []

    async def test_facets(self, priced):
        """
        Given the priced fixture
        When searching without filters
        Then categories, blockchains and the positive price range are reported
        """
        result = await priced.search_nfts()

        categories = {f.id: f.count for f in result.filters.categories}
        blockchains = {f.id: (f.name, f.count) for f in result.filters.blockchains}
        assert categories == {"art": 3, "gaming": 1}
        assert blockchains == {"ethereum": ("Ethereum", 3), "polygon": ("Polygon", 2)}
        assert result.filters.price_range.min == 1.5
        assert result.filters.price_range.max == 100

    async def test_price_range_defaults_to_zero(self, aggregator, ethereum):
        register(aggregator, ethereum, [make_item(), make_item(token_id="2", price="0")])

        result = await aggregator.search_nfts()

        assert result.filters.price_range.min == 0
        assert result.filters.price_range.max == 0

    async def test_listing_shape(self, priced):
        result = await priced.search_nfts({"sort_by": "price_asc", "category": "gaming"})

        listing = result.items[0]
        assert listing.id == "listing_ethereum_0xabc_2"
        assert listing.nft_id == "ethereum_0xabc_2"
        assert listing.category == "gaming"
        assert listing.seller == "unknown"
        assert listing.listing_type == "fixed_price"

    async def test_no_providers_returns_empty_result(self, aggregator):
        result = await aggregator.search_nfts()

        assert result.total == 0
        assert result.items == []
        assert result.has_more is False

    async def test_invalid_query_rejected(self, aggregator):
        with pytest.raises(ValidationError):
            await aggregator.search_nfts({"limit": 0})


class TestStatusAndInitialization:
    def test_statistics_cover_every_supported_chain(self, aggregator, ethereum, polygon):
        register(aggregator, ethereum, connected=True)
        register(aggregator, polygon, connected=False)

        stats = aggregator.get_chain_statistics()

        assert set(stats) == {c.chain_id for c in aggregator.get_supported_chains()}
        assert stats[1].is_connected is True and stats[1].enabled is True
        assert stats[137].is_connected is False
        assert stats[101].enabled is False
        assert stats[8888].is_connected is False
        assert stats[1].name == "Ethereum"

    async def test_initialize_providers_accepts_ids_and_slugs(self, aggregator):
        """
        Given credentials keyed by a chain id, a slug and an unknown name
        When initializing providers
        Then the known chains get configured providers
        """
        registered = await aggregator.initialize_providers({
            1: {"alchemy": "eth-key"},
            "solana": {"helius": "sol-key"},
            "nowhere": {},
        })

        assert registered == [1, 101]
        eth = aggregator.registry.get(1)
        assert isinstance(eth, ConfiguredChainProvider)
        assert list(eth.clients) == ["alchemy"]
        assert list(aggregator.registry.get(101).clients) == ["helius", "magiceden"]

    async def test_initialize_without_arguments_builds_every_profile(self, aggregator):
        registered = await aggregator.initialize_providers()

        assert 8888 not in registered
        assert len(registered) == 8

    async def test_connection_reports(self, aggregator, ethereum, polygon):
        register(aggregator, ethereum, connected=True)
        register(aggregator, polygon, connected=False)

        reports = await aggregator.test_connections()

        assert reports[1].working_sources == ["fake"]
        assert reports[137].connected is False
