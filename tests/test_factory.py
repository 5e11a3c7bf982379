"""
Unit tests for provider construction and the provider registry.

Tests follow the Given/When/Then pattern for clarity.
"""

from nft_atlas.config import Config
from nft_atlas.providers import ProviderFactory, ProviderRegistry
from nft_atlas.providers.generic import ConfiguredChainProvider
from nft_atlas.providers.profiles import PROFILES

from conftest import FakeProvider


class TestProviderFactory:
    def test_unsupported_chains_yield_none(self, settings):
        """
        Given a chain known to the catalog without a provider profile, and an unknown id
        When creating providers
        Then both yield None
        """
        factory = ProviderFactory(settings)

        assert factory.create(8888) is None
        assert factory.create(999) is None

    def test_public_rpc_by_default(self, settings):
        provider = ProviderFactory(settings).create(137)

        assert isinstance(provider, ConfiguredChainProvider)
        assert provider.config.rpc_url == PROFILES[137].public_rpc_url
        assert provider.internal_client is None
        assert provider.is_connected is True

    def test_internal_rpc_and_index_when_enabled(self):
        """
        Given settings enabling the first-party RPC and index
        When creating a provider
        Then it points at the internal endpoints
        """
        settings = Config(
            use_internal_provider=True,
            internal_rpc_url="https://rpc.internal.test",
            internal_index_url="https://index.internal.test",
        )

        provider = ProviderFactory(settings).create(1)

        assert provider.config.rpc_url == "https://rpc.internal.test"
        assert provider.internal_client.base_url == "https://index.internal.test"

    def test_internal_flag_without_url_uses_public_rpc(self):
        settings = Config(use_internal_provider=True)

        provider = ProviderFactory(settings).create(1)

        assert provider.config.rpc_url == PROFILES[1].public_rpc_url

    def test_credentials_select_sources(self):
        """
        Given settings with an Alchemy key only
        When creating the Ethereum provider
        Then only the Alchemy client is built
        """
        settings = Config(alchemy_api_keys=["k1", "k2"])

        provider = ProviderFactory(settings).create(1)

        assert list(provider.clients) == ["alchemy"]

    def test_keyless_source_is_always_built(self, settings):
        provider = ProviderFactory(settings).create(101)

        assert list(provider.clients) == ["magiceden"]

    def test_partial_config_overrides_settings(self, settings):
        provider = ProviderFactory(settings).create(56, {"rpc_url": "https://bsc.custom.test", "moralis": "m-key"})

        assert provider.config.rpc_url == "https://bsc.custom.test"
        assert list(provider.clients) == ["moralis"]

    def test_placeholders_only_in_demo_mode(self):
        live = ProviderFactory(Config()).create(1)
        demo = ProviderFactory(Config(provider_mode="demo")).create(1)

        assert live.placeholder is None
        assert demo.placeholder is not None

    def test_create_all_covers_every_profile(self, settings):
        providers = ProviderFactory(settings).create_all()

        assert sorted(providers) == sorted(PROFILES)
        assert 8888 not in providers


class TestProviderRegistry:
    def test_register_and_replace(self, ethereum):
        """
        Given an empty registry
        When a provider is registered and then replaced
        Then lookups reflect each step
        """
        registry = ProviderRegistry()
        first, second = FakeProvider(ethereum), FakeProvider(ethereum)

        registry.register(1, first)
        registry.register(1, second)

        assert registry.get(1) is second
        assert 1 in registry
        assert len(registry) == 1
        assert registry.chain_ids() == [1]
        assert list(registry.items()) == [(1, second)]

    def test_registries_are_independent(self, ethereum):
        one, two = ProviderRegistry(), ProviderRegistry()

        one.register(1, FakeProvider(ethereum))

        assert 1 not in two
