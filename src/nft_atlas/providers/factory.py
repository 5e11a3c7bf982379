"""Provider construction and the registry the aggregator owns"""

from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from loguru import logger

from ..chains import ChainCatalog
from ..config import Config
from ..metadata import MetadataResolver
from ..models import ProviderConfig
from ..storage import StorageAdapter
from .base import ChainProvider
from .generic import ConfiguredChainProvider
from .placeholder import PlaceholderPolicy
from .profiles import PROFILES, get_profile


class ProviderFactory:
    """
    Builds one ChainProvider per supported chain id.

    Whether providers talk to the first-party RPC/index or to public
    endpoints, and whether demo placeholders are allowed, is decided from
    ``settings`` when the factory is constructed.
    """

    def __init__(
        self,
        settings: Optional[Config] = None,
        catalog: Optional[ChainCatalog] = None,
        storage: Optional[StorageAdapter] = None,
        resolver: Optional[MetadataResolver] = None,
    ):
        self.settings = settings or Config()
        self.catalog = catalog or ChainCatalog()
        self.storage = storage
        self.resolver = resolver or MetadataResolver(
            gateway=self.settings.ipfs_gateway, timeout=self.settings.timeout
        )
        self.use_internal = bool(self.settings.use_internal_provider and self.settings.internal_rpc_url)
        self.internal_index_url = self.settings.internal_index_url if self.settings.use_internal_provider else None
        self.placeholder = PlaceholderPolicy() if self.settings.provider_mode == "demo" else None

    def supported_chain_ids(self) -> List[int]:
        return [chain_id for chain_id in self.catalog.ids() if chain_id in PROFILES]

    def rpc_url_for(self, chain_id: int) -> Optional[str]:
        profile = get_profile(chain_id)
        if profile is None:
            return None
        if self.use_internal:
            return self.settings.internal_rpc_url
        return profile.public_rpc_url

    def create(self, chain_id: int, config: Optional[Dict[str, Any]] = None) -> Optional[ChainProvider]:
        """Build the provider for ``chain_id``, None when the chain is not offered"""
        chain = self.catalog.get(chain_id)
        profile = get_profile(chain_id)
        if chain is None or profile is None:
            logger.warning(f"No provider available for chain id {chain_id}")
            return None

        provider_config = ProviderConfig(
            rpc_url=self.rpc_url_for(chain_id),
            credentials=self.settings.credentials(),
            internal_index_url=self.internal_index_url,
        )
        if config:
            provider_config = provider_config.merged(config)

        provider = ConfiguredChainProvider(
            chain,
            profile,
            provider_config,
            settings=self.settings,
            storage=self.storage,
            resolver=self.resolver,
            placeholder=self.placeholder,
        )
        logger.info(
            f"Created {chain.display_name} provider with sources {list(provider.clients) or 'none'}"
            f" ({'internal' if self.use_internal else 'public'} RPC)"
        )
        return provider

    def create_all(self, configs: Optional[Dict[int, Dict[str, Any]]] = None) -> Dict[int, ChainProvider]:
        configs = configs or {}
        providers = {}
        for chain_id in self.supported_chain_ids():
            provider = self.create(chain_id, configs.get(chain_id))
            if provider is not None:
                providers[chain_id] = provider
        return providers


class ProviderRegistry:
    """Mutable chain id -> provider map; one per aggregator, no global state"""

    def __init__(self, providers: Optional[Dict[int, ChainProvider]] = None):
        self._providers: Dict[int, ChainProvider] = dict(providers or {})

    def register(self, chain_id: int, provider: ChainProvider) -> None:
        if chain_id in self._providers:
            logger.info(f"Replacing provider for chain {chain_id}")
        self._providers[chain_id] = provider

    def get(self, chain_id: int) -> Optional[ChainProvider]:
        return self._providers.get(chain_id)

    def chain_ids(self) -> List[int]:
        return list(self._providers)

    def items(self) -> Iterator[Tuple[int, ChainProvider]]:
        return iter(list(self._providers.items()))

    def __contains__(self, chain_id: Union[int, Any]) -> bool:
        return chain_id in self._providers

    def __len__(self) -> int:
        return len(self._providers)
