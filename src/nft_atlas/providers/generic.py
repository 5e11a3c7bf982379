"""Generic chain provider driven by a ChainProfile"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

from loguru import logger

from ..clients import CLIENT_CLASSES, KEYLESS_SOURCES, BaseAPIClient, InternalIndexClient
from ..config import Config
from ..ledger import SolanaRpcClient, Web3Ledger
from ..metadata import MetadataResolver
from ..models import ChainConfig, ConnectionReport, MalformedResponseError, NFTItem, ProviderConfig
from ..normalizer import Normalizer
from ..storage import StorageAdapter
from .base import ChainProvider
from .placeholder import PlaceholderPolicy
from .profiles import SOLANA, ChainProfile
from .scan import EvmScanner, SolanaScanner

RPC_SOURCE = "rpc"
INTERNAL_SOURCE = "internal"


class ConfiguredChainProvider(ChainProvider):
    """
    One provider implementation for every supported chain.

    ``get_nfts`` walks a fixed fallback chain and stops at the first step
    that answers:

    1. cache, then the first-party index (when configured)
    2. indexing APIs in the profile's priority order
    3. direct ledger scan of the profile's known contracts
    4. placeholder items, only when a PlaceholderPolicy was injected and
       every live step came back empty
    """

    def __init__(
        self,
        chain: ChainConfig,
        profile: ChainProfile,
        config: ProviderConfig,
        settings: Optional[Config] = None,
        storage: Optional[StorageAdapter] = None,
        resolver: Optional[MetadataResolver] = None,
        placeholder: Optional[PlaceholderPolicy] = None,
        clients: Optional[Dict[str, BaseAPIClient]] = None,
        scanner: Any = None,
    ):
        self.chain = chain
        self.profile = profile
        self.config = config
        self.settings = settings or Config()
        self.storage = storage
        self.resolver = resolver or MetadataResolver(
            gateway=self.settings.ipfs_gateway, timeout=self.settings.timeout
        )
        self.placeholder = placeholder
        self._client_overrides = clients
        self._scanner_override = scanner
        self._build()

    # -- construction -------------------------------------------------

    def _build(self):
        self.clients = self._build_clients()
        self.internal_client = self._build_internal_client()
        self.scanner = self._scanner_override if self._scanner_override is not None else self._build_scanner()
        self.is_connected = bool(self.config.rpc_url)

    def _build_clients(self) -> Dict[str, BaseAPIClient]:
        if self._client_overrides is not None:
            return dict(self._client_overrides)
        clients: Dict[str, BaseAPIClient] = {}
        for source in self.profile.sources:
            key = self.config.credential(source)
            if not key and source not in KEYLESS_SOURCES:
                continue
            client_cls = CLIENT_CLASSES[source]
            clients[source] = client_cls(
                [key] if key else [],
                timeout=self.settings.timeout,
                max_retries=self.settings.max_retries,
            )
        return clients

    def _build_internal_client(self) -> Optional[InternalIndexClient]:
        if not self.config.internal_index_url:
            return None
        return InternalIndexClient(
            self.config.internal_index_url,
            timeout=self.settings.timeout,
            max_retries=self.settings.max_retries,
        )

    def _build_scanner(self):
        if not self.config.rpc_url:
            return None
        gateway = self.settings.ipfs_gateway
        if self.profile.ledger == SOLANA:
            rpc = SolanaRpcClient(self.config.rpc_url, timeout=self.settings.timeout)
            return SolanaScanner(rpc, self.resolver, self.chain, gateway=gateway)
        ledger = Web3Ledger(self.config.rpc_url, timeout=self.settings.timeout)
        return EvmScanner(ledger, self.resolver, self.chain, self.profile.scan_contracts, gateway=gateway)

    def update_config(self, partial: Dict[str, Any]) -> None:
        self.config = self.config.merged(partial)
        self._client_overrides = None
        self._scanner_override = None
        self._build()
        logger.info(f"{self.chain.display_name} provider reconfigured (connected={self.is_connected})")

    # -- helpers ------------------------------------------------------

    def _cache_key(self, address: str) -> str:
        return f"nfts:{self.chain.slug}:{address.lower()}"

    async def _source_call(self, source: str, call: Callable[[], Awaitable[Any]]) -> Optional[Any]:
        """Run one upstream call; any failure means 'this source produced nothing'"""
        try:
            return await asyncio.wait_for(call(), timeout=self.settings.source_timeout)
        except NotImplementedError as e:
            logger.debug(f"{source} skipped on {self.chain.slug}: {e}")
        except asyncio.TimeoutError:
            logger.warning(f"{source} timed out on {self.chain.slug}")
        except Exception as e:
            logger.warning(f"{source} failed on {self.chain.slug}: {e}")
        return None

    def _normalize(self, source: str, response: Any, owner: str = "") -> List[NFTItem]:
        if not isinstance(response, dict) or not isinstance(response.get("nfts"), list):
            raise MalformedResponseError(f"{source} response has no NFT list")
        return Normalizer.normalize_many(
            response["nfts"], source, self.chain, owner, self.settings.ipfs_gateway
        )

    async def _read_cache(self, address: str) -> Optional[List[NFTItem]]:
        if self.storage is None:
            return None
        cached = await self.storage.get_cache(self._cache_key(address))
        if cached is None:
            return None
        try:
            items = [NFTItem(**entry) for entry in cached]
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache entry for {address}: {e}")
            return None
        logger.debug(f"Cache hit for {address} on {self.chain.slug}")
        return items

    async def _write_cache(self, address: str, items: List[NFTItem]):
        if self.storage is None or not items:
            return
        await self.storage.set_cache(
            self._cache_key(address),
            [item.dict() for item in items],
            ttl=self.settings.cache_ttl,
        )

    # -- fallback pipeline --------------------------------------------

    async def _fetch_live(self, address: str) -> List[NFTItem]:
        if self.internal_client is not None:
            response = await self._source_call(
                INTERNAL_SOURCE, lambda: self.internal_client.get_wallet_nfts(address, self.chain.slug)
            )
            if response is not None:
                try:
                    items = self._normalize(INTERNAL_SOURCE, response, address)
                    logger.info(f"First-party index returned {len(items)} NFTs on {self.chain.slug}")
                    return items
                except MalformedResponseError as e:
                    logger.warning(f"First-party index answer unusable on {self.chain.slug}: {e}")

        for source, client in self.clients.items():
            response = await self._source_call(
                source, lambda client=client: client.get_wallet_nfts(address, self.chain.slug)
            )
            if response is None:
                continue
            try:
                items = self._normalize(source, response, address)
            except MalformedResponseError as e:
                logger.warning(f"{source} answer unusable on {self.chain.slug}: {e}")
                continue
            logger.info(f"{source} returned {len(items)} NFTs for {address} on {self.chain.slug}")
            return items

        if self.scanner is not None:
            items = await self._source_call(RPC_SOURCE, lambda: self.scanner.scan(address))
            return items or []
        return []

    async def get_nfts(self, address: str) -> List[NFTItem]:
        try:
            cached = await self._read_cache(address)
            if cached is not None:
                return cached

            items = await self._fetch_live(address)
            if items:
                await self._write_cache(address, items)
                return items

            if self.placeholder is not None:
                logger.debug(f"No live NFTs on {self.chain.slug}, serving placeholders")
                return self.placeholder.generate(self.chain, address)
            return items
        except Exception as e:
            logger.error(f"get_nfts failed on {self.chain.slug} for {address}: {e}")
            return []

    async def get_nft_metadata(self, contract_address: str, token_id: str) -> Optional[NFTItem]:
        try:
            for source, client in self.clients.items():
                record = await self._source_call(
                    source,
                    lambda client=client: client.get_token_metadata(contract_address, token_id, self.chain.slug),
                )
                if not record:
                    continue
                try:
                    return Normalizer.normalize_nft_from_source(
                        record, source, self.chain, gateway=self.settings.ipfs_gateway
                    )
                except MalformedResponseError as e:
                    logger.warning(f"{source} token record unusable: {e}")

            if self.scanner is not None:
                return await self._source_call(
                    RPC_SOURCE, lambda: self.scanner.lookup(contract_address, token_id)
                )
            return None
        except Exception as e:
            logger.error(f"get_nft_metadata failed on {self.chain.slug} for {contract_address}/{token_id}: {e}")
            return None

    async def _first_non_empty(self, operation: str, call_for: Callable[[BaseAPIClient], Awaitable[Any]], limit: int) -> List[NFTItem]:
        for source, client in self.clients.items():
            response = await self._source_call(source, lambda client=client: call_for(client))
            if response is None:
                continue
            try:
                items = self._normalize(source, response)
            except MalformedResponseError as e:
                logger.warning(f"{source} {operation} answer unusable: {e}")
                continue
            if items:
                return items[:limit]
        return []

    async def search_nfts(self, query: str, limit: int = 20) -> List[NFTItem]:
        try:
            if not query or not query.strip():
                return []
            return await self._first_non_empty(
                "search",
                lambda client: client.search_nfts(query.strip(), self.chain.slug, limit),
                limit,
            )
        except Exception as e:
            logger.error(f"search_nfts failed on {self.chain.slug}: {e}")
            return []

    async def get_trending_nfts(self, limit: int = 20) -> List[NFTItem]:
        try:
            items = await self._first_non_empty(
                "trending",
                lambda client: client.get_trending_nfts(
                    list(self.profile.trending_contracts), self.chain.slug, limit
                ),
                limit,
            )
            if not items and self.placeholder is not None:
                return self.placeholder.generate(self.chain, "trending")[:limit]
            return items
        except Exception as e:
            logger.error(f"get_trending_nfts failed on {self.chain.slug}: {e}")
            return []

    async def test_connection(self) -> ConnectionReport:
        checks = {source: client.ping(self.chain.slug) for source, client in self.clients.items()}
        if self.internal_client is not None:
            checks[INTERNAL_SOURCE] = self.internal_client.ping(self.chain.slug)
        if self.scanner is not None:
            ledger = getattr(self.scanner, "ledger", None) or getattr(self.scanner, "rpc", None)
            if ledger is not None:
                checks[RPC_SOURCE] = ledger.ping()

        results = await asyncio.gather(*checks.values(), return_exceptions=True)
        working = [source for source, ok in zip(checks, results) if ok is True]
        return ConnectionReport(connected=bool(working), working_sources=working)
