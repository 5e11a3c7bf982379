"""Base client with common functionality"""

import asyncio
import time
from typing import Dict, Any, Optional, List, Union
from abc import ABC, abstractmethod
import aiohttp
from tenacity import (
    retry,
    retry_if_exception,
    wait_exponential,
)
from loguru import logger

ZERO_EVM_ADDRESS = "0x0000000000000000000000000000000000000000"


def _is_transient(error: BaseException) -> bool:
    """Connection failures, timeouts, 429 and 5xx are worth another attempt"""
    if isinstance(error, aiohttp.ClientResponseError):
        return error.status == 429 or error.status >= 500
    return isinstance(error, (aiohttp.ClientConnectionError, asyncio.TimeoutError))


def _stop_after_client_retries(retry_state) -> bool:
    client = retry_state.args[0] if retry_state.args else None
    attempts = getattr(client, "max_retries", 3) or 1
    return retry_state.attempt_number >= attempts


class BaseAPIClient(ABC):
    """Base class for indexing API clients with retry logic and rate limiting"""

    source_name = "base"
    ping_address = ZERO_EVM_ADDRESS

    def __init__(
        self,
        api_keys: List[str],
        base_url: str,
        rate_limit: int = 100,
        timeout: int = 30,
        max_retries: int = 3,
    ):
        self.api_keys = api_keys
        self.base_url = base_url
        self.rate_limit = rate_limit
        self.timeout = timeout
        self.max_retries = max_retries
        self.current_key_index = 0
        self._rate_limiter_semaphore = asyncio.Semaphore(rate_limit)
        self._last_request_time = 0.0
        self._min_request_interval = 1.0 / rate_limit

    def get_api_key(self) -> str:
        """Get current API key (with rotation)"""
        if not self.api_keys:
            raise ValueError(f"No {self.source_name} API keys configured")
        return self.api_keys[self.current_key_index % len(self.api_keys)]

    def rotate_api_key(self):
        """Rotate to next API key"""
        if self.api_keys:
            self.current_key_index = (self.current_key_index + 1) % len(self.api_keys)

    async def _apply_rate_limit(self):
        """Rate limiting"""
        async with self._rate_limiter_semaphore:
            current_time = time.time()
            time_since_last = current_time - self._last_request_time
            if time_since_last < self._min_request_interval:
                await asyncio.sleep(self._min_request_interval - time_since_last)
            self._last_request_time = time.time()

    def _get_headers(self) -> Dict[str, str]:
        """Authentication headers, overridden per upstream"""
        return {}

    @retry(
        stop=_stop_after_client_retries,
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception(_is_transient),
        reraise=True,
    )
    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Union[Dict[str, Any], List[Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Make HTTP request with retry logic"""
        await self._apply_rate_limit()

        if endpoint.startswith(("http://", "https://")):
            url = endpoint
        else:
            url = f"{self.base_url}/{endpoint.lstrip('/')}"

        default_headers = {"Accept": "application/json"}
        default_headers.update(self._get_headers())
        if headers:
            default_headers.update(headers)

        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
            async with session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                headers=default_headers,
            ) as response:
                if response.status == 429:
                    logger.warning(f"{self.source_name} rate limited, rotating API key")
                    self.rotate_api_key()
                response.raise_for_status()
                return await response.json(content_type=None)

    @abstractmethod
    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get NFTs owned by a wallet as {"nfts": [...], "cursor": ...}"""
        pass

    @abstractmethod
    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str,
    ) -> Dict[str, Any]:
        """Get one token's raw record, {} when the upstream has none"""
        pass

    async def search_nfts(self, query: str, chain: str, limit: int = 20) -> Dict[str, Any]:
        """Look up NFTs matching a contract address or collection identifier"""
        raise NotImplementedError(f"{self.source_name} does not support search")

    async def get_trending_nfts(
        self,
        contracts: List[str],
        chain: str,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Sample NFTs from the given trending contracts"""
        raise NotImplementedError(f"{self.source_name} does not support trending")

    async def ping(self, chain: str) -> bool:
        """True when the upstream answers a minimal wallet query"""
        try:
            await self.get_wallet_nfts(self.ping_address, chain, page_size=1)
            return True
        except NotImplementedError:
            return False
        except Exception as e:
            logger.debug(f"{self.source_name} ping failed on {chain}: {e}")
            return False

    async def _collect_per_contract(self, fetch, contracts: List[str], limit: int) -> List[Dict[str, Any]]:
        """Call ``fetch(contract, remaining)`` per contract until ``limit`` records are gathered"""
        records: List[Dict[str, Any]] = []
        for contract in contracts:
            remaining = limit - len(records)
            if remaining <= 0:
                break
            try:
                records.extend((await fetch(contract, remaining))[:remaining])
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.debug(f"{self.source_name} trending fetch failed for {contract}: {e}")
        return records
