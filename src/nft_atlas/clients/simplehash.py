"""SimpleHash API client"""

from typing import Dict, Any, List

from .base import BaseAPIClient
from ..utils import validate_ethereum_address


class SimpleHashClient(BaseAPIClient):
    """SimpleHash multi-chain NFT API client"""

    source_name = "simplehash"

    CHAIN_MAP = {
        "ethereum": "ethereum",
        "polygon": "polygon",
        "bsc": "bsc",
        "avalanche": "avalanche",
        "arbitrum": "arbitrum",
        "optimism": "optimism",
        "base": "base",
        "solana": "solana",
    }

    def __init__(self, api_keys: List[str], timeout: int = 30, max_retries: int = 3, **kwargs: Any):
        base_url = "https://api.simplehash.com/api/v0"
        super().__init__(api_keys, base_url, rate_limit=50, timeout=timeout, max_retries=max_retries, **kwargs)

    def _get_chain_name(self, chain: str) -> str:
        chain_lower = chain.lower()
        if chain_lower not in self.CHAIN_MAP:
            raise NotImplementedError(f"SimpleHash does not serve {chain}")
        return self.CHAIN_MAP[chain_lower]

    def _get_headers(self) -> Dict[str, str]:
        return {"X-API-KEY": self.get_api_key()}

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get NFTs owned by a wallet"""
        response = await self._request(
            "GET",
            "nfts/owners",
            params={
                "chains": self._get_chain_name(chain),
                "wallet_addresses": wallet_address,
                "limit": min(page_size, 50),
            },
        )
        return {"nfts": response.get("nfts", []), "cursor": response.get("next_cursor")}

    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str,
    ) -> Dict[str, Any]:
        """Get individual token metadata"""
        response = await self._request(
            "GET", f"nfts/{self._get_chain_name(chain)}/{contract_address}/{token_id}"
        )
        return response if isinstance(response, dict) else {}

    async def _contract_nfts(self, contract: str, chain: str, limit: int) -> List[Dict[str, Any]]:
        response = await self._request(
            "GET",
            f"nfts/{self._get_chain_name(chain)}/{contract}",
            params={"limit": min(limit, 50)},
        )
        return response.get("nfts", [])

    async def search_nfts(self, query: str, chain: str, limit: int = 20) -> Dict[str, Any]:
        """Look up by contract address"""
        is_valid, checksum = validate_ethereum_address(query)
        if not is_valid:
            raise NotImplementedError("SimpleHash search needs a contract address")
        return {"nfts": await self._contract_nfts(checksum, chain, limit)}

    async def get_trending_nfts(
        self,
        contracts: List[str],
        chain: str,
        limit: int = 20,
    ) -> Dict[str, Any]:
        self._get_chain_name(chain)
        records = await self._collect_per_contract(
            lambda contract, remaining: self._contract_nfts(contract, chain, remaining),
            contracts,
            limit,
        )
        return {"nfts": records}
