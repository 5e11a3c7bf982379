"""Moralis API client"""

from typing import Dict, Any, List

from .base import BaseAPIClient


class MoralisClient(BaseAPIClient):
    """Moralis Web3 Data API client"""

    source_name = "moralis"

    CHAIN_MAP = {
        "ethereum": "eth",
        "polygon": "polygon",
        "bsc": "bsc",
        "avalanche": "avalanche",
        "arbitrum": "arbitrum",
        "optimism": "optimism",
        "base": "base",
    }

    def __init__(self, api_keys: List[str], timeout: int = 30, max_retries: int = 3, **kwargs: Any):
        base_url = "https://deep-index.moralis.io/api/v2"
        super().__init__(api_keys, base_url, rate_limit=200, timeout=timeout, max_retries=max_retries, **kwargs)

    def _get_chain_name(self, chain: str) -> str:
        """Convert chain slug to Moralis format"""
        chain_lower = chain.lower()
        if chain_lower not in self.CHAIN_MAP:
            raise NotImplementedError(f"Moralis does not serve {chain}")
        return self.CHAIN_MAP[chain_lower]

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers with API key"""
        return {"X-API-Key": self.get_api_key()}

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get NFTs owned by a wallet"""
        params = {
            "chain": self._get_chain_name(chain),
            "format": "decimal",
            "limit": min(page_size, 100),
        }
        response = await self._request("GET", f"{wallet_address}/nft", params=params)
        return {"nfts": response.get("result", []), "cursor": response.get("cursor")}

    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str,
    ) -> Dict[str, Any]:
        """Get individual token metadata"""
        response = await self._request(
            "GET",
            f"nft/{contract_address}/{token_id}",
            params={"chain": self._get_chain_name(chain), "format": "decimal"},
        )
        return response if isinstance(response, dict) else {}

    async def search_nfts(self, query: str, chain: str, limit: int = 20) -> Dict[str, Any]:
        """Full-text search over token names and attributes"""
        response = await self._request(
            "GET",
            "nft/search",
            params={
                "chain": self._get_chain_name(chain),
                "q": query,
                "filter": "name,attributes",
                "format": "decimal",
                "limit": min(limit, 100),
            },
        )
        return {"nfts": response.get("result", [])}

    async def _contract_nfts(self, contract: str, chain: str, limit: int) -> List[Dict[str, Any]]:
        response = await self._request(
            "GET",
            f"nft/{contract}",
            params={"chain": self._get_chain_name(chain), "format": "decimal", "limit": min(limit, 100)},
        )
        return response.get("result", [])

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
