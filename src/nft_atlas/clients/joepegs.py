"""Joepegs marketplace API client (Avalanche)"""

from typing import Dict, Any, List

from .base import BaseAPIClient


def _tokens(response: Any) -> List[Dict[str, Any]]:
    if isinstance(response, list):
        return response
    if isinstance(response, dict):
        return response.get("tokens") or response.get("items") or []
    return []


class JoepegsClient(BaseAPIClient):
    """Joepegs v2 API client"""

    source_name = "joepegs"

    def __init__(self, api_keys: List[str], timeout: int = 30, max_retries: int = 3, **kwargs: Any):
        base_url = "https://api.joepegs.dev/v2"
        super().__init__(api_keys, base_url, rate_limit=10, timeout=timeout, max_retries=max_retries, **kwargs)

    def _get_headers(self) -> Dict[str, str]:
        return {"x-api-key": self.get_api_key()}

    @staticmethod
    def _check_chain(chain: str):
        if chain.lower() != "avalanche":
            raise NotImplementedError(f"Joepegs does not serve {chain}")

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str = "avalanche",
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get NFTs owned by a wallet"""
        self._check_chain(chain)
        response = await self._request(
            "GET", f"users/{wallet_address}/tokens", params={"pageSize": min(page_size, 100)}
        )
        return {"nfts": _tokens(response)}

    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str = "avalanche",
    ) -> Dict[str, Any]:
        self._check_chain(chain)
        response = await self._request("GET", f"collections/{contract_address}/tokens/{token_id}")
        return response if isinstance(response, dict) else {}

    async def _collection_tokens(self, collection: str, limit: int) -> List[Dict[str, Any]]:
        response = await self._request(
            "GET", f"collections/{collection}/tokens", params={"pageSize": min(limit, 100)}
        )
        return _tokens(response)

    async def search_nfts(self, query: str, chain: str = "avalanche", limit: int = 20) -> Dict[str, Any]:
        """Search collections by name and sample a few tokens from each"""
        self._check_chain(chain)
        response = await self._request(
            "GET", "collections/search", params={"name": query, "limit": limit}
        )
        collections = response if isinstance(response, list) else (response or {}).get("collections", [])
        addresses = [c.get("address") for c in collections if isinstance(c, dict) and c.get("address")]
        records = await self._collect_per_contract(
            lambda contract, remaining: self._collection_tokens(contract, min(remaining, 5)),
            addresses,
            limit,
        )
        return {"nfts": records}

    async def get_trending_nfts(
        self,
        contracts: List[str],
        chain: str = "avalanche",
        limit: int = 20,
    ) -> Dict[str, Any]:
        self._check_chain(chain)
        records = await self._collect_per_contract(self._collection_tokens, contracts, limit)
        return {"nfts": records}
