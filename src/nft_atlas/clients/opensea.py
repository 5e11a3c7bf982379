"""OpenSea API client (Ethereum)"""

from typing import Dict, Any, List

from .base import BaseAPIClient
from ..utils import validate_ethereum_address


class OpenSeaClient(BaseAPIClient):
    """OpenSea v1 assets API client"""

    source_name = "opensea"

    def __init__(self, api_keys: List[str], timeout: int = 30, max_retries: int = 3, **kwargs: Any):
        base_url = "https://api.opensea.io/api/v1"
        super().__init__(api_keys, base_url, rate_limit=4, timeout=timeout, max_retries=max_retries, **kwargs)

    def _get_headers(self) -> Dict[str, str]:
        return {"X-API-KEY": self.get_api_key()}

    @staticmethod
    def _check_chain(chain: str):
        if chain.lower() != "ethereum":
            raise NotImplementedError(f"OpenSea v1 does not serve {chain}")

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str = "ethereum",
        page_size: int = 200,
    ) -> Dict[str, Any]:
        """Get NFTs owned by a wallet"""
        self._check_chain(chain)
        response = await self._request(
            "GET",
            "assets",
            params={"owner": wallet_address, "limit": min(page_size, 200)},
        )
        return {"nfts": response.get("assets", []), "cursor": response.get("next")}

    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str = "ethereum",
    ) -> Dict[str, Any]:
        """Get individual asset"""
        self._check_chain(chain)
        response = await self._request("GET", f"asset/{contract_address}/{token_id}/")
        return response if isinstance(response, dict) else {}

    async def _assets(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        response = await self._request("GET", "assets", params=params)
        return response.get("assets", [])

    async def search_nfts(self, query: str, chain: str = "ethereum", limit: int = 20) -> Dict[str, Any]:
        """Look up by contract address or collection slug"""
        self._check_chain(chain)
        is_valid, checksum = validate_ethereum_address(query)
        params: Dict[str, Any] = {"limit": min(limit, 200)}
        if is_valid:
            params["asset_contract_address"] = checksum
        else:
            params["collection"] = query.strip().lower().replace(" ", "-")
        return {"nfts": await self._assets(params)}

    async def get_trending_nfts(
        self,
        contracts: List[str],
        chain: str = "ethereum",
        limit: int = 20,
    ) -> Dict[str, Any]:
        self._check_chain(chain)
        records = await self._collect_per_contract(
            lambda contract, remaining: self._assets(
                {"asset_contract_address": contract, "limit": min(remaining, 200)}
            ),
            contracts,
            limit,
        )
        return {"nfts": records}
