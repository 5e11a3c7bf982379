"""Helius DAS API client for Solana"""

from typing import Dict, Any, Optional, List

from .base import BaseAPIClient
from ..utils import validate_solana_address

NFT_INTERFACES = ("V1_NFT", "V2_NFT", "ProgrammableNFT", "MplCoreAsset")
SOLANA_PING_ADDRESS = "11111111111111111111111111111111"


class HeliusClient(BaseAPIClient):
    """Helius client speaking the Digital Asset Standard JSON-RPC methods"""

    source_name = "helius"
    ping_address = SOLANA_PING_ADDRESS

    def __init__(
        self,
        api_keys: List[str],
        rpc_url: Optional[str] = None,
        timeout: int = 30,
        max_retries: int = 3,
        **kwargs: Any,
    ):
        # Store base RPC URL without API key
        if rpc_url and "api-key" in rpc_url:
            rpc_url = rpc_url.split("?")[0]
        base_url = (rpc_url or "https://mainnet.helius-rpc.com").rstrip("/")
        super().__init__(api_keys, base_url, rate_limit=50, timeout=timeout, max_retries=max_retries, **kwargs)

    @staticmethod
    def _check_chain(chain: str):
        if chain.lower() != "solana":
            raise NotImplementedError("Helius client only supports Solana")

    async def _make_das_request(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """POST one DAS JSON-RPC call and return its result"""
        payload = {"jsonrpc": "2.0", "id": "nft-atlas", "method": method, "params": params}
        response = await self._request(
            "POST",
            f"{self.base_url}/?api-key={self.get_api_key()}",
            json_data=payload,
        )
        if not isinstance(response, dict):
            return {}
        if response.get("error"):
            raise ValueError(f"Helius {method} error: {response['error']}")
        result = response.get("result")
        return result if isinstance(result, dict) else {}

    @staticmethod
    def _nft_items(result: Dict[str, Any]) -> List[Dict[str, Any]]:
        items = result.get("items") or []
        return [item for item in items if isinstance(item, dict) and item.get("interface") in NFT_INTERFACES]

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str = "solana",
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get NFTs owned by a Solana wallet"""
        self._check_chain(chain)
        result = await self._make_das_request(
            "getAssetsByOwner",
            {"ownerAddress": wallet_address, "page": 1, "limit": min(page_size, 1000)},
        )
        return {"nfts": self._nft_items(result), "total": result.get("total")}

    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str = "solana",
    ) -> Dict[str, Any]:
        """Solana assets are addressed by mint; the token id is the mint when given"""
        self._check_chain(chain)
        return await self._make_das_request("getAsset", {"id": token_id or contract_address})

    async def _collection_assets(self, collection: str, limit: int) -> List[Dict[str, Any]]:
        result = await self._make_das_request(
            "getAssetsByGroup",
            {"groupKey": "collection", "groupValue": collection, "page": 1, "limit": min(limit, 1000)},
        )
        return self._nft_items(result)

    async def search_nfts(self, query: str, chain: str = "solana", limit: int = 20) -> Dict[str, Any]:
        """Look up assets of a collection address"""
        self._check_chain(chain)
        is_valid, address = validate_solana_address(query)
        if not is_valid:
            raise NotImplementedError("Helius search needs a collection address")
        return {"nfts": await self._collection_assets(address, limit)}

    async def get_trending_nfts(
        self,
        contracts: List[str],
        chain: str = "solana",
        limit: int = 20,
    ) -> Dict[str, Any]:
        self._check_chain(chain)
        addresses = [c for c in contracts if validate_solana_address(c)[0]]
        records = await self._collect_per_contract(self._collection_assets, addresses, limit)
        return {"nfts": records}
