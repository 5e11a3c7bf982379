"""First-party NFT index client"""

from typing import Dict, Any, List

from .base import BaseAPIClient


class InternalIndexClient(BaseAPIClient):
    """
    Client for the first-party index, which serves items already in the
    canonical shape at ``GET <index>/nfts/<chain>/<address>``.
    """

    source_name = "internal"

    def __init__(self, base_url: str, timeout: int = 30, max_retries: int = 3, **kwargs: Any):
        super().__init__([], base_url.rstrip("/"), rate_limit=100, timeout=timeout, max_retries=max_retries, **kwargs)

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        response = await self._request("GET", f"nfts/{chain}/{wallet_address}", params={"limit": page_size})
        if isinstance(response, list):
            return {"nfts": response}
        return {"nfts": (response or {}).get("nfts") or (response or {}).get("items") or []}

    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str,
    ) -> Dict[str, Any]:
        response = await self._request("GET", f"nft/{chain}/{contract_address}/{token_id}")
        return response if isinstance(response, dict) else {}

    async def ping(self, chain: str) -> bool:
        try:
            await self._request("GET", "health")
            return True
        except Exception:
            return False
