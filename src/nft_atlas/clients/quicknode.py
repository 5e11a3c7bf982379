"""QuickNode NFT API client"""

from typing import Dict, Any, List

from .base import BaseAPIClient


class QuickNodeClient(BaseAPIClient):
    """QuickNode NFT API client (wallet lookups only)"""

    source_name = "quicknode"

    SUPPORTED_CHAINS = ("ethereum", "polygon")

    def __init__(self, api_keys: List[str], timeout: int = 30, max_retries: int = 3, **kwargs: Any):
        base_url = "https://api.quicknode.com/nft/v1"
        super().__init__(api_keys, base_url, rate_limit=100, timeout=timeout, max_retries=max_retries, **kwargs)

    def _get_headers(self) -> Dict[str, str]:
        return {"x-api-key": self.get_api_key()}

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get NFTs owned by a wallet"""
        chain_lower = chain.lower()
        if chain_lower not in self.SUPPORTED_CHAINS:
            raise NotImplementedError(f"QuickNode NFT API does not serve {chain}")
        response = await self._request(
            "GET",
            f"{chain_lower}/nfts",
            params={"wallet": wallet_address, "perPage": min(page_size, 100)},
        )
        return {"nfts": response.get("assets", []), "cursor": response.get("pageNumber")}

    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str,
    ) -> Dict[str, Any]:
        raise NotImplementedError("QuickNode token lookup is not available")
