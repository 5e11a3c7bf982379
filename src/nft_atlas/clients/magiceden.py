"""
Magic Eden API client for Solana wallets and listings
"""

from typing import Dict, Any, List

from .base import BaseAPIClient
from .helius import SOLANA_PING_ADDRESS

LAMPORTS_PER_SOL = 1_000_000_000


def _flatten_listing(listing: Dict[str, Any]) -> Dict[str, Any]:
    """Listings nest the token; lift it so listings share the wallet token shape"""
    token = listing.get("token") if isinstance(listing.get("token"), dict) else {}
    record = dict(token)
    record.setdefault("mintAddress", listing.get("tokenMint"))
    price = listing.get("price")
    # Listings quote SOL, wallet tokens quote lamports
    record["price"] = int(round(float(price) * LAMPORTS_PER_SOL)) if price is not None else None
    record["listStatus"] = "listed"
    if listing.get("seller"):
        record["owner"] = listing["seller"]
    return record


class MagicEdenClient(BaseAPIClient):
    """Magic Eden v2 API client"""

    source_name = "magiceden"
    ping_address = SOLANA_PING_ADDRESS

    def __init__(self, api_keys: List[str], timeout: int = 30, max_retries: int = 3, **kwargs: Any):
        base_url = "https://api-mainnet.magiceden.dev/v2"
        super().__init__(api_keys, base_url, rate_limit=2, timeout=timeout, max_retries=max_retries, **kwargs)

    def _get_headers(self) -> Dict[str, str]:
        # The public API works without a key; a key raises the rate limit
        if self.api_keys:
            return {"Authorization": f"Bearer {self.get_api_key()}"}
        return {}

    @staticmethod
    def _check_chain(chain: str):
        if chain.lower() != "solana":
            raise NotImplementedError("Magic Eden client only supports Solana")

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str = "solana",
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get NFTs held by a wallet"""
        self._check_chain(chain)
        response = await self._request(
            "GET", f"wallets/{wallet_address}/tokens", params={"limit": min(page_size, 500)}
        )
        return {"nfts": response if isinstance(response, list) else []}

    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str = "solana",
    ) -> Dict[str, Any]:
        self._check_chain(chain)
        response = await self._request("GET", f"tokens/{token_id or contract_address}")
        return response if isinstance(response, dict) else {}

    async def _collection_listings(self, symbol: str, limit: int) -> List[Dict[str, Any]]:
        response = await self._request(
            "GET", f"collections/{symbol}/listings", params={"limit": min(limit, 100)}
        )
        listings = response if isinstance(response, list) else []
        return [_flatten_listing(listing) for listing in listings if isinstance(listing, dict)]

    async def search_nfts(self, query: str, chain: str = "solana", limit: int = 20) -> Dict[str, Any]:
        """Treat the query as a collection symbol and return its listings"""
        self._check_chain(chain)
        symbol = query.strip().lower().replace(" ", "_")
        return {"nfts": await self._collection_listings(symbol, limit)}

    async def get_trending_nfts(
        self,
        contracts: List[str],
        chain: str = "solana",
        limit: int = 20,
    ) -> Dict[str, Any]:
        self._check_chain(chain)
        records = await self._collect_per_contract(self._collection_listings, contracts, limit)
        return {"nfts": records}
