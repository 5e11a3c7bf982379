"""Alchemy NFT API client for EVM chains"""

from typing import Dict, Any, List
from loguru import logger

from .base import BaseAPIClient
from ..utils import validate_ethereum_address


class AlchemyClient(BaseAPIClient):
    """Alchemy NFT API v2 client"""

    source_name = "alchemy"

    CHAIN_MAP = {
        "ethereum": "eth-mainnet",
        "polygon": "polygon-mainnet",
        "arbitrum": "arb-mainnet",
        "optimism": "opt-mainnet",
        "base": "base-mainnet",
    }

    def __init__(self, api_keys: List[str], timeout: int = 30, max_retries: int = 3, **kwargs: Any):
        base_url = "https://{network}.g.alchemy.com/nft/v2"
        super().__init__(api_keys, base_url, rate_limit=330, timeout=timeout, max_retries=max_retries, **kwargs)

    def _get_network(self, chain: str) -> str:
        """Convert chain slug to Alchemy network name"""
        chain_lower = chain.lower()
        if chain_lower not in self.CHAIN_MAP:
            raise NotImplementedError(f"Alchemy does not serve {chain}")
        return self.CHAIN_MAP[chain_lower]

    def _url(self, chain: str, method: str) -> str:
        network = self._get_network(chain)
        return f"{self.base_url.format(network=network)}/{self.get_api_key()}/{method}"

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str,
        page_size: int = 100,
    ) -> Dict[str, Any]:
        """Get NFTs owned by a wallet"""
        params = {
            "owner": wallet_address,
            "withMetadata": "true",
            "pageSize": min(page_size, 100),
        }
        response = await self._request("GET", self._url(chain, "getNFTs"), params=params)
        return {
            "nfts": response.get("ownedNfts", []),
            "cursor": response.get("pageKey"),
            "total": response.get("totalCount"),
        }

    async def get_token_metadata(
        self,
        contract_address: str,
        token_id: str,
        chain: str,
    ) -> Dict[str, Any]:
        """Get individual token metadata"""
        response = await self._request(
            "GET",
            self._url(chain, "getNFTMetadata"),
            params={"contractAddress": contract_address, "tokenId": token_id},
        )
        return response if isinstance(response, dict) else {}

    async def get_contract_nfts(self, contract_address: str, chain: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Get NFTs in a collection"""
        response = await self._request(
            "GET",
            self._url(chain, "getNFTsForCollection"),
            params={
                "contractAddress": contract_address,
                "withMetadata": "true",
                "limit": limit,
            },
        )
        return response.get("nfts", [])

    async def search_nfts(self, query: str, chain: str, limit: int = 20) -> Dict[str, Any]:
        """Alchemy can only look up by contract address"""
        is_valid, checksum = validate_ethereum_address(query)
        if not is_valid:
            raise NotImplementedError("Alchemy search needs a contract address")
        logger.debug(f"Alchemy collection lookup for {checksum} on {chain}")
        return {"nfts": await self.get_contract_nfts(checksum, chain, limit)}

    async def get_trending_nfts(
        self,
        contracts: List[str],
        chain: str,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Sample the given contracts"""
        self._get_network(chain)
        records = await self._collect_per_contract(
            lambda contract, remaining: self.get_contract_nfts(contract, chain, remaining),
            contracts,
            limit,
        )
        return {"nfts": records}
