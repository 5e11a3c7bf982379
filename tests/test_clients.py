"""
Unit tests for indexing API clients.

HTTP traffic is mocked with aioresponses.
"""

import re

import aiohttp
import pytest
from aioresponses import aioresponses

from nft_atlas.clients import AlchemyClient, BaseAPIClient, MoralisClient

ALCHEMY_GET_NFTS = re.compile(r"^https://eth-mainnet\.g\.alchemy\.com/nft/v2/key-1/getNFTs\?.*$")
MORALIS_WALLET = re.compile(r"^https://deep-index\.moralis\.io/api/v2/0xowner/nft\?.*$")


def sent_requests(mocked):
    return [(key, call) for key, calls in mocked.requests.items() for call in calls]


class TestAlchemyClient:
    async def test_wallet_nfts_shape(self):
        """
        Given Alchemy answering getNFTs
        When fetching a wallet's NFTs
        Then the owned NFTs and page key are returned in the common shape
        """
        client = AlchemyClient(["key-1"], timeout=5, max_retries=1)
        with aioresponses() as m:
            m.get(ALCHEMY_GET_NFTS, payload={"ownedNfts": [{"id": {"tokenId": "1"}}], "pageKey": "next", "totalCount": 1})

            result = await client.get_wallet_nfts("0xowner", "ethereum", page_size=500)

            (method, url), _ = sent_requests(m)[0]

        assert result["nfts"] == [{"id": {"tokenId": "1"}}]
        assert result["cursor"] == "next"
        assert method == "GET"
        assert url.query["owner"] == "0xowner"
        assert url.query["pageSize"] == "100"

    async def test_unserved_chain_raises_not_implemented(self):
        client = AlchemyClient(["key-1"])

        with pytest.raises(NotImplementedError):
            await client.get_wallet_nfts("0xowner", "bsc")

    async def test_missing_key_raises(self):
        client = AlchemyClient([])

        with pytest.raises(ValueError):
            await client.get_wallet_nfts("0xowner", "ethereum")

    async def test_server_error_is_retried(self):
        """
        Given an upstream failing once with 503 and then answering
        When fetching with two attempts allowed
        Then the second answer is returned
        """
        client = AlchemyClient(["key-1"], timeout=5, max_retries=2)
        with aioresponses() as m:
            m.get(ALCHEMY_GET_NFTS, status=503)
            m.get(ALCHEMY_GET_NFTS, payload={"ownedNfts": []})

            result = await client.get_wallet_nfts("0xowner", "ethereum")

        assert result["nfts"] == []

    async def test_client_error_is_not_retried(self):
        client = AlchemyClient(["key-1"], timeout=5, max_retries=3)
        with aioresponses() as m:
            m.get(ALCHEMY_GET_NFTS, status=404)

            with pytest.raises(aiohttp.ClientResponseError):
                await client.get_wallet_nfts("0xowner", "ethereum")

            assert len(sent_requests(m)) == 1

    async def test_ping_reports_failure_as_false(self):
        client = AlchemyClient(["key-1"], timeout=5, max_retries=1)
        with aioresponses() as m:
            m.get(re.compile(r"^https://eth-mainnet\.g\.alchemy\.com/.*$"), status=401)

            assert await client.ping("ethereum") is False


class TestMoralisClient:
    async def test_sends_key_header_and_chain(self):
        """
        Given a Moralis key
        When fetching a BSC wallet
        Then the key travels in X-API-Key and the chain is named for Moralis
        """
        client = MoralisClient(["moralis-key"], timeout=5, max_retries=1)
        with aioresponses() as m:
            m.get(MORALIS_WALLET, payload={"result": [{"token_address": "0xa", "token_id": "1"}], "cursor": None})

            result = await client.get_wallet_nfts("0xowner", "bsc")

            (_, url), call = sent_requests(m)[0]

        assert result["nfts"][0]["token_id"] == "1"
        assert url.query["chain"] == "bsc"
        assert call.kwargs["headers"]["X-API-Key"] == "moralis-key"


class TestKeyRotation:
    def test_rotation_cycles_through_keys(self):
        client = MoralisClient(["a", "b"])

        assert client.get_api_key() == "a"
        client.rotate_api_key()
        assert client.get_api_key() == "b"
        client.rotate_api_key()
        assert client.get_api_key() == "a"

    async def test_search_and_trending_default_to_unsupported(self):
        class WalletOnly(BaseAPIClient):
            async def get_wallet_nfts(self, wallet_address, chain, page_size=100):
                return {"nfts": []}

            async def get_token_metadata(self, contract_address, token_id, chain):
                return {}

        client = WalletOnly([], "https://example.invalid")

        with pytest.raises(NotImplementedError):
            await client.search_nfts("apes", "ethereum")
        with pytest.raises(NotImplementedError):
            await client.get_trending_nfts(["0xabc"], "ethereum")
