"""
Ledger RPC capability objects used by the direct-scan fallback.

EVM chains expose "call a read-only contract method" and "fetch event
logs" through web3's async provider; Solana exposes JSON-RPC methods
over plain HTTP.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import aiohttp
from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
from web3 import AsyncWeb3, AsyncHTTPProvider

# keccak("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
SPL_TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

ERC721_ABI = [
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "tokenOfOwnerByIndex",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}, {"name": "index", "type": "uint256"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "tokenURI",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "ownerOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "name",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
]


def address_topic(address: str) -> str:
    """Left-pad an address into a 32-byte log topic"""
    return "0x" + address.lower().replace("0x", "").rjust(64, "0")


class LedgerClient(ABC):
    """Read-only access to an EVM ledger"""

    @abstractmethod
    async def call_view(self, contract_address: str, method: str, *args: Any) -> Any:
        """Call a read-only contract method"""
        pass

    @abstractmethod
    async def get_logs(
        self,
        contract_address: str,
        topics: List[Optional[str]],
        from_block: Union[int, str] = "earliest",
        to_block: Union[int, str] = "latest",
    ) -> List[Dict[str, Any]]:
        """Fetch event logs as dicts with hex-string topics"""
        pass

    @abstractmethod
    async def block_number(self) -> int:
        pass

    async def ping(self) -> bool:
        try:
            await self.block_number()
            return True
        except Exception as e:
            logger.debug(f"Ledger ping failed: {e}")
            return False


class Web3Ledger(LedgerClient):
    """EVM ledger backed by web3's AsyncHTTPProvider"""

    def __init__(self, rpc_url: str, timeout: int = 30):
        self.rpc_url = rpc_url
        self.w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)}))

    def _contract(self, contract_address: str):
        return self.w3.eth.contract(
            address=self.w3.to_checksum_address(contract_address),
            abi=ERC721_ABI,
        )

    async def call_view(self, contract_address: str, method: str, *args: Any) -> Any:
        contract = self._contract(contract_address)
        args = tuple(self.w3.to_checksum_address(a) if _looks_like_address(a) else a for a in args)
        return await getattr(contract.functions, method)(*args).call()

    async def get_logs(
        self,
        contract_address: str,
        topics: List[Optional[str]],
        from_block: Union[int, str] = "earliest",
        to_block: Union[int, str] = "latest",
    ) -> List[Dict[str, Any]]:
        logs = await self.w3.eth.get_logs({
            "fromBlock": from_block,
            "toBlock": to_block,
            "address": self.w3.to_checksum_address(contract_address),
            "topics": topics,
        })
        return [
            {
                "address": entry["address"],
                "topics": [AsyncWeb3.to_hex(t) for t in entry["topics"]],
                "block_number": entry.get("blockNumber"),
            }
            for entry in logs
        ]

    async def block_number(self) -> int:
        return await self.w3.eth.block_number


def _looks_like_address(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("0x") and len(value) == 42


class SolanaRpcClient:
    """Minimal Solana JSON-RPC client"""

    def __init__(self, rpc_url: str, timeout: int = 30):
        self.rpc_url = rpc_url
        self.timeout = timeout

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((aiohttp.ClientConnectionError, asyncio.TimeoutError)),
        reraise=True,
    )
    async def call(self, method: str, params: Union[List[Any], Dict[str, Any], None] = None) -> Any:
        """POST one JSON-RPC call and return its ``result``"""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params if params is not None else []}
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
            async with session.post(self.rpc_url, json=payload) as response:
                response.raise_for_status()
                body = await response.json(content_type=None)
        if not isinstance(body, dict):
            raise ValueError(f"Solana RPC {method} returned a non-object body")
        if body.get("error"):
            raise ValueError(f"Solana RPC {method} error: {body['error']}")
        return body.get("result")

    async def get_nft_mints(self, owner: str) -> List[str]:
        """Mints of SPL token accounts holding exactly one zero-decimal token"""
        result = await self.call(
            "getTokenAccountsByOwner",
            [owner, {"programId": SPL_TOKEN_PROGRAM_ID}, {"encoding": "jsonParsed"}],
        )
        mints = []
        for account in (result or {}).get("value", []):
            info = (
                account.get("account", {})
                .get("data", {})
                .get("parsed", {})
                .get("info", {})
            )
            amount = info.get("tokenAmount", {})
            if amount.get("decimals") == 0 and amount.get("amount") == "1" and info.get("mint"):
                mints.append(info["mint"])
        return mints

    async def get_asset(self, mint: str) -> Dict[str, Any]:
        """DAS getAsset; only DAS-capable endpoints answer it"""
        result = await self.call("getAsset", {"id": mint})
        return result if isinstance(result, dict) else {}

    async def ping(self) -> bool:
        try:
            return await self.call("getHealth") == "ok"
        except Exception as e:
            logger.debug(f"Solana RPC ping failed: {e}")
            return False
