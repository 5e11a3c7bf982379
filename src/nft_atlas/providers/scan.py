"""Direct ledger scanning used when no indexing API produced a result"""

from typing import Iterable, List, Optional

from loguru import logger

from ..ledger import LedgerClient, SolanaRpcClient, TRANSFER_TOPIC, address_topic
from ..metadata import MetadataResolver
from ..models import ChainConfig, NFTItem, TokenStandard
from ..normalizer import DEFAULT_GATEWAY, Normalizer
from ..utils import convert_ipfs_to_http, parse_token_id

MAX_TOKENS_PER_CONTRACT = 10
MAX_SOLANA_MINTS = 50


class EvmScanner:
    """Scans a fixed list of ERC-721 contracts for tokens held by an owner"""

    def __init__(
        self,
        ledger: LedgerClient,
        resolver: MetadataResolver,
        chain: ChainConfig,
        contracts: Iterable[str],
        gateway: str = DEFAULT_GATEWAY,
        max_tokens: int = MAX_TOKENS_PER_CONTRACT,
    ):
        self.ledger = ledger
        self.resolver = resolver
        self.chain = chain
        self.contracts = list(contracts)
        self.gateway = gateway
        self.max_tokens = max_tokens

    async def scan(self, owner: str) -> List[NFTItem]:
        items: List[NFTItem] = []
        for contract in self.contracts:
            try:
                items.extend(await self._scan_contract(contract, owner))
            except Exception as e:
                logger.debug(f"Skipping {contract} on {self.chain.slug}: {e}")
        if items:
            logger.info(f"Direct scan found {len(items)} NFTs for {owner} on {self.chain.slug}")
        return items

    async def _scan_contract(self, contract: str, owner: str) -> List[NFTItem]:
        balance = int(await self.ledger.call_view(contract, "balanceOf", owner))
        if balance <= 0:
            return []

        collection_name = await self._contract_name(contract)
        token_ids = await self._owned_token_ids(contract, owner, min(balance, self.max_tokens))

        items = []
        for token_id in token_ids:
            try:
                items.append(await self._build_item(contract, token_id, owner, collection_name))
            except Exception as e:
                logger.debug(f"Skipping token {token_id} of {contract}: {e}")
        return items

    async def _contract_name(self, contract: str) -> str:
        try:
            name = await self.ledger.call_view(contract, "name")
            if name:
                return str(name)
        except Exception as e:
            logger.debug(f"{contract} has no readable name: {e}")
        return f"{self.chain.display_name} NFT"

    async def _owned_token_ids(self, contract: str, owner: str, count: int) -> List[int]:
        token_ids: List[int] = []
        try:
            for index in range(count):
                token_ids.append(int(await self.ledger.call_view(contract, "tokenOfOwnerByIndex", owner, index)))
            return token_ids
        except Exception as e:
            if token_ids:
                return token_ids
            logger.debug(f"{contract} is not enumerable ({e}), reading Transfer logs")
        return await self._token_ids_from_logs(contract, owner, count)

    async def _token_ids_from_logs(self, contract: str, owner: str, count: int) -> List[int]:
        logs = await self.ledger.get_logs(contract, [TRANSFER_TOPIC, None, address_topic(owner)])
        token_ids: List[int] = []
        seen = set()
        # Newest transfers first
        for entry in reversed(logs):
            topics = entry.get("topics") or []
            if len(topics) < 4:
                continue
            token_id = int(topics[3], 16)
            if token_id in seen:
                continue
            seen.add(token_id)
            try:
                current_owner = await self.ledger.call_view(contract, "ownerOf", token_id)
            except Exception as e:
                logger.debug(f"ownerOf({token_id}) failed on {contract}: {e}")
                continue
            if str(current_owner).lower() == owner.lower():
                token_ids.append(token_id)
                if len(token_ids) >= count:
                    break
        return token_ids

    async def _build_item(self, contract: str, token_id: int, owner: str, collection_name: str) -> NFTItem:
        try:
            token_uri = await self.ledger.call_view(contract, "tokenURI", token_id)
        except Exception as e:
            logger.debug(f"tokenURI({token_id}) failed on {contract}: {e}")
            token_uri = ""
        metadata = await self.resolver.resolve(token_uri, f"{collection_name} #{token_id}")
        image = metadata.image or ""
        return NFTItem(
            id=NFTItem.make_id(self.chain.slug, contract, str(token_id)),
            token_id=str(token_id),
            name=metadata.name,
            description=metadata.description,
            image=image,
            image_url=convert_ipfs_to_http(image, self.gateway),
            attributes=metadata.attributes or [],
            contract_address=contract,
            token_standard=TokenStandard.ERC721,
            blockchain=self.chain.slug,
            owner=owner,
            currency=self.chain.native_currency,
        )

    async def lookup(self, contract: str, token_id: str) -> Optional[NFTItem]:
        """Single-token lookup through tokenURI/name/ownerOf"""
        numeric_id = parse_token_id(token_id)
        if numeric_id < 0:
            return None
        try:
            owner = str(await self.ledger.call_view(contract, "ownerOf", numeric_id))
        except Exception as e:
            logger.debug(f"ownerOf({numeric_id}) failed on {contract}: {e}")
            owner = ""
        collection_name = await self._contract_name(contract)
        return await self._build_item(contract, numeric_id, owner, collection_name)


class SolanaScanner:
    """Lists SPL NFT mints held by an owner and reads their metadata"""

    def __init__(
        self,
        rpc: SolanaRpcClient,
        resolver: MetadataResolver,
        chain: ChainConfig,
        gateway: str = DEFAULT_GATEWAY,
        max_mints: int = MAX_SOLANA_MINTS,
    ):
        self.rpc = rpc
        self.resolver = resolver
        self.chain = chain
        self.gateway = gateway
        self.max_mints = max_mints

    async def scan(self, owner: str) -> List[NFTItem]:
        try:
            mints = await self.rpc.get_nft_mints(owner)
        except Exception as e:
            logger.debug(f"SPL token account scan failed for {owner}: {e}")
            return []

        items = []
        for mint in mints[: self.max_mints]:
            try:
                items.append(await self._build_item(mint, owner))
            except Exception as e:
                logger.debug(f"Skipping mint {mint}: {e}")
        return items

    async def _build_item(self, mint: str, owner: str) -> NFTItem:
        try:
            asset = await self.rpc.get_asset(mint)
        except Exception as e:
            # Plain RPC endpoints do not implement the DAS methods
            logger.debug(f"getAsset unavailable for {mint}: {e}")
            asset = {}
        if asset:
            return Normalizer.normalize_helius_nft(asset, self.chain, owner, self.gateway)
        return NFTItem(
            id=NFTItem.make_id(self.chain.slug, mint, mint),
            token_id=mint,
            name=f"{self.chain.display_name} NFT {mint[:8]}",
            contract_address=mint,
            token_standard=TokenStandard.SPL,
            blockchain=self.chain.slug,
            owner=owner,
            currency=self.chain.native_currency,
        )

    async def lookup(self, contract: str, token_id: str) -> Optional[NFTItem]:
        mint = token_id or contract
        asset = await self.rpc.get_asset(mint)
        if not asset:
            return None
        return Normalizer.normalize_helius_nft(asset, self.chain, "", self.gateway)
