"""Normalize upstream API responses to the canonical NFTItem"""

import json
from collections import OrderedDict
from typing import Dict, Any, Optional, List, Iterable, Tuple

from loguru import logger

from .models import (
    ChainConfig,
    MalformedResponseError,
    NFTCollection,
    NFTItem,
    TokenStandard,
    Trait,
)
from .utils import (
    convert_ipfs_to_http,
    strip_token_suffix,
    token_id_to_decimal,
    wei_to_native,
)

DEFAULT_GATEWAY = "https://ipfs.io/ipfs/"
UNKNOWN_COLLECTION = "Unknown Collection"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _first(values: Any) -> Dict[str, Any]:
    if isinstance(values, list) and values:
        return _as_dict(values[0])
    return {}


def _require(value: Any, field: str, source: str) -> str:
    if value is None or value == "":
        raise MalformedResponseError(f"{source} payload missing '{field}'")
    return str(value)


def _build_item(
    chain: ChainConfig,
    source: str,
    contract_address: Any,
    token_id: Any,
    gateway: str,
    name: Optional[str] = None,
    **fields: Any,
) -> NFTItem:
    contract = _require(contract_address, "contract address", source)
    token = _require(token_id, "token id", source)
    image = fields.pop("image", None) or ""
    return NFTItem(
        id=NFTItem.make_id(chain.slug, contract, token),
        token_id=token,
        name=name or f"{chain.display_name} NFT #{token}",
        image=image,
        image_url=convert_ipfs_to_http(image, gateway),
        contract_address=contract,
        blockchain=chain.slug,
        **fields,
    )


class Normalizer:
    """Convert API-specific responses to NFTItem"""

    @staticmethod
    def normalize_alchemy_nft(
        data: Dict[str, Any],
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """Normalize Alchemy NFT API v2 response (getNFTs / getNFTMetadata)"""
        contract = _as_dict(data.get("contract"))
        token = _as_dict(data.get("id"))
        metadata = _as_dict(data.get("metadata"))
        contract_meta = _as_dict(data.get("contractMetadata"))

        return _build_item(
            chain,
            "alchemy",
            contract.get("address"),
            token_id_to_decimal(token.get("tokenId")) if token.get("tokenId") is not None else None,
            gateway,
            name=data.get("title") or metadata.get("name"),
            description=data.get("description") or metadata.get("description") or "",
            image=metadata.get("image") or _first(data.get("media")).get("gateway"),
            attributes=Trait.list_from_raw(metadata.get("attributes")),
            token_standard=TokenStandard.parse(
                _as_dict(token.get("tokenMetadata")).get("tokenType"), TokenStandard.ERC721
            ),
            owner=owner,
            creator=metadata.get("creator") or contract_meta.get("contractDeployer") or "",
            currency=chain.native_currency,
        )

    @staticmethod
    def normalize_opensea_nft(
        data: Dict[str, Any],
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """Normalize OpenSea v1 asset"""
        asset_contract = _as_dict(data.get("asset_contract"))
        last_sale = _as_dict(data.get("last_sale"))
        sell_orders = data.get("sell_orders") or []

        price = None
        if sell_orders:
            price = wei_to_native(_first(sell_orders).get("current_price"))
        if price is None:
            price = wei_to_native(last_sale.get("total_price"))

        return _build_item(
            chain,
            "opensea",
            asset_contract.get("address"),
            data.get("token_id"),
            gateway,
            name=data.get("name"),
            description=data.get("description") or "",
            image=data.get("image_url") or data.get("image_preview_url") or data.get("image_original_url"),
            attributes=Trait.list_from_raw(data.get("traits")),
            token_standard=TokenStandard.parse(asset_contract.get("schema_name"), TokenStandard.ERC721),
            owner=_as_dict(data.get("owner")).get("address") or owner,
            creator=_as_dict(data.get("creator")).get("address") or "",
            price=price,
            currency=chain.native_currency,
            is_listed=bool(sell_orders),
            marketplace_url=data.get("permalink"),
        )

    @staticmethod
    def normalize_moralis_nft(
        data: Dict[str, Any],
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """Normalize Moralis NFT response"""
        metadata = data.get("metadata") or {}
        if isinstance(metadata, str):
            try:
                metadata = json.loads(metadata)
            except ValueError:
                logger.debug(f"Moralis metadata for {data.get('token_address')} is not valid JSON")
                metadata = {}
        metadata = _as_dict(metadata)

        return _build_item(
            chain,
            "moralis",
            data.get("token_address"),
            data.get("token_id"),
            gateway,
            name=metadata.get("name") or data.get("name"),
            description=metadata.get("description") or "",
            image=metadata.get("image") or metadata.get("image_url"),
            attributes=Trait.list_from_raw(metadata.get("attributes")),
            token_standard=TokenStandard.parse(data.get("contract_type"), TokenStandard.ERC721),
            owner=data.get("owner_of") or owner,
            creator=data.get("minter_address") or "",
            currency=chain.native_currency,
        )

    @staticmethod
    def normalize_simplehash_nft(
        data: Dict[str, Any],
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """Normalize SimpleHash NFT response"""
        extra = _as_dict(data.get("extra_metadata"))
        previews = _as_dict(data.get("previews"))
        contract = _as_dict(data.get("contract"))
        last_sale = _as_dict(data.get("last_sale"))
        listings = data.get("listings") or []

        return _build_item(
            chain,
            "simplehash",
            data.get("contract_address"),
            data.get("token_id"),
            gateway,
            name=data.get("name"),
            description=data.get("description") or "",
            image=data.get("image_url") or previews.get("image_medium_url") or extra.get("image_original_url"),
            attributes=Trait.list_from_raw(extra.get("attributes")),
            token_standard=TokenStandard.parse(contract.get("type"), TokenStandard.ERC721),
            owner=_first(data.get("owners")).get("owner_address") or owner,
            creator=contract.get("deployed_by") or "",
            price=wei_to_native(last_sale.get("unit_price")),
            currency=chain.native_currency,
            is_listed=bool(listings),
            marketplace_url=data.get("external_url"),
        )

    @staticmethod
    def normalize_quicknode_nft(
        data: Dict[str, Any],
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """Normalize QuickNode NFT API asset"""
        return _build_item(
            chain,
            "quicknode",
            data.get("collectionAddress") or data.get("contract"),
            data.get("collectionTokenId") or data.get("tokenId"),
            gateway,
            name=data.get("name"),
            description=data.get("description") or "",
            image=data.get("imageUrl"),
            attributes=Trait.list_from_raw(data.get("traits")),
            token_standard=TokenStandard.parse(data.get("type") or data.get("tokenStandard"), TokenStandard.ERC721),
            owner=owner,
            creator=data.get("creator") or "",
            currency=chain.native_currency,
        )

    @staticmethod
    def normalize_joepegs_nft(
        data: Dict[str, Any],
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """Normalize Joepegs token"""
        collection = data.get("collectionAddress")
        token_id = data.get("tokenId")
        ask = data.get("currentAskPrice")
        marketplace_url = None
        if collection and token_id is not None:
            marketplace_url = f"https://joepegs.com/item/{collection}/{token_id}"

        return _build_item(
            chain,
            "joepegs",
            collection,
            token_id,
            gateway,
            name=data.get("name"),
            description=data.get("description") or "",
            image=data.get("image"),
            attributes=Trait.list_from_raw(data.get("attributes")),
            token_standard=TokenStandard.parse(data.get("tokenStandard"), TokenStandard.ERC721),
            owner=data.get("owner") or owner,
            creator=data.get("creator") or "",
            price=wei_to_native(ask) if ask else None,
            currency=chain.native_currency,
            is_listed=bool(ask),
            marketplace_url=marketplace_url,
        )

    @staticmethod
    def normalize_helius_nft(
        data: Dict[str, Any],
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """Normalize Helius DAS asset"""
        content = _as_dict(data.get("content"))
        metadata = _as_dict(content.get("metadata"))
        links = _as_dict(content.get("links"))
        ownership = _as_dict(data.get("ownership"))
        mint = data.get("id")

        image = links.get("image") or metadata.get("image")
        if not image:
            first_file = _first(content.get("files"))
            image = first_file.get("cdn_uri") or first_file.get("uri")

        # DAS groups collection membership as {"group_key": "collection", "group_value": ...}
        collection_address = None
        for group in data.get("grouping") or []:
            group = _as_dict(group)
            if (group.get("group_key") or group.get("groupKey")) == "collection":
                collection_address = group.get("group_value") or group.get("groupValue")
                break

        creators = data.get("creators") or []
        return _build_item(
            chain,
            "helius",
            collection_address or mint,
            mint,
            gateway,
            name=metadata.get("name"),
            description=metadata.get("description") or "",
            image=image,
            attributes=Trait.list_from_raw(metadata.get("attributes")),
            token_standard=TokenStandard.parse(data.get("interface"), TokenStandard.SPL),
            owner=ownership.get("owner") or owner,
            creator=_first(creators).get("address") or "",
            currency=chain.native_currency,
        )

    @staticmethod
    def normalize_magiceden_nft(
        data: Dict[str, Any],
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """Normalize Magic Eden wallet token"""
        mint = data.get("mintAddress") or data.get("tokenMint")
        price = data.get("price") if data.get("price") is not None else data.get("listingPrice")
        listed = data.get("listStatus") == "listed" or price is not None

        return _build_item(
            chain,
            "magiceden",
            data.get("collection") or mint,
            mint,
            gateway,
            name=data.get("name"),
            description=data.get("description") or "",
            image=data.get("image"),
            attributes=Trait.list_from_raw(data.get("attributes")),
            token_standard=TokenStandard.SPL,
            owner=data.get("owner") or owner,
            creator=data.get("updateAuthority") or "",
            price=wei_to_native(price, decimals=9),
            currency=chain.native_currency,
            is_listed=listed,
            marketplace_url=f"https://magiceden.io/item-details/{mint}" if mint else None,
        )

    @staticmethod
    def normalize_internal_nft(
        data: Dict[str, Any],
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """First-party index items already carry the canonical shape"""
        payload = dict(data)
        payload.setdefault("blockchain", chain.slug)
        payload.setdefault("owner", owner)
        if not payload.get("id") and payload.get("contract_address") and payload.get("token_id"):
            payload["id"] = NFTItem.make_id(chain.slug, payload["contract_address"], payload["token_id"])
        if payload.get("image") and not payload.get("image_url"):
            payload["image_url"] = convert_ipfs_to_http(payload["image"], gateway)
        try:
            return NFTItem(**payload)
        except ValueError as e:
            raise MalformedResponseError(f"internal index item is invalid: {e}") from e

    @staticmethod
    def normalize_nft_from_source(
        data: Dict[str, Any],
        source: str,
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> NFTItem:
        """Normalize NFT from any source"""
        transform = TRANSFORMS.get(source)
        if transform is None:
            raise ValueError(f"Unknown source: {source}")
        if not isinstance(data, dict):
            raise MalformedResponseError(f"{source} item is not an object")
        return transform(data, chain, owner, gateway)

    @staticmethod
    def normalize_many(
        records: Iterable[Any],
        source: str,
        chain: ChainConfig,
        owner: str = "",
        gateway: str = DEFAULT_GATEWAY,
    ) -> List[NFTItem]:
        """Normalize a list of records, skipping malformed entries"""
        items = []
        for record in records or []:
            try:
                items.append(Normalizer.normalize_nft_from_source(record, source, chain, owner, gateway))
            except MalformedResponseError as e:
                logger.warning(f"Skipping malformed {source} record on {chain.slug}: {e}")
        return items


TRANSFORMS = {
    "alchemy": Normalizer.normalize_alchemy_nft,
    "opensea": Normalizer.normalize_opensea_nft,
    "moralis": Normalizer.normalize_moralis_nft,
    "simplehash": Normalizer.normalize_simplehash_nft,
    "quicknode": Normalizer.normalize_quicknode_nft,
    "joepegs": Normalizer.normalize_joepegs_nft,
    "helius": Normalizer.normalize_helius_nft,
    "magiceden": Normalizer.normalize_magiceden_nft,
    "internal": Normalizer.normalize_internal_nft,
}


def collection_name(item: NFTItem) -> str:
    """Token name with its trailing '#<id>' suffix removed"""
    return strip_token_suffix(item.name) or UNKNOWN_COLLECTION


def group_collections(items: Iterable[NFTItem]) -> List[NFTCollection]:
    """
    Group items into collections keyed by (blockchain, contract_address).

    The first item seen for a key provides the collection's name, standard
    and creator. Duplicate item ids within one collection are kept once, so
    grouping the items of already-grouped collections yields the same result.
    """
    grouped: "OrderedDict[Tuple[str, str], NFTCollection]" = OrderedDict()
    seen_ids = set()
    for item in items:
        key = (item.blockchain, item.contract_address)
        collection = grouped.get(key)
        if collection is None:
            collection = NFTCollection(
                id=f"{item.blockchain}_collection_{item.contract_address}",
                name=collection_name(item),
                description=item.description,
                contract_address=item.contract_address,
                token_standard=item.token_standard,
                blockchain=item.blockchain,
                creator=item.creator or item.owner,
                verified=False,
            )
            grouped[key] = collection
        if (item.blockchain, item.id) in seen_ids:
            continue
        seen_ids.add((item.blockchain, item.id))
        collection.items.append(item)
    return list(grouped.values())
