"""
Normalized Pydantic models for multi-chain NFT data
"""

from enum import Enum
from typing import Optional, List, Dict, Any, Union, FrozenSet

from pydantic import BaseModel, Field, validator


class MalformedResponseError(ValueError):
    """Upstream payload is missing a field the canonical shape requires"""


class TokenStandard(str, Enum):
    """Token standards an NFTItem can declare"""
    ERC721 = "ERC721"
    ERC1155 = "ERC1155"
    SPL = "SPL"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Optional[str], default: "TokenStandard" = None) -> "TokenStandard":
        """Map an upstream token type string onto a canonical standard"""
        if not value:
            return default or cls.OTHER
        value_upper = str(value).strip().upper()
        mapping = {
            "ERC721": cls.ERC721,
            "ERC-721": cls.ERC721,
            "BEP721": cls.ERC721,
            "BEP-721": cls.ERC721,
            "ERC1155": cls.ERC1155,
            "ERC-1155": cls.ERC1155,
            "BEP1155": cls.ERC1155,
            "BEP-1155": cls.ERC1155,
            "SPL": cls.SPL,
            "METAPLEX": cls.SPL,
            "V1_NFT": cls.SPL,
            "V2_NFT": cls.SPL,
            "PROGRAMMABLENFT": cls.SPL,
        }
        return mapping.get(value_upper, cls.OTHER)


class Trait(BaseModel):
    """NFT trait/attribute"""
    trait_type: str
    value: Union[str, int, float, bool, None] = None

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["Trait"]:
        """Build a trait from an upstream attribute entry, None if unusable"""
        if not isinstance(raw, dict):
            return None
        trait_type = raw.get("trait_type")
        if trait_type is None:
            trait_type = raw.get("traitType") or raw.get("key") or raw.get("name") or ""
        value = raw.get("value")
        if isinstance(value, (dict, list)):
            value = str(value)
        return cls(trait_type=str(trait_type), value=value)

    @classmethod
    def list_from_raw(cls, raw: Any) -> List["Trait"]:
        """Normalize an upstream attribute list, dropping unusable entries"""
        if not isinstance(raw, list):
            return []
        traits = []
        for entry in raw:
            trait = cls.from_raw(entry)
            if trait is not None:
                traits.append(trait)
        return traits


class NFTItem(BaseModel):
    """Canonical NFT item shared by every chain provider"""

    id: str
    token_id: str
    name: str
    description: str = ""
    image: str = ""
    image_url: str = ""
    attributes: List[Trait] = Field(default_factory=list)
    contract_address: str
    token_standard: TokenStandard = TokenStandard.ERC721
    blockchain: str
    owner: str = ""
    creator: str = ""
    price: Optional[str] = None
    currency: Optional[str] = None
    is_listed: bool = False
    marketplace_url: Optional[str] = None

    class Config:
        use_enum_values = True

    @validator("token_standard", pre=True)
    def _parse_standard(cls, value):
        if isinstance(value, TokenStandard):
            return value
        return TokenStandard.parse(value)

    @staticmethod
    def make_id(blockchain: str, contract_address: str, token_id: str) -> str:
        """Deterministic item id: <chain>_<contractAddress>_<tokenId>"""
        return f"{blockchain}_{contract_address}_{token_id}"

    def attribute(self, trait_type: str) -> Optional[Any]:
        """Value of the first attribute with the given trait type"""
        for trait in self.attributes:
            if trait.trait_type == trait_type:
                return trait.value
        return None

    @property
    def category(self) -> Optional[str]:
        value = self.attribute("Category")
        return str(value) if value not in (None, "") else None


class NFTCollection(BaseModel):
    """Collection derived by grouping an address's items by contract"""

    id: str
    name: str
    description: str = ""
    contract_address: str
    token_standard: TokenStandard = TokenStandard.ERC721
    blockchain: str
    creator: str = ""
    verified: bool = False
    items: List[NFTItem] = Field(default_factory=list)

    class Config:
        use_enum_values = True


class ChainConfig(BaseModel):
    """Immutable descriptor of a supported chain"""

    chain_id: int
    display_name: str
    slug: str
    explorer_url: str
    token_standards: FrozenSet[str]
    native_currency: str
    enabled_by_default: bool = False
    marketplaces: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class ProviderConfig(BaseModel):
    """Connection parameters for one chain provider"""

    rpc_url: Optional[str] = None
    credentials: Dict[str, str] = Field(default_factory=dict)
    internal_index_url: Optional[str] = None

    def merged(self, partial: Dict[str, Any]) -> "ProviderConfig":
        """Return a copy with ``partial`` applied (credentials are merged, not replaced)"""
        data = self.dict()
        for key, value in partial.items():
            if key == "credentials" and value is not None:
                data["credentials"] = {**data["credentials"], **value}
            elif key in data:
                data[key] = value
            else:
                # bare credential name, e.g. {"alchemy": "key"}
                data["credentials"][key] = value
        data["credentials"] = {k: v for k, v in data["credentials"].items() if v}
        return ProviderConfig(**data)

    def credential(self, name: str) -> Optional[str]:
        value = self.credentials.get(name)
        return value or None


class ResolvedMetadata(BaseModel):
    """Result of resolving a token URI"""

    name: str
    description: str = ""
    image: Optional[str] = None
    attributes: Optional[List[Trait]] = None


class SearchQuery(BaseModel):
    """Cross-chain search request"""

    text: Optional[str] = None
    category: Optional[str] = None
    blockchain: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=50, ge=1)

    @validator("sort_order")
    def _check_sort_order(cls, value):
        if value is not None and value not in ("asc", "desc"):
            raise ValueError("sort_order must be 'asc' or 'desc'")
        return value


class FacetEntry(BaseModel):
    id: str
    name: str
    count: int


class PriceRange(BaseModel):
    min: float = 0
    max: float = 0


class SearchFilters(BaseModel):
    categories: List[FacetEntry] = Field(default_factory=list)
    blockchains: List[FacetEntry] = Field(default_factory=list)
    price_range: PriceRange = Field(default_factory=PriceRange)


class MarketplaceListing(BaseModel):
    """Listing shape returned by cross-chain search"""

    id: str
    nft_id: str
    token_id: str
    contract: str
    blockchain: str
    seller: str = "unknown"
    price: str = "0"
    currency: str = "ETH"
    listing_type: str = "fixed_price"
    title: str
    description: str = ""
    image_url: str = ""
    category: str = "general"
    tags: List[str] = Field(default_factory=list)
    featured: bool = False
    verified: bool = True
    escrow_enabled: bool = True
    instant_purchase: bool = True
    created_at: int = 0
    updated_at: int = 0
    views: int = 0
    likes: int = 0
    shares: int = 0


class SearchResult(BaseModel):
    items: List[MarketplaceListing]
    total: int
    has_more: bool
    filters: SearchFilters


class WalletNFTsResult(BaseModel):
    """Response for a cross-chain wallet query"""
    nfts: List[NFTItem]
    chains: Dict[int, List[NFTItem]]
    total_count: int


class WalletCollectionsResult(BaseModel):
    collections: List[NFTCollection]
    chains: Dict[int, List[NFTCollection]]


class ChainStatus(BaseModel):
    name: str
    enabled: bool
    is_connected: bool


class ConnectionReport(BaseModel):
    connected: bool
    working_sources: List[str] = Field(default_factory=list)
