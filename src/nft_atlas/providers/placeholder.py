"""Deterministic placeholder items for demo mode"""

import hashlib
import random
from typing import List

import base58

from ..models import ChainConfig, NFTItem, TokenStandard, Trait

CATEGORIES = ("art", "collectibles", "gaming", "music", "photography")
RARITIES = ("Common", "Uncommon", "Rare", "Epic", "Legendary")


class PlaceholderPolicy:
    """
    Generates 2-5 placeholder items per (chain, address).

    The generator is seeded from sha256(chain_id:address) so the same
    wallet always sees the same placeholders. Only used by providers
    built in demo mode, and only when live sources produced nothing.
    """

    def __init__(self, min_items: int = 2, max_items: int = 5):
        if min_items < 0 or max_items < min_items:
            raise ValueError("Invalid placeholder item bounds")
        self.min_items = min_items
        self.max_items = max_items

    @staticmethod
    def _seed(chain: ChainConfig, address: str) -> bytes:
        return hashlib.sha256(f"{chain.chain_id}:{address.lower()}".encode()).digest()

    @staticmethod
    def _contract_address(chain: ChainConfig, seed: bytes) -> str:
        if chain.slug == "solana":
            return base58.b58encode(seed).decode()
        return "0x" + seed.hex()[:40]

    def generate(self, chain: ChainConfig, address: str) -> List[NFTItem]:
        seed = self._seed(chain, address)
        rng = random.Random(seed)
        contract = self._contract_address(chain, seed)
        creator = self._contract_address(chain, hashlib.sha256(seed).digest())
        standard = TokenStandard.SPL if chain.slug == "solana" else TokenStandard.ERC721

        count = rng.randint(self.min_items, self.max_items)
        items = []
        for number in rng.sample(range(1, 10001), count):
            token_id = str(number)
            image = f"https://api.dicebear.com/7.x/bottts-neutral/svg?seed={chain.slug}{token_id}"
            is_listed = rng.random() > 0.6
            items.append(NFTItem(
                id=NFTItem.make_id(chain.slug, contract, token_id),
                token_id=token_id,
                name=f"{chain.display_name} Demo #{token_id}",
                description=f"Placeholder NFT on {chain.display_name}",
                image=image,
                image_url=image,
                attributes=[
                    Trait(trait_type="Category", value=rng.choice(CATEGORIES)),
                    Trait(trait_type="Rarity", value=rng.choice(RARITIES)),
                ],
                contract_address=contract,
                token_standard=standard,
                blockchain=chain.slug,
                owner=address,
                creator=creator,
                price=f"{rng.uniform(0.1, 5):.3f}",
                currency=chain.native_currency,
                is_listed=is_listed,
            ))
        return items
