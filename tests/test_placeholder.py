"""
Unit tests for demo placeholder generation.
"""

import pytest

from nft_atlas.providers.placeholder import PlaceholderPolicy


class TestPlaceholderPolicy:
    def test_same_wallet_gets_same_items(self, ethereum, sample_wallet_address):
        """
        Given the same chain and address asked twice, with different casing
        When generating placeholders
        Then the items are identical
        """
        policy = PlaceholderPolicy()

        first = policy.generate(ethereum, sample_wallet_address)
        second = policy.generate(ethereum, sample_wallet_address.lower())

        assert [i.id for i in first] == [i.id for i in second]
        assert [i.price for i in first] == [i.price for i in second]

    def test_item_count_and_shape(self, polygon, sample_wallet_address):
        items = PlaceholderPolicy().generate(polygon, sample_wallet_address)

        assert 2 <= len(items) <= 5
        assert len({i.token_id for i in items}) == len(items)
        for item in items:
            assert item.blockchain == "polygon"
            assert item.owner == sample_wallet_address
            assert item.currency == "MATIC"
            assert item.category is not None
            assert item.attribute("Rarity") is not None
            assert float(item.price) > 0

    def test_chains_do_not_share_items(self, ethereum, polygon, sample_wallet_address):
        policy = PlaceholderPolicy()

        eth_ids = {i.id for i in policy.generate(ethereum, sample_wallet_address)}
        poly_ids = {i.id for i in policy.generate(polygon, sample_wallet_address)}

        assert eth_ids.isdisjoint(poly_ids)

    def test_solana_items_use_spl(self, solana, sample_solana_address):
        items = PlaceholderPolicy().generate(solana, sample_solana_address)

        assert all(i.token_standard == "SPL" for i in items)
        assert not items[0].contract_address.startswith("0x")

    def test_invalid_bounds_rejected(self):
        with pytest.raises(ValueError):
            PlaceholderPolicy(min_items=5, max_items=2)
