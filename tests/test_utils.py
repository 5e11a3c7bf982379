"""
Unit tests for validation and parsing helpers.
"""

import pytest

from nft_atlas.utils import (
    convert_ipfs_to_http,
    parse_price,
    parse_token_id,
    strip_token_suffix,
    token_id_to_decimal,
    validate_address,
    validate_ethereum_address,
    validate_solana_address,
    wei_to_native,
)


class TestAddressValidation:
    def test_ethereum_address_is_checksummed(self, sample_wallet_address):
        valid, checksummed = validate_ethereum_address(sample_wallet_address.lower())

        assert valid is True
        assert checksummed == sample_wallet_address

    @pytest.mark.parametrize("address", ["", "0x123", "not-an-address", None])
    def test_invalid_ethereum_address(self, address):
        assert validate_ethereum_address(address) == (False, None)

    def test_solana_address(self, sample_solana_address):
        assert validate_solana_address(sample_solana_address) == (True, sample_solana_address)
        assert validate_solana_address("short")[0] is False

    def test_dispatch_by_chain(self, sample_solana_address, sample_wallet_address):
        assert validate_address(sample_solana_address, "solana")[0] is True
        assert validate_address(sample_solana_address, "ethereum")[0] is False
        assert validate_address(sample_wallet_address, "polygon")[0] is True


class TestParsing:
    def test_ipfs_conversion(self):
        assert convert_ipfs_to_http("ipfs://Qm1/2.json", "https://gw.test/ipfs/") == "https://gw.test/ipfs/Qm1/2.json"
        assert convert_ipfs_to_http("ipfs://ipfs/Qm1", "https://gw.test/ipfs") == "https://gw.test/ipfs/Qm1"
        assert convert_ipfs_to_http("https://img.test/a.png") == "https://img.test/a.png"
        assert convert_ipfs_to_http(None) == ""

    @pytest.mark.parametrize("value,expected", [("1.5", 1.5), (2, 2.0), (None, 0.0), ("free", 0.0), (True, 0.0)])
    def test_parse_price(self, value, expected):
        assert parse_price(value) == expected

    @pytest.mark.parametrize("value,expected", [("42", 42), ("0x2a", 42), ("007", 7), ("mint", -1), (None, -1)])
    def test_parse_token_id(self, value, expected):
        assert parse_token_id(value) == expected

    def test_token_id_to_decimal_keeps_unparseable_ids(self):
        assert token_id_to_decimal("0x10") == "16"
        assert token_id_to_decimal("MintAddress") == "MintAddress"

    def test_strip_token_suffix(self):
        assert strip_token_suffix("Foo #12") == "Foo"
        assert strip_token_suffix("Foo Bar") == "Foo Bar"
        assert strip_token_suffix(None) == ""

    def test_wei_to_native(self):
        assert wei_to_native("1000000000000000000") == "1"
        assert wei_to_native(1500000000, decimals=9) == "1.5"
        assert wei_to_native(None) is None
        assert wei_to_native("abc") is None
