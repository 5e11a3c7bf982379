"""Utility functions for validation and value parsing"""

import re
from typing import Optional, Tuple
import base58
from eth_utils import is_address, to_checksum_address
from loguru import logger

IPFS_PREFIX = "ipfs://"
_TRAILING_TOKEN_SUFFIX = re.compile(r"#.*$")


def validate_ethereum_address(address: str) -> Tuple[bool, Optional[str]]:
    """
    Validate EVM address format

    Returns:
        (is_valid, checksum_address or None)
    """
    if not address or not isinstance(address, str):
        return False, None

    address = address.strip()

    if not re.match(r'^0x[a-fA-F0-9]{40}$', address):
        return False, None

    try:
        if is_address(address):
            return True, to_checksum_address(address)
    except ValueError as e:
        logger.debug(f"Address validation error: {e}")
    # Mixed-case input with a bad checksum is still a well-formed address
    return True, address


def validate_solana_address(address: str) -> Tuple[bool, Optional[str]]:
    """
    Validate Solana address format

    Returns:
        (is_valid, normalized_address or None)
    """
    if not address or not isinstance(address, str):
        return False, None

    address = address.strip()

    # Solana addresses are base58 encoded, typically 32-44 characters
    if len(address) < 32 or len(address) > 44:
        return False, None

    try:
        decoded = base58.b58decode(address)
        if len(decoded) == 32:
            return True, address
    except ValueError as e:
        logger.debug(f"Solana address validation error: {e}")

    return False, None


def validate_address(address: str, chain_slug: str) -> Tuple[bool, Optional[str]]:
    """Validate an owner/contract address for the given chain slug"""
    if chain_slug == "solana":
        return validate_solana_address(address)
    return validate_ethereum_address(address)


def convert_ipfs_to_http(url: Optional[str], gateway: str = "https://ipfs.io/ipfs/") -> str:
    """Rewrite ipfs:// URIs through an HTTP gateway, other URLs pass through"""
    if not url:
        return ""
    if url.startswith(IPFS_PREFIX):
        path = url[len(IPFS_PREFIX):]
        if path.startswith("ipfs/"):
            path = path[len("ipfs/"):]
        return f"{gateway.rstrip('/')}/{path}"
    return url


def parse_price(value) -> float:
    """Numeric price of an item, 0 when missing or unparseable"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def has_positive_price(value) -> bool:
    return parse_price(value) > 0


def parse_token_id(value) -> int:
    """Integer form of a token id (decimal or 0x-hex), -1 when unparseable"""
    if value is None:
        return -1
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip(), 0)
    except ValueError:
        pass
    try:
        # int(x, 0) rejects leading zeros such as "007"
        return int(str(value).strip())
    except ValueError:
        return -1


def token_id_to_decimal(value) -> str:
    """Token ids arrive hex-encoded from some upstreams, items carry decimal strings"""
    parsed = parse_token_id(value)
    if parsed < 0:
        return str(value) if value is not None else ""
    return str(parsed)


def strip_token_suffix(name: Optional[str]) -> str:
    """'Foo #12' -> 'Foo'"""
    if not name:
        return ""
    return _TRAILING_TOKEN_SUFFIX.sub("", name).strip()


def wei_to_native(value, decimals: int = 18) -> Optional[str]:
    """Convert an integer base-unit amount into a decimal string, None if unparseable"""
    if value is None or value == "":
        return None
    try:
        amount = float(value) / (10 ** decimals)
    except (TypeError, ValueError):
        return None
    return f"{amount:.{min(decimals, 9)}f}".rstrip("0").rstrip(".") or "0"
