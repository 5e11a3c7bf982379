"""
Configuration management for NFT Atlas
"""

import os
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)

PROVIDER_MODES = ("live", "demo")

# Upstream name -> Config field holding its keys
CREDENTIAL_FIELDS = {
    "alchemy": "alchemy_api_keys",
    "moralis": "moralis_api_keys",
    "opensea": "opensea_api_keys",
    "simplehash": "simplehash_api_keys",
    "quicknode": "quicknode_api_keys",
    "helius": "helius_api_keys",
    "magiceden": "magiceden_api_keys",
    "joepegs": "joepegs_api_keys",
}


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    """Main configuration class"""

    # API keys (comma-separated in the environment, rotated on 429)
    alchemy_api_keys: List[str] = field(default_factory=list)
    moralis_api_keys: List[str] = field(default_factory=list)
    opensea_api_keys: List[str] = field(default_factory=list)
    simplehash_api_keys: List[str] = field(default_factory=list)
    quicknode_api_keys: List[str] = field(default_factory=list)
    helius_api_keys: List[str] = field(default_factory=list)
    magiceden_api_keys: List[str] = field(default_factory=list)
    joepegs_api_keys: List[str] = field(default_factory=list)

    # First-party infrastructure
    use_internal_provider: bool = False
    internal_rpc_url: Optional[str] = None
    internal_index_url: Optional[str] = None

    ipfs_gateway: str = "https://ipfs.io/ipfs/"
    provider_mode: str = "live"  # "live" or "demo"

    # Cache settings
    cache_ttl: int = 900  # 15 minutes
    cache_type: str = "memory"  # "memory" or "redis"
    redis_url: Optional[str] = None

    # Request settings
    max_retries: int = 3
    timeout: int = 30
    source_timeout: float = 15
    provider_timeout: float = 60
    max_workers: int = 10  # Maximum concurrent provider calls during fan-out

    def __post_init__(self):
        if self.provider_mode not in PROVIDER_MODES:
            raise ValueError(
                f"Invalid provider mode '{self.provider_mode}', expected one of {PROVIDER_MODES}"
            )
        if not self.ipfs_gateway.endswith("/"):
            self.ipfs_gateway = self.ipfs_gateway + "/"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables"""

        def get_keys(key_name: str) -> List[str]:
            """Get multiple API keys (comma-separated)"""
            keys_str = os.getenv(key_name, "")
            if not keys_str:
                return []
            return [k.strip() for k in keys_str.split(",") if k.strip()]

        return cls(
            alchemy_api_keys=get_keys("ALCHEMY_API_KEY"),
            moralis_api_keys=get_keys("MORALIS_API_KEY"),
            opensea_api_keys=get_keys("OPENSEA_API_KEY"),
            simplehash_api_keys=get_keys("SIMPLEHASH_API_KEY"),
            quicknode_api_keys=get_keys("QUICKNODE_API_KEY"),
            helius_api_keys=get_keys("HELIUS_API_KEY"),
            magiceden_api_keys=get_keys("MAGICEDEN_API_KEY"),
            joepegs_api_keys=get_keys("JOEPEGS_API_KEY"),
            use_internal_provider=_get_bool("USE_INTERNAL_PROVIDER"),
            internal_rpc_url=os.getenv("INTERNAL_RPC_URL") or None,
            internal_index_url=os.getenv("INTERNAL_INDEX_URL") or None,
            ipfs_gateway=os.getenv("IPFS_GATEWAY", "https://ipfs.io/ipfs/"),
            provider_mode=os.getenv("PROVIDER_MODE", "live").strip().lower(),
            redis_url=os.getenv("REDIS_URL"),
            cache_ttl=int(os.getenv("CACHE_TTL", "900")),
            cache_type=os.getenv("CACHE_TYPE", "memory"),
            max_retries=int(os.getenv("MAX_RETRIES", "3")),
            timeout=int(os.getenv("TIMEOUT", "30")),
            source_timeout=float(os.getenv("SOURCE_TIMEOUT", "15")),
            provider_timeout=float(os.getenv("PROVIDER_TIMEOUT", "60")),
            max_workers=int(os.getenv("MAX_WORKERS", "10")),
        )

    def get_keys(self, source: str) -> List[str]:
        """All configured keys for an upstream source"""
        field_name = CREDENTIAL_FIELDS.get(source)
        if not field_name:
            return []
        return list(getattr(self, field_name))

    def credentials(self) -> Dict[str, str]:
        """First key of every configured upstream, as {source: key}"""
        creds = {}
        for source in CREDENTIAL_FIELDS:
            keys = self.get_keys(source)
            if keys:
                creds[source] = keys[0]
        return creds

# Global config instance
config = Config.from_env()
