"""
Per-chain provider profiles: endpoints, upstream priority and the
contracts used for direct scans and trending samples.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

EVM = "evm"
SOLANA = "solana"


@dataclass(frozen=True)
class ChainProfile:
    chain_id: int
    public_rpc_url: str
    sources: Tuple[str, ...]
    ledger: str = EVM
    scan_contracts: Tuple[str, ...] = field(default_factory=tuple)
    trending_contracts: Tuple[str, ...] = field(default_factory=tuple)


ETHEREUM_CONTRACTS = (
    "0xBC4CA0EdA7647A8aB7C2061c2E118A18a936f13D",  # BAYC
    "0x60E4d786628Fea6478F785A6d7e704777c86a7c6",  # MAYC
    "0xED5AF388653567Af2F388E6224dC7C4b3241C544",  # Azuki
)

POLYGON_CONTRACTS = (
    "0x9d305a42A3975Ee4c1C57555BeD5919889DCE63F",
    "0x0BEF619Cf38cF0c22967289b8419720fBd1Db9f7",
    "0x3FA0EAC3058828Cc4BA97F51A33597C695bF6F9e",
    "0x219b8aB790dedB965cA5C1C6C8fb48f5B5b2BeE6",
    "0xC4dF0e539dF923c3e0832196cC3f17e54Dd4d32a",
)

BSC_CONTRACTS = (
    "0x5e74094cd416f55179dbd0e45b1a8ed030e396a1",
    "0xDf7952B35f24acF7fC0487D01c8d5690a60DBa07",
    "0x9adc6Fb78CEFA07E13E9294F150C1E8C1Dd566c0",
    "0x17C5b4Ff3325a1Ba056D683b9f5e90cB84fb84a7",
    "0xDF5E93Ef9681fd9e90e4738e1B3B91D02c289a23",
)

AVALANCHE_CONTRACTS = (
    "0xed2Aa7B6D36c695A0223b5047CF0992Bd43d0a78",
    "0x880Fe52C6bc4FFFfb92D6C03858C97807a900691",
    "0x5498bb86ebba0d4b915d1a7170f84cb6b334d23f",
    "0x4245a1bD84eB5f3EBc115c2Edf57E50667F98b0b",
    "0xDC58B44c92de122d17bB6dB4276fD3e85028dF58",
)

ARBITRUM_CONTRACTS = (
    "0xfA2FbFc5F8CD91DbC93B6E5BE4E1FA1FA35A4e83",
    "0x53B05eB238E80bBF3e722b008c081725081cd5a9",
    "0x17DaCAD7975960833f374622fad08b90Ed67D1B5",
    "0xc3323b2e3bAcBe3E3c5d96351a421F060e97732B",
    "0xeFe302129b3DCC239Ea8ADCcAE57B3aBB7f8Da2c",
)

OPTIMISM_CONTRACTS = (
    "0x52782699900dF91b58eCd618E77847C5774dcaBe",
    "0x10CDCB5a80e888EC9e9154439e86B911F684dA7b",
    "0x998EF16Ea4111094EB5eE72fC2c6f4e6E8647666",
    "0x81b30ff521D1feB67EDE32db726D95714eb00637",
    "0x96Ee03FDa9F056dC3FE37A8D9CE4350Fe7ac04f6",
)

BASE_CONTRACTS = (
    "0xd4307e0acd12cf46fd6cf93bc264f5d5d1598792",
    "0xba5e05cb26b78eda3a2f8e3b3814726305dcac83",
    "0x5806485215C8542C448EcF707aB6321b85eB5D18",
    "0x9d6F33d70A90588c70e411aB22d899BAD31C4264",
    "0xfae6aBAEA9e712dCCeCAEDbEd2700aeBd293dd25",
)

# Magic Eden collection symbols
SOLANA_TRENDING = ("degods", "okay_bears", "mad_lads")


PROFILES: Dict[int, ChainProfile] = {
    1: ChainProfile(
        chain_id=1,
        public_rpc_url="https://ethereum.publicnode.com",
        sources=("alchemy", "opensea"),
        scan_contracts=ETHEREUM_CONTRACTS,
        trending_contracts=ETHEREUM_CONTRACTS,
    ),
    137: ChainProfile(
        chain_id=137,
        public_rpc_url="https://polygon.publicnode.com",
        sources=("alchemy", "quicknode"),
        scan_contracts=POLYGON_CONTRACTS,
        trending_contracts=POLYGON_CONTRACTS[:3],
    ),
    56: ChainProfile(
        chain_id=56,
        public_rpc_url="https://bsc.publicnode.com",
        sources=("moralis",),
        scan_contracts=BSC_CONTRACTS,
        trending_contracts=BSC_CONTRACTS[:3],
    ),
    43114: ChainProfile(
        chain_id=43114,
        public_rpc_url="https://avalanche.publicnode.com",
        sources=("joepegs",),
        scan_contracts=AVALANCHE_CONTRACTS,
        trending_contracts=AVALANCHE_CONTRACTS[:3],
    ),
    42161: ChainProfile(
        chain_id=42161,
        public_rpc_url="https://arbitrum.publicnode.com",
        sources=("alchemy", "moralis"),
        scan_contracts=ARBITRUM_CONTRACTS,
        trending_contracts=ARBITRUM_CONTRACTS[:3],
    ),
    10: ChainProfile(
        chain_id=10,
        public_rpc_url="https://optimism.publicnode.com",
        sources=("alchemy", "simplehash"),
        scan_contracts=OPTIMISM_CONTRACTS,
        trending_contracts=OPTIMISM_CONTRACTS[:3],
    ),
    8453: ChainProfile(
        chain_id=8453,
        public_rpc_url="https://base.publicnode.com",
        sources=("alchemy", "simplehash"),
        scan_contracts=BASE_CONTRACTS,
        trending_contracts=BASE_CONTRACTS[:2],
    ),
    101: ChainProfile(
        chain_id=101,
        public_rpc_url="https://api.mainnet-beta.solana.com",
        sources=("helius", "magiceden"),
        ledger=SOLANA,
        trending_contracts=SOLANA_TRENDING,
    ),
}


def get_profile(chain_id: int) -> Optional[ChainProfile]:
    return PROFILES.get(chain_id)
