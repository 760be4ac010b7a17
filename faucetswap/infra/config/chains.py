"""
Static chain configuration shared by the chain registry, the faucet service and seeding.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class ChainType(str, Enum):
    """Supported chain families"""
    EVM = "evm"
    SUI = "sui"


class ChainConfig(BaseModel):
    """Per-chain registry entry"""
    chain_id: str = Field(..., description="Chain identifier, e.g. ethereum, sui")
    chain_type: ChainType
    name: str
    symbol: str
    decimals: int = 18
    rpc_url: str
    explorer_url: Optional[str] = None
    faucet_url: Optional[str] = None
    network_chain_id: Optional[int] = None  # EVM chain id
    pool_address: Optional[str] = None  # EVM pool contract / Sui pool object id
    package_id: Optional[str] = None  # Sui Move package
    cooldown_hours: int = 24
    max_amount: str = "0.1"
    min_balance: str = "0.01"
    enabled: bool = True


DEFAULT_CHAINS: List[ChainConfig] = [
    ChainConfig(
        chain_id="ethereum",
        chain_type=ChainType.EVM,
        name="Ethereum Sepolia",
        symbol="ETH",
        rpc_url="https://ethereum-sepolia-rpc.publicnode.com",
        explorer_url="https://sepolia.etherscan.io",
        faucet_url="https://sepoliafaucet.com",
        network_chain_id=11155111,
        max_amount="0.5",
    ),
    ChainConfig(
        chain_id="polygon",
        chain_type=ChainType.EVM,
        name="Polygon Amoy",
        symbol="POL",
        rpc_url="https://rpc-amoy.polygon.technology",
        explorer_url="https://amoy.polygonscan.com",
        faucet_url="https://faucet.polygon.technology",
        network_chain_id=80002,
        max_amount="1.0",
        min_balance="0.1",
    ),
    ChainConfig(
        chain_id="bsc",
        chain_type=ChainType.EVM,
        name="BSC Testnet",
        symbol="BNB",
        rpc_url="https://data-seed-prebsc-1-s1.binance.org:8545",
        explorer_url="https://testnet.bscscan.com",
        faucet_url="https://testnet.binance.org/faucet-smart",
        network_chain_id=97,
    ),
    ChainConfig(
        chain_id="arbitrum",
        chain_type=ChainType.EVM,
        name="Arbitrum Sepolia",
        symbol="ETH",
        rpc_url="https://sepolia-rollup.arbitrum.io/rpc",
        explorer_url="https://sepolia.arbiscan.io",
        faucet_url="https://bridge.arbitrum.io",
        network_chain_id=421614,
    ),
    ChainConfig(
        chain_id="sui",
        chain_type=ChainType.SUI,
        name="Sui Testnet",
        symbol="SUI",
        decimals=9,
        rpc_url="https://fullnode.testnet.sui.io:443",
        explorer_url="https://suiscan.xyz/testnet",
        faucet_url="https://faucet.sui.io",
        max_amount="1.0",
    ),
]
