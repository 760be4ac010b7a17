"""
Input DTOs for chain registry and donation endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from faucetswap.infra.config.chains import ChainConfig, ChainType


class RegisterChainDto(BaseModel):
    """Runtime registration of a chain adapter"""

    chainId: str = Field(..., min_length=1, max_length=50, description="Chain identifier, e.g. arbitrum")
    chainType: ChainType
    name: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1, max_length=20)
    decimals: Optional[int] = Field(None, ge=0, le=36, description="Defaults to 18 for evm, 9 for sui")
    rpcUrl: str = Field(..., min_length=1)
    explorerUrl: Optional[str] = None
    faucetUrl: Optional[str] = None
    networkChainId: Optional[int] = None
    poolAddress: Optional[str] = None
    packageId: Optional[str] = None
    cooldownHours: int = Field(24, ge=0)
    maxAmount: str = "0.1"
    minBalance: str = "0.01"

    @field_validator('chainId')
    @classmethod
    def normalize_chain_id(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('rpcUrl')
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError('RPC URL must be http(s)')
        return v

    def to_config(self) -> ChainConfig:
        default_decimals = 9 if self.chainType == ChainType.SUI else 18
        return ChainConfig(
            chain_id=self.chainId,
            chain_type=self.chainType,
            name=self.name,
            symbol=self.symbol,
            decimals=self.decimals if self.decimals is not None else default_decimals,
            rpc_url=self.rpcUrl,
            explorer_url=self.explorerUrl,
            faucet_url=self.faucetUrl,
            network_chain_id=self.networkChainId,
            pool_address=self.poolAddress,
            package_id=self.packageId,
            cooldown_hours=self.cooldownHours,
            max_amount=self.maxAmount,
            min_balance=self.minBalance
        )


class RecordDonationDto(BaseModel):
    chain: str = Field(..., min_length=1)
    txHash: str = Field(..., min_length=1, max_length=100, description="Donation transaction hash or Sui digest")
