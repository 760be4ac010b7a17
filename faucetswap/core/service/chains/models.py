"""Models for chain adapters and the chain manager."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from faucetswap.core.service.chains.tiers import DEFAULT_COOLDOWN_MS


class CooldownInfo(BaseModel):
    """Whether an address may claim on a chain right now"""
    canClaim: bool  # Frontend expects camelCase
    remainingTime: int = Field(0, ge=0, description="Milliseconds until the next claim")
    nextClaimTime: Optional[datetime] = None
    lastClaimTime: Optional[datetime] = None

    @classmethod
    def degraded(cls) -> "CooldownInfo":
        return cls(canClaim=False, remainingTime=DEFAULT_COOLDOWN_MS)


class ContributionLevel(BaseModel):
    level: int = Field(0, ge=0, le=4)
    levelName: str = "None"
    totalDonated: str = "0"  # human units
    nextLevelRequirement: Optional[str] = None

    @classmethod
    def degraded(cls) -> "ContributionLevel":
        return cls(level=0, levelName="None", totalDonated="0", nextLevelRequirement="0.1")


class PoolStatistics(BaseModel):
    """Pool-wide figures, amounts in human units"""
    currentBalance: str = "0"
    totalDonations: str = "0"
    totalClaimed: str = "0"
    totalUsers: int = 0
    availableClaims: int = 0
    faucetAmount: str = "0"
    symbol: Optional[str] = None

    @classmethod
    def degraded(cls) -> "PoolStatistics":
        return cls()


class DonationRecord(BaseModel):
    chain: str
    donor: str
    amount: str  # human units
    message: Optional[str] = None
    txHash: Optional[str] = None
    blockNumber: Optional[int] = None
    timestamp: datetime
    symbol: Optional[str] = None


class ConnectionStatus(BaseModel):
    status: str  # "healthy" | "unhealthy"
    blockNumber: Optional[int] = None
    error: Optional[str] = None
    lastChecked: datetime

    @property
    def healthy(self) -> bool:
        return self.status == "healthy"


class ChainInfo(BaseModel):
    chainId: str
    chainType: str
    name: str
    symbol: str
    decimals: int
    explorerUrl: Optional[str] = None
    faucetUrl: Optional[str] = None
    cooldownHours: int
    enabled: bool


class ChainStatus(ChainInfo):
    connected: bool
    blockNumber: Optional[int] = None
    availableBalance: str = "0"
    statistics: PoolStatistics


class MultiChainCooldown(BaseModel):
    address: str
    chains: Dict[str, CooldownInfo]
    claimableChains: List[str]


class ContributionSummary(BaseModel):
    highestLevel: int
    highestLevelName: str
    totalDonatedAcrossChains: str
    activeChains: List[str]


class MultiChainContribution(BaseModel):
    address: str
    chains: Dict[str, ContributionLevel]
    summary: ContributionSummary


class DonorRanking(BaseModel):
    rank: int
    donor: str
    totalDonated: str
    donationCount: int
    level: int
    levelName: str


class PaginatedDonations(BaseModel):
    items: List[DonationRecord]
    total: int
    page: int
    limit: int
    totalPages: int
