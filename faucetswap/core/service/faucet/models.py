"""Models for faucet service."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from faucetswap.infra.config.chains import ChainConfig


class FaucetSource(str, Enum):
    OFFICIAL_FAUCET = "OFFICIAL_FAUCET"
    COMMUNITY_POOL = "COMMUNITY_POOL"


class FaucetStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (FaucetStatus.SUCCESS, FaucetStatus.FAILED)


class FaucetConfig(BaseModel):
    """Per-chain faucet configuration row"""
    chain: str
    name: str
    token_symbol: str
    rpc_url: str
    faucet_url: Optional[str] = None
    cooldown_hours: int = Field(default=24, ge=0)
    max_amount: str
    min_balance: str

    @classmethod
    def from_chain_config(cls, config: ChainConfig) -> "FaucetConfig":
        return cls(
            chain=config.chain_id,
            name=config.name,
            token_symbol=config.symbol,
            rpc_url=config.rpc_url,
            faucet_url=config.faucet_url,
            cooldown_hours=config.cooldown_hours,
            max_amount=config.max_amount,
            min_balance=config.min_balance
        )


class DonationPool(BaseModel):
    """Cached pool totals, in human token units"""
    chain: str
    token: str
    totalAmount: str
    available: str
    distributed: str
    updatedAt: Optional[datetime] = None


class FaucetRequestRecord(BaseModel):
    """Persisted faucet request"""
    id: UUID
    user_id: UUID
    chain: str
    token: str
    amount: str
    source: FaucetSource
    status: FaucetStatus
    requested_at: datetime
    completed_at: Optional[datetime] = None
    cooldown_until: datetime
    tx_hash: Optional[str] = None


class FaucetRequestInput(BaseModel):
    """Request model for a faucet claim."""
    chain: str = Field(..., min_length=1, description="Chain identifier, e.g. ethereum")
    source: FaucetSource = Field(..., description="OFFICIAL_FAUCET or COMMUNITY_POOL")


class StatusUpdateInput(BaseModel):
    """Request model for reporting the outcome of a claim."""
    status: FaucetStatus
    txHash: Optional[str] = Field(None, description="Transaction hash of the claim")  # Frontend expects camelCase


class ContractInfo(BaseModel):
    """Contract-call descriptor handed to the wallet for community pool claims"""
    chain: str
    contractAddress: Optional[str] = None
    packageId: Optional[str] = None
    method: str = "requestFaucet"
    abi: Optional[List[Dict[str, Any]]] = None
    amount: str


class FaucetRequestResponse(BaseModel):
    success: bool = True
    requestId: str
    chain: str
    source: FaucetSource
    status: FaucetStatus
    amount: str
    token: str
    cooldownUntil: datetime
    redirectUrl: Optional[str] = None
    contractInfo: Optional[ContractInfo] = None
    message: str


class FaucetRequestView(BaseModel):
    """Faucet request as returned by history and admin listings"""
    id: str
    chain: str
    token: str
    amount: str
    source: FaucetSource
    status: FaucetStatus
    requestedAt: datetime
    completedAt: Optional[datetime] = None
    cooldownUntil: datetime
    txHash: Optional[str] = None
    walletAddress: Optional[str] = None


class ChainCooldownStatus(BaseModel):
    chain: str
    canClaim: bool
    remainingTime: int = 0  # milliseconds
    cooldownUntil: Optional[datetime] = None
    lastRequestAt: Optional[datetime] = None
    lastStatus: Optional[FaucetStatus] = None


class CooldownStatusResponse(BaseModel):
    address: str
    cooldowns: List[ChainCooldownStatus]


class FaucetStatistics(BaseModel):
    totalRequests: int
    successfulRequests: int
    failedRequests: int
    pendingRequests: int
    successRate: float
    uniqueUsers: int
    byChain: Dict[str, int]
    bySource: Dict[str, int]
    byStatus: Dict[str, int]


class PaginatedRequests(BaseModel):
    items: List[FaucetRequestView]
    total: int
    page: int
    limit: int
    totalPages: int
