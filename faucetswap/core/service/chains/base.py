"""
Chain adapter abstraction layer for multi-chain faucet support.
Each chain family implements the raw on-chain reads; cooldown and tier derivation live here.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from faucetswap.core.clock import utcnow, to_millis
from faucetswap.core.exceptions.handler import ServiceError, ServiceErrorCode
from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.chains import tiers
from faucetswap.core.service.chains.models import (
    ConnectionStatus,
    ContributionLevel,
    CooldownInfo,
    DonationRecord,
    PoolStatistics,
)
from faucetswap.infra.config.chains import ChainConfig, ChainType

logger = get_logger(__name__)


class ChainAdapterError(Exception):
    """Transient adapter failure, degraded by the chain manager"""


class ChainNotConfiguredError(ChainAdapterError):
    def __init__(self, chain_id: str, missing: str):
        super().__init__(f"Chain {chain_id} not configured: missing {missing}")
        self.chain_id = chain_id
        self.missing = missing


class ChainRPCError(ChainAdapterError):
    def __init__(self, chain_id: str, method: str, reason: str):
        super().__init__(f"{chain_id} RPC call {method} failed: {reason}")
        self.chain_id = chain_id
        self.method = method


class OperationNotSupportedError(ServiceError):
    """Permanent rejection, never degraded"""
    def __init__(self, message: str):
        super().__init__(
            code=ServiceErrorCode.OPERATION_NOT_SUPPORTED,
            message=message,
            status_code=400,
        )


class BaseChainAdapter(ABC):
    """
    Abstract base class for per-chain adapters.
    Subclasses answer raw questions about the chain's donation pool; amounts they return
    from get_total_donated are already in human units.
    """

    chain_type: ChainType

    def __init__(self, config: ChainConfig):
        self.config = config
        self.chain_id = config.chain_id
        self.logger = get_logger(f"{__name__}.{config.chain_id}")

    @property
    def cooldown_ms(self) -> int:
        return self.config.cooldown_hours * tiers.MS_PER_HOUR

    def to_human(self, raw_amount: int) -> Decimal:
        return tiers.from_smallest_unit(raw_amount, self.config.decimals)

    @abstractmethod
    async def get_last_claim_time(self, address: str) -> Optional[datetime]:
        """Time of the address's last pool claim, None if it never claimed"""
        pass

    @abstractmethod
    async def get_total_donated(self, address: str) -> Decimal:
        """Cumulative donations of the address, in human units"""
        pass

    @abstractmethod
    async def get_pool_statistics(self) -> PoolStatistics:
        pass

    @abstractmethod
    async def get_recent_donations(self, limit: int = 10) -> List[DonationRecord]:
        """Most recent donation events, newest first"""
        pass

    @abstractmethod
    async def get_available_balance(self) -> Decimal:
        pass

    @abstractmethod
    async def check_connection(self) -> ConnectionStatus:
        pass

    @abstractmethod
    async def verify_donation(self, tx_hash: str) -> Optional[DonationRecord]:
        """
        Look up a donation transaction

        Returns:
            The donation if the transaction succeeded and targets this chain's pool, else None
        """
        pass

    async def distribute_tokens(self, recipient: str, amount: str, reason: str) -> str:
        raise OperationNotSupportedError("Distribution is handled by smart contract directly")

    async def check_cooldown(self, address: str) -> CooldownInfo:
        """remaining = max(0, last_claim + cooldown - now); a first claim is always allowed"""
        last_claim = await self.get_last_claim_time(address)
        if last_claim is None:
            return CooldownInfo(canClaim=True, remainingTime=0)

        now = utcnow()
        remaining = tiers.compute_remaining_ms(to_millis(last_claim), self.cooldown_ms, to_millis(now))
        next_claim_ms = to_millis(last_claim) + self.cooldown_ms

        return CooldownInfo(
            canClaim=remaining == 0,
            remainingTime=remaining,
            nextClaimTime=datetime.fromtimestamp(next_claim_ms / 1000, tz=timezone.utc),
            lastClaimTime=last_claim
        )

    async def get_contribution(self, address: str) -> ContributionLevel:
        total = await self.get_total_donated(address)
        level = tiers.tier_of(total)
        requirement = tiers.next_level_requirement(total)

        return ContributionLevel(
            level=level,
            levelName=tiers.level_name(level),
            totalDonated=tiers.format_amount(total),
            nextLevelRequirement=tiers.format_amount(requirement) if requirement is not None else None
        )

    async def close(self) -> None:
        """Release network resources held by the adapter"""
        return None

    def get_chain_info(self) -> dict:
        return {
            "chainId": self.chain_id,
            "chainType": self.config.chain_type.value,
            "name": self.config.name,
            "symbol": self.config.symbol,
            "decimals": self.config.decimals,
            "explorerUrl": self.config.explorer_url,
            "faucetUrl": self.config.faucet_url,
            "cooldownHours": self.config.cooldown_hours,
            "enabled": self.config.enabled,
        }
