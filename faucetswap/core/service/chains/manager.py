"""
Chain manager: dispatch and fan-out over the registered chain adapters.

Every adapter call is wrapped by with_fallback, so callers always get a well-formed
object back. Multi-chain queries run concurrently and keep one entry per chain.
"""

import asyncio
import math
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Type

from faucetswap.core.clock import utcnow
from faucetswap.core.exceptions.base import ConflictError, UnsupportedChainError
from faucetswap.core.exceptions.handler import ServiceErrorCode
from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.chains import tiers
from faucetswap.core.service.chains.base import BaseChainAdapter
from faucetswap.core.service.chains.evm import EVMChainAdapter
from faucetswap.core.service.chains.fallback import with_fallback
from faucetswap.core.service.chains.models import (
    ChainInfo,
    ChainStatus,
    ConnectionStatus,
    ContributionLevel,
    ContributionSummary,
    CooldownInfo,
    DonationRecord,
    DonorRanking,
    MultiChainContribution,
    MultiChainCooldown,
    PaginatedDonations,
    PoolStatistics,
)
from faucetswap.core.service.chains.sui import SuiChainAdapter
from faucetswap.infra.config.chains import ChainConfig, ChainType
from faucetswap.infra.config.settings import Settings

logger = get_logger(__name__)

ADAPTER_TYPES: Dict[ChainType, Type[BaseChainAdapter]] = {
    ChainType.EVM: EVMChainAdapter,
    ChainType.SUI: SuiChainAdapter,
}


def aggregate_donors(records: Iterable[DonationRecord]) -> List[DonorRanking]:
    """Sum donations per donor (case-insensitive) and rank by total, largest first"""
    totals: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    display: Dict[str, str] = {}

    for record in records:
        key = record.donor.lower()
        totals[key] = totals.get(key, Decimal(0)) + Decimal(record.amount)
        counts[key] = counts.get(key, 0) + 1
        display.setdefault(key, record.donor)

    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    rankings = []
    for rank, (key, total) in enumerate(ordered, start=1):
        level = tiers.tier_of(total)
        rankings.append(DonorRanking(
            rank=rank,
            donor=display[key],
            totalDonated=tiers.format_amount(total),
            donationCount=counts[key],
            level=level,
            levelName=tiers.level_name(level)
        ))
    return rankings


class ChainManager:
    """Registry of chain adapters keyed by chain id"""

    def __init__(self, adapters: Optional[Iterable[BaseChainAdapter]] = None, activity_window: int = 200):
        self._adapters: Dict[str, BaseChainAdapter] = {}
        self.activity_window = activity_window
        for adapter in adapters or []:
            self.register_adapter(adapter)

    # Registry

    def register_adapter(self, adapter: BaseChainAdapter) -> None:
        if adapter.chain_id in self._adapters:
            raise ConflictError(
                ServiceErrorCode.CHAIN_ALREADY_REGISTERED,
                f"Chain already registered: {adapter.chain_id}",
                details={"chain": adapter.chain_id}
            )
        self._adapters[adapter.chain_id] = adapter
        logger.info(
            f"Registered chain adapter: {adapter.chain_id}",
            extra={"chain": adapter.chain_id, "chain_type": adapter.config.chain_type.value}
        )

    def register_chain(self, config: ChainConfig) -> BaseChainAdapter:
        """Build the adapter for the config's chain family and register it"""
        adapter = ADAPTER_TYPES[config.chain_type](config)
        self.register_adapter(adapter)
        return adapter

    async def unregister_chain(self, chain_id: str) -> None:
        adapter = self.get_adapter(chain_id)
        del self._adapters[chain_id]
        await adapter.close()
        logger.info(f"Unregistered chain adapter: {chain_id}", extra={"chain": chain_id})

    def has_chain(self, chain_id: str) -> bool:
        return chain_id in self._adapters

    def get_adapter(self, chain_id: str) -> BaseChainAdapter:
        adapter = self._adapters.get(chain_id)
        if adapter is None:
            raise UnsupportedChainError(chain_id)
        return adapter

    def get_supported_chains(self) -> List[str]:
        return list(self._adapters.keys())

    def get_chain_types(self) -> Dict[str, str]:
        return {chain_id: adapter.config.chain_type.value for chain_id, adapter in self._adapters.items()}

    def get_chain_config(self, chain_id: str) -> Optional[ChainConfig]:
        adapter = self._adapters.get(chain_id)
        return adapter.config if adapter else None

    def get_all_chain_configs(self) -> Dict[str, ChainConfig]:
        return {chain_id: adapter.config for chain_id, adapter in self._adapters.items()}

    def get_chain_info(self, chain_id: str) -> ChainInfo:
        return ChainInfo(**self.get_adapter(chain_id).get_chain_info())

    # Per-chain reads

    async def check_faucet_cooldown(self, chain_id: str, address: str) -> CooldownInfo:
        adapter = self.get_adapter(chain_id)
        return await with_fallback(
            adapter.check_cooldown(address),
            lambda e: CooldownInfo.degraded(),
            chain_id,
            "check_cooldown"
        )

    async def get_user_contribution(self, chain_id: str, address: str) -> ContributionLevel:
        adapter = self.get_adapter(chain_id)
        return await with_fallback(
            adapter.get_contribution(address),
            lambda e: ContributionLevel.degraded(),
            chain_id,
            "get_contribution"
        )

    async def _pool_statistics(self, adapter: BaseChainAdapter) -> PoolStatistics:
        return await with_fallback(
            adapter.get_pool_statistics(),
            lambda e: PoolStatistics(symbol=adapter.config.symbol),
            adapter.chain_id,
            "get_pool_statistics"
        )

    async def get_chain_statistics(self, chain_id: Optional[str] = None):
        """Statistics of one chain, or a {chain_id: stats} map of all chains"""
        if chain_id is not None:
            return await self._pool_statistics(self.get_adapter(chain_id))

        adapters = list(self._adapters.values())
        results = await asyncio.gather(*(self._pool_statistics(adapter) for adapter in adapters))
        return {adapter.chain_id: stats for adapter, stats in zip(adapters, results)}

    async def get_recent_donations(self, chain_id: str, limit: int = 10) -> List[DonationRecord]:
        adapter = self.get_adapter(chain_id)
        return await with_fallback(
            adapter.get_recent_donations(limit),
            lambda e: [],
            chain_id,
            "get_recent_donations"
        )

    async def _check_connection(self, adapter: BaseChainAdapter) -> ConnectionStatus:
        return await with_fallback(
            adapter.check_connection(),
            lambda e: ConnectionStatus(status="unhealthy", error=str(e), lastChecked=utcnow()),
            adapter.chain_id,
            "check_connection"
        )

    async def _available_balance(self, adapter: BaseChainAdapter) -> Decimal:
        return await with_fallback(
            adapter.get_available_balance(),
            lambda e: Decimal(0),
            adapter.chain_id,
            "get_available_balance"
        )

    async def _chain_status(self, adapter: BaseChainAdapter) -> ChainStatus:
        connection, statistics, available = await asyncio.gather(
            self._check_connection(adapter),
            self._pool_statistics(adapter),
            self._available_balance(adapter),
        )
        return ChainStatus(
            **adapter.get_chain_info(),
            connected=connection.healthy,
            blockNumber=connection.blockNumber,
            availableBalance=tiers.format_amount(available),
            statistics=statistics
        )

    async def get_chain_status(self, chain_id: Optional[str] = None):
        """Config, connectivity and pool statistics of one chain or all chains"""
        if chain_id is not None:
            return await self._chain_status(self.get_adapter(chain_id))

        adapters = list(self._adapters.values())
        results = await asyncio.gather(*(self._chain_status(adapter) for adapter in adapters))
        return {adapter.chain_id: status for adapter, status in zip(adapters, results)}

    async def get_chain_rankings(self, chain_id: str, limit: int = 10) -> List[DonorRanking]:
        donations = await self.get_recent_donations(chain_id, self.activity_window)
        return aggregate_donors(donations)[:limit]

    async def record_donation(self, chain_id: str, tx_hash: str) -> Optional[DonationRecord]:
        """Verify a donation transaction on chain; None when unverifiable"""
        adapter = self.get_adapter(chain_id)
        return await with_fallback(
            adapter.verify_donation(tx_hash),
            lambda e: None,
            chain_id,
            "verify_donation"
        )

    async def distribute_tokens(self, chain_id: str, recipient: str, amount: str, reason: str) -> str:
        # Rejected by every adapter; not degraded
        return await self.get_adapter(chain_id).distribute_tokens(recipient, amount, reason)

    # Multi-chain aggregates

    async def get_multi_chain_cooldown(self, address: str) -> MultiChainCooldown:
        chain_ids = self.get_supported_chains()
        results = await asyncio.gather(*(self.check_faucet_cooldown(chain_id, address) for chain_id in chain_ids))
        chains = dict(zip(chain_ids, results))

        return MultiChainCooldown(
            address=address,
            chains=chains,
            claimableChains=[chain_id for chain_id, info in chains.items() if info.canClaim]
        )

    async def get_multi_chain_contribution(self, address: str) -> MultiChainContribution:
        chain_ids = self.get_supported_chains()
        results = await asyncio.gather(*(self.get_user_contribution(chain_id, address) for chain_id in chain_ids))
        chains = dict(zip(chain_ids, results))

        highest = max((c.level for c in chains.values()), default=0)
        total = sum((Decimal(c.totalDonated) for c in chains.values()), Decimal(0))

        return MultiChainContribution(
            address=address,
            chains=chains,
            summary=ContributionSummary(
                highestLevel=highest,
                highestLevelName=tiers.level_name(highest),
                totalDonatedAcrossChains=tiers.format_amount(total),
                activeChains=[chain_id for chain_id, c in chains.items() if c.level > 0]
            )
        )

    async def get_all_recent_activity(self, limit: int = 20) -> List[DonationRecord]:
        """Donations of every chain merged newest first and cut to limit"""
        chain_ids = self.get_supported_chains()
        results = await asyncio.gather(*(self.get_recent_donations(chain_id, limit) for chain_id in chain_ids))

        merged = [record for records in results for record in records]
        merged.sort(key=lambda record: record.timestamp, reverse=True)
        return merged[:limit]

    async def get_donations(
        self,
        chain: Optional[str] = None,
        donor: Optional[str] = None,
        page: int = 1,
        limit: int = 20
    ) -> PaginatedDonations:
        if chain:
            records = await self.get_recent_donations(chain, self.activity_window)
        else:
            records = await self.get_all_recent_activity(self.activity_window)

        if donor:
            records = [record for record in records if record.donor.lower() == donor.lower()]

        total = len(records)
        start = (page - 1) * limit
        return PaginatedDonations(
            items=records[start:start + limit],
            total=total,
            page=page,
            limit=limit,
            totalPages=math.ceil(total / limit) if limit else 0
        )

    async def get_leaderboard(self) -> List[DonorRanking]:
        """Donors of every chain ranked by total donated"""
        records = await self.get_all_recent_activity(self.activity_window)
        return aggregate_donors(records)

    async def health_check(self) -> Dict[str, ConnectionStatus]:
        adapters = list(self._adapters.values())
        results = await asyncio.gather(*(self._check_connection(adapter) for adapter in adapters))
        return {adapter.chain_id: status for adapter, status in zip(adapters, results)}

    async def close(self) -> None:
        for chain_id, adapter in list(self._adapters.items()):
            try:
                await adapter.close()
            except Exception as e:
                logger.error(f"Error closing chain adapter {chain_id}: {e}")


def build_chain_manager(settings: Settings) -> ChainManager:
    """Register an adapter for every enabled chain in settings"""
    manager = ChainManager(activity_window=settings.RECENT_ACTIVITY_MAX_LIMIT)
    for config in settings.CHAINS:
        if config.enabled:
            manager.register_chain(config)
    logger.info("Chain registry built", extra={"chains": manager.get_supported_chains()})
    return manager
