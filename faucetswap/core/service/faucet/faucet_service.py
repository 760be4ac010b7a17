"""Faucet cooldown service: claim requests, their status and history."""

import math
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from faucetswap.core.clock import utcnow
from faucetswap.core.exceptions.base import (
    BadRequestError,
    ConflictError,
    CooldownActiveError,
    ForbiddenError,
    NotFoundError,
    UnsupportedChainError,
)
from faucetswap.core.exceptions.handler import ServiceErrorCode
from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.auth.models.user import User
from faucetswap.core.service.chains import tiers
from faucetswap.core.service.chains.evm import FAUCET_CALL_ABI
from faucetswap.core.service.chains.manager import ChainManager
from faucetswap.core.service.chains.models import DonationRecord
from faucetswap.core.service.faucet.models import (
    ChainCooldownStatus,
    ContractInfo,
    CooldownStatusResponse,
    DonationPool,
    FaucetRequestRecord,
    FaucetRequestResponse,
    FaucetRequestView,
    FaucetSource,
    FaucetStatistics,
    FaucetStatus,
    PaginatedRequests,
)
from faucetswap.infra.config.chains import ChainConfig, ChainType
from faucetswap.infra.repository.donation_pool_repository import DonationPoolRepository
from faucetswap.infra.repository.faucet_config_repository import FaucetConfigRepository
from faucetswap.infra.repository.faucet_request_repository import FaucetRequestRepository
from faucetswap.infra.repository.user_repository import UserRepository

logger = get_logger(__name__)

# Allowed one-way status moves
_TRANSITIONS = {
    FaucetStatus.PENDING: {FaucetStatus.PROCESSING, FaucetStatus.SUCCESS, FaucetStatus.FAILED},
    FaucetStatus.PROCESSING: {FaucetStatus.SUCCESS, FaucetStatus.FAILED},
    FaucetStatus.SUCCESS: set(),
    FaucetStatus.FAILED: set(),
}


def to_view(record: FaucetRequestRecord, wallet_address: Optional[str] = None) -> FaucetRequestView:
    return FaucetRequestView(
        id=str(record.id),
        chain=record.chain,
        token=record.token,
        amount=record.amount,
        source=record.source,
        status=record.status,
        requestedAt=record.requested_at,
        completedAt=record.completed_at,
        cooldownUntil=record.cooldown_until,
        txHash=record.tx_hash,
        walletAddress=wallet_address
    )


class FaucetService:
    """Enforces one claim per cooldown window per (user, chain)"""

    def __init__(
        self,
        user_repository: UserRepository,
        request_repository: FaucetRequestRepository,
        config_repository: FaucetConfigRepository,
        pool_repository: DonationPoolRepository,
        chain_manager: ChainManager
    ):
        self.user_repository = user_repository
        self.request_repository = request_repository
        self.config_repository = config_repository
        self.pool_repository = pool_repository
        self.chain_manager = chain_manager

    def _contract_info(self, chain_config: ChainConfig, amount: str) -> ContractInfo:
        if chain_config.chain_type == ChainType.SUI:
            return ContractInfo(
                chain=chain_config.chain_id,
                contractAddress=chain_config.pool_address,
                packageId=chain_config.package_id,
                amount=amount
            )
        return ContractInfo(
            chain=chain_config.chain_id,
            contractAddress=chain_config.pool_address,
            abi=FAUCET_CALL_ABI,
            amount=amount
        )

    async def request_faucet(self, user_id: UUID, chain: str, source: FaucetSource) -> FaucetRequestResponse:
        """
        Create a faucet request for the user on a chain.

        The user row is locked for the whole check-then-insert sequence, so two
        concurrent requests of the same user cannot both pass the cooldown check.

        Raises:
            BadRequestError: unknown user or chain missing from faucet configuration
            UnsupportedChainError: chain not registered in the chain manager
            CooldownActiveError: a previous request's cooldown has not elapsed
        """
        try:
            user = await self.user_repository.lock_user(user_id)
            if user is None:
                raise BadRequestError(ServiceErrorCode.USER_NOT_FOUND, "User not found", {"userId": str(user_id)})

            config = await self.config_repository.get_by_chain(chain)
            if config is None:
                raise BadRequestError(
                    ServiceErrorCode.CHAIN_NOT_CONFIGURED,
                    f"Chain {chain} not configured in database",
                    {"chain": chain}
                )

            chain_config = self.chain_manager.get_chain_config(chain)
            if chain_config is None:
                raise UnsupportedChainError(chain, status_code=400)

            now = utcnow()
            active = await self.request_repository.get_active_request(user_id, chain, now)
            if active is not None:
                remaining_ms = max(0, int((active.cooldown_until - now).total_seconds() * 1000))
                raise CooldownActiveError(
                    remaining_ms=remaining_ms,
                    remaining_hours=tiers.remaining_hours(remaining_ms),
                    cooldown_until=active.cooldown_until.isoformat()
                )

            cooldown_until = now + timedelta(milliseconds=config.cooldown_hours * tiers.MS_PER_HOUR)
            status = FaucetStatus.PENDING if source == FaucetSource.OFFICIAL_FAUCET else FaucetStatus.PROCESSING

            record = await self.request_repository.create_request(
                user_id=user_id,
                chain=chain,
                token=config.token_symbol,
                amount=config.max_amount,
                source=source,
                status=status,
                requested_at=now,
                cooldown_until=cooldown_until
            )
        except Exception:
            await self.request_repository.rollback()
            raise

        logger.info(
            "Faucet request created",
            extra={
                "request_id": str(record.id),
                "wallet_address": user.wallet_address,
                "chain": chain,
                "source": source.value,
                "cooldown_until": record.cooldown_until.isoformat()
            }
        )

        response = FaucetRequestResponse(
            requestId=str(record.id),
            chain=chain,
            source=source,
            status=record.status,
            amount=record.amount,
            token=record.token,
            cooldownUntil=record.cooldown_until,
            message="Redirecting to official faucet"
        )
        if source == FaucetSource.OFFICIAL_FAUCET:
            response.redirectUrl = chain_config.faucet_url or config.faucet_url
        else:
            response.contractInfo = self._contract_info(chain_config, record.amount)
            response.message = "Call smart contract directly"
        return response

    async def update_request_status(
        self,
        request_id: UUID,
        status: FaucetStatus,
        user: User,
        tx_hash: Optional[str] = None,
        is_admin: bool = False
    ) -> FaucetRequestView:
        """
        Move a request forward to a later status; terminal statuses stamp completed_at.

        Raises:
            NotFoundError: no such request (404)
            ForbiddenError: request belongs to another user (403)
            ConflictError: request already terminal or the move goes backwards (409)
        """
        record = await self.request_repository.get_by_id(request_id)
        if record is None:
            raise NotFoundError(ServiceErrorCode.REQUEST_NOT_FOUND, "Faucet request not found", {"requestId": str(request_id)})

        if record.user_id != user.id and not is_admin:
            raise ForbiddenError("Faucet request belongs to another user")

        if status not in _TRANSITIONS[record.status]:
            raise ConflictError(
                ServiceErrorCode.INVALID_STATUS_TRANSITION,
                f"Cannot change status from {record.status.value} to {status.value}",
                {"currentStatus": record.status.value, "requestedStatus": status.value}
            )

        completed_at = utcnow() if status.is_terminal else None
        updated = await self.request_repository.update_status(request_id, status, tx_hash, completed_at)

        logger.info(
            "Faucet request status updated",
            extra={"request_id": str(request_id), "from_status": record.status.value, "to_status": status.value}
        )
        return to_view(updated)

    def _chain_status(self, chain: str, record: Optional[FaucetRequestRecord], now: datetime) -> ChainCooldownStatus:
        if record is None:
            return ChainCooldownStatus(chain=chain, canClaim=True, remainingTime=0)

        remaining_ms = max(0, int((record.cooldown_until - now).total_seconds() * 1000))
        return ChainCooldownStatus(
            chain=chain,
            canClaim=remaining_ms == 0,
            remainingTime=remaining_ms,
            cooldownUntil=record.cooldown_until,
            lastRequestAt=record.requested_at,
            lastStatus=record.status
        )

    async def get_cooldown_status(self, address: str, chain: Optional[str] = None) -> CooldownStatusResponse:
        """Read-only cooldown view from the latest request per chain"""
        chains = [chain] if chain else self.chain_manager.get_supported_chains()
        user = await self.user_repository.get_user_by_wallet(address)
        latest = await self.request_repository.get_latest_per_chain(user.id) if user else {}

        now = utcnow()
        return CooldownStatusResponse(
            address=address.lower(),
            cooldowns=[self._chain_status(chain_id, latest.get(chain_id), now) for chain_id in chains]
        )

    async def get_user_history(self, address: str, limit: int = 20) -> List[FaucetRequestView]:
        user = await self.user_repository.get_user_by_wallet(address)
        if user is None:
            return []
        records = await self.request_repository.get_history(user.id, limit)
        return [to_view(record) for record in records]

    async def get_statistics(self) -> FaucetStatistics:
        by_status = await self.request_repository.count_by("status")
        by_chain = await self.request_repository.count_by("chain")
        by_source = await self.request_repository.count_by("source")
        unique_users = await self.request_repository.count_unique_users()

        total = sum(by_status.values())
        successful = by_status.get(FaucetStatus.SUCCESS.value, 0)
        return FaucetStatistics(
            totalRequests=total,
            successfulRequests=successful,
            failedRequests=by_status.get(FaucetStatus.FAILED.value, 0),
            pendingRequests=by_status.get(FaucetStatus.PENDING.value, 0) + by_status.get(FaucetStatus.PROCESSING.value, 0),
            successRate=round(successful / total * 100, 2) if total else 0.0,
            uniqueUsers=unique_users,
            byChain=by_chain,
            bySource=by_source,
            byStatus=by_status
        )

    async def list_requests(
        self,
        page: int = 1,
        limit: int = 20,
        chain: Optional[str] = None,
        status: Optional[FaucetStatus] = None
    ) -> PaginatedRequests:
        rows, total = await self.request_repository.list_requests(page, limit, chain, status)
        return PaginatedRequests(
            items=[to_view(record, wallet_address) for record, wallet_address in rows],
            total=total,
            page=page,
            limit=limit,
            totalPages=math.ceil(total / limit) if limit else 0
        )

    async def list_donation_pools(self) -> List[DonationPool]:
        return await self.pool_repository.list_all()

    async def record_donation(self, chain: str, tx_hash: str) -> DonationRecord:
        """
        Verify a donation on chain and add it to the cached pool totals.
        Each transaction counts once per chain; a replay is DONATION_ALREADY_RECORDED (409).
        """
        chain_config = self.chain_manager.get_chain_config(chain)
        if chain_config is None:
            raise UnsupportedChainError(chain, status_code=400)

        # EVM hashes are hex and case-insensitive, Sui digests are base58
        recorded_hash = tx_hash.lower() if chain_config.chain_type == ChainType.EVM else tx_hash
        if await self.pool_repository.is_recorded(chain, recorded_hash):
            raise self._already_recorded(chain, tx_hash)

        donation = await self.chain_manager.record_donation(chain, tx_hash)
        if donation is None:
            raise BadRequestError(
                ServiceErrorCode.DONATION_NOT_VERIFIED,
                "Donation transaction could not be verified",
                {"chain": chain, "txHash": tx_hash}
            )

        try:
            await self.pool_repository.add_donation(chain, chain_config.symbol, donation, recorded_hash)
        except IntegrityError:
            raise self._already_recorded(chain, tx_hash)
        return donation

    @staticmethod
    def _already_recorded(chain: str, tx_hash: str) -> ConflictError:
        return ConflictError(
            ServiceErrorCode.DONATION_ALREADY_RECORDED,
            "Donation transaction was already recorded",
            {"chain": chain, "txHash": tx_hash}
        )
