"""
Chain controller: registry, per-chain reads, multi-chain aggregates and donations.

Fixed paths are declared before the /{chainId} routes so that e.g.
/chains/health is not captured as a chain id.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from faucetswap.api.controller.chains.dto.input_dto import RecordDonationDto, RegisterChainDto
from faucetswap.api.controller.chains.dto.output_dto import AllChainsStatusDto, ChainRemovedDto, SupportedChainsDto
from faucetswap.core.clock import utcnow
from faucetswap.core.dependencies import (
    get_chain_manager,
    get_current_user,
    get_donation_pool_repository,
    get_faucet_config_repository,
    get_faucet_service,
    get_ws_manager,
    require_admin,
)
from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.auth.models.user import User
from faucetswap.core.service.chains.manager import ChainManager
from faucetswap.core.service.chains.models import (
    ChainInfo,
    ChainStatus,
    ConnectionStatus,
    ContributionLevel,
    CooldownInfo,
    DonationRecord,
    DonorRanking,
    MultiChainContribution,
    MultiChainCooldown,
    PaginatedDonations,
    PoolStatistics,
)
from faucetswap.core.service.faucet.faucet_service import FaucetService
from faucetswap.core.service.faucet.models import FaucetConfig
from faucetswap.core.service.websocket.manager import ConnectionManager
from faucetswap.infra.config.settings import settings
from faucetswap.infra.repository.donation_pool_repository import DonationPoolRepository
from faucetswap.infra.repository.faucet_config_repository import FaucetConfigRepository

logger = get_logger(__name__)
router = APIRouter(prefix="/chains", tags=["Chains"])


@router.get("/status", response_model=AllChainsStatusDto)
async def get_all_chains_status(chain_manager: ChainManager = Depends(get_chain_manager)):
    statuses = await chain_manager.get_chain_status()
    chains = list(statuses.values())
    return AllChainsStatusDto(
        chains=chains,
        totalChains=len(chains),
        activeChains=sum(1 for chain in chains if chain.connected),
        lastUpdated=utcnow()
    )


@router.get("/status/{chainId}", response_model=ChainStatus)
async def get_chain_status(chainId: str, chain_manager: ChainManager = Depends(get_chain_manager)):
    return await chain_manager.get_chain_status(chainId)


@router.get("/supported", response_model=SupportedChainsDto)
async def get_supported_chains(chain_manager: ChainManager = Depends(get_chain_manager)):
    chains = chain_manager.get_supported_chains()
    return SupportedChainsDto(
        chains=chains,
        configs={chain_id: chain_manager.get_chain_info(chain_id) for chain_id in chains},
        count=len(chains)
    )


@router.get("/health", response_model=Dict[str, ConnectionStatus])
async def chains_health(chain_manager: ChainManager = Depends(get_chain_manager)):
    """RPC connectivity per chain; unreachable chains report status=unhealthy"""
    return await chain_manager.health_check()


@router.get("/multi-cooldown/{address}", response_model=MultiChainCooldown)
async def get_multi_chain_cooldown(address: str, chain_manager: ChainManager = Depends(get_chain_manager)):
    return await chain_manager.get_multi_chain_cooldown(address)


@router.get("/multi-contribution/{address}", response_model=MultiChainContribution)
async def get_multi_chain_contribution(address: str, chain_manager: ChainManager = Depends(get_chain_manager)):
    return await chain_manager.get_multi_chain_contribution(address)


@router.get("/recent-activity", response_model=List[DonationRecord])
async def get_recent_activity(
    limit: int = Query(20, ge=1, le=settings.RECENT_ACTIVITY_MAX_LIMIT),
    chain_manager: ChainManager = Depends(get_chain_manager)
):
    """Donations across all chains, newest first"""
    return await chain_manager.get_all_recent_activity(limit)


@router.get("/donations", response_model=PaginatedDonations)
async def get_donations(
    chain: Optional[str] = Query(None),
    donor: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    chain_manager: ChainManager = Depends(get_chain_manager)
):
    return await chain_manager.get_donations(chain=chain, donor=donor, page=page, limit=limit)


@router.post("/donations/record", response_model=DonationRecord, status_code=status.HTTP_201_CREATED)
async def record_donation(
    request: RecordDonationDto,
    user: User = Depends(get_current_user),
    faucet_service: FaucetService = Depends(get_faucet_service),
    ws_manager: ConnectionManager = Depends(get_ws_manager)
):
    """
    Verify a donation transaction on chain and add it to the cached pool totals.
    Unverifiable transactions are rejected with DONATION_NOT_VERIFIED.
    """
    donation = await faucet_service.record_donation(request.chain, request.txHash)

    logger.info(
        "Donation recorded",
        extra={"chain": donation.chain, "donor": donation.donor, "amount": donation.amount, "user_id": str(user.id)}
    )
    await ws_manager.publish("donation", {
        "chain": donation.chain,
        "address": donation.donor,
        "message": f"Donation of {donation.amount} {donation.symbol or 'tokens'} on {donation.chain}",
        "amount": donation.amount,
        "txHash": donation.txHash,
    })
    return donation


@router.post("", response_model=ChainInfo, status_code=status.HTTP_201_CREATED)
async def register_chain(
    request: RegisterChainDto,
    admin: User = Depends(require_admin),
    chain_manager: ChainManager = Depends(get_chain_manager),
    config_repository: FaucetConfigRepository = Depends(get_faucet_config_repository),
    pool_repository: DonationPoolRepository = Depends(get_donation_pool_repository)
):
    """Register a chain adapter at runtime and seed its faucet configuration"""
    config = request.to_config()
    chain_manager.register_chain(config)

    try:
        await config_repository.upsert(FaucetConfig.from_chain_config(config))
        await pool_repository.ensure_pool(config.chain_id, config.symbol)
    except Exception as e:
        logger.error(
            "Chain registration failed, adapter removed",
            extra={"chain": config.chain_id, "error": str(e)}
        )
        await chain_manager.unregister_chain(config.chain_id)
        raise

    logger.info("Chain registered", extra={"chain": config.chain_id, "admin": admin.wallet_address})
    return chain_manager.get_chain_info(config.chain_id)


@router.delete("/{chainId}", response_model=ChainRemovedDto)
async def unregister_chain(
    chainId: str,
    admin: User = Depends(require_admin),
    chain_manager: ChainManager = Depends(get_chain_manager)
):
    await chain_manager.unregister_chain(chainId)
    logger.info("Chain unregistered", extra={"chain": chainId, "admin": admin.wallet_address})
    return ChainRemovedDto(chainId=chainId, message=f"Chain {chainId} removed")


@router.get("/{chainId}/cooldown/{address}", response_model=CooldownInfo)
async def get_cooldown(chainId: str, address: str, chain_manager: ChainManager = Depends(get_chain_manager)):
    return await chain_manager.check_faucet_cooldown(chainId, address)


@router.get("/{chainId}/contribution/{address}", response_model=ContributionLevel)
async def get_contribution(chainId: str, address: str, chain_manager: ChainManager = Depends(get_chain_manager)):
    return await chain_manager.get_user_contribution(chainId, address)


@router.get("/{chainId}/pool-statistics", response_model=PoolStatistics)
async def get_pool_statistics(chainId: str, chain_manager: ChainManager = Depends(get_chain_manager)):
    return await chain_manager.get_chain_statistics(chainId)


@router.get("/{chainId}/rankings", response_model=List[DonorRanking])
async def get_chain_rankings(
    chainId: str,
    limit: int = Query(10, ge=1, le=100),
    chain_manager: ChainManager = Depends(get_chain_manager)
):
    return await chain_manager.get_chain_rankings(chainId, limit)
