"""NFT badge endpoints; all read-only derivations over on-chain contributions."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from faucetswap.core.dependencies import get_badge_service
from faucetswap.core.service.badges.badge_service import BadgeService
from faucetswap.core.service.badges.models import (
    BadgeEligibility,
    BadgeMetadata,
    BadgeRequirements,
    ChainBadgeInfo,
    Leaderboard,
    UpgradeEligibility,
)

router = APIRouter(prefix="/badges", tags=["NFT Badges"])


@router.get("/eligibility/{address}", response_model=BadgeEligibility)
async def check_eligibility(address: str, badge_service: BadgeService = Depends(get_badge_service)):
    return await badge_service.check_eligibility(address)


@router.get("/metadata/{address}", response_model=Optional[BadgeMetadata])
async def get_badge_metadata(address: str, badge_service: BadgeService = Depends(get_badge_service)):
    """Badge metadata, or null when the address has not donated enough for Bronze"""
    return await badge_service.generate_metadata(address)


@router.get("/upgrade/{address}", response_model=UpgradeEligibility)
async def check_upgrade(
    address: str,
    currentLevel: int = Query(0, ge=0, le=4),
    badge_service: BadgeService = Depends(get_badge_service)
):
    return await badge_service.check_upgrade(address, currentLevel)


@router.get("/chain/{chainId}/{address}", response_model=ChainBadgeInfo)
async def get_chain_badge_info(chainId: str, address: str, badge_service: BadgeService = Depends(get_badge_service)):
    return await badge_service.get_chain_badge_info(address, chainId)


@router.get("/requirements", response_model=BadgeRequirements)
async def get_requirements(badge_service: BadgeService = Depends(get_badge_service)):
    return badge_service.get_requirements()


@router.get("/leaderboard", response_model=Leaderboard)
async def get_leaderboard(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    badge_service: BadgeService = Depends(get_badge_service)
):
    return await badge_service.get_leaderboard(page, limit)
