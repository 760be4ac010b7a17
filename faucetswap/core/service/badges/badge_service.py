"""NFT badge service: contributor levels derived from chain manager output."""

import math
from decimal import Decimal
from typing import Optional

from faucetswap.core.clock import utcnow
from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.badges.models import (
    BadgeAttribute,
    BadgeEligibility,
    BadgeMetadata,
    BadgeRequirements,
    ChainBadgeInfo,
    ChainRankingInfo,
    Leaderboard,
    LeaderboardEntry,
    LevelRequirement,
    UpgradeEligibility,
)
from faucetswap.core.service.chains import tiers
from faucetswap.core.service.chains.manager import ChainManager

logger = get_logger(__name__)

LEVEL_DETAILS = {
    1: ("First donation to the community pools", ["Bronze badge NFT", "Listed in the contributor hall of fame"]),
    2: ("Steady contributor", ["Silver badge NFT", "Priority support channel"]),
    3: ("Significant contributor", ["Gold badge NFT", "Community governance participation"]),
    4: ("Top contributor", ["Diamond badge NFT", "Special event invitations"]),
}


class BadgeService:
    """Stateless: every answer is recomputed from the chain manager"""

    def __init__(self, chain_manager: ChainManager):
        self.chain_manager = chain_manager

    async def check_eligibility(self, address: str) -> BadgeEligibility:
        multi = await self.chain_manager.get_multi_chain_contribution(address)

        active = [chain_id for chain_id, c in multi.chains.items() if c.level > 0]
        highest = max((c.level for c in multi.chains.values()), default=0)
        total = sum((Decimal(multi.chains[chain_id].totalDonated) for chain_id in active), Decimal(0))

        next_level = highest + 1 if highest < tiers.MAX_LEVEL else None
        required = None
        if next_level is not None:
            required = tiers.format_amount(max(Decimal(0), tiers.threshold_for(next_level) - total))

        eligible = highest > 0
        logger.debug(
            "Badge eligibility computed",
            extra={"address": address, "highest_level": highest, "active_chains": active}
        )
        return BadgeEligibility(
            address=address,
            eligible=eligible,
            currentLevel=highest,
            currentLevelName=tiers.level_name(highest),
            totalDonated=tiers.format_amount(total),
            activeChains=active,
            nextLevel=next_level,
            requiredAmount=required,
            reason=(
                f"Qualified for {tiers.level_name(highest)} badge"
                if eligible else "No contributions found across any chain"
            )
        )

    async def generate_metadata(self, address: str) -> Optional[BadgeMetadata]:
        """Badge metadata for an eligible address, None otherwise"""
        eligibility = await self.check_eligibility(address)
        if not eligibility.eligible:
            return None

        issued_at = utcnow()
        level_name = eligibility.currentLevelName
        return BadgeMetadata(
            level=eligibility.currentLevel,
            levelName=level_name,
            totalDonated=eligibility.totalDonated,
            chainsContributed=eligibility.activeChains,
            issuedAt=issued_at,
            attributes=[
                BadgeAttribute(trait_type="Contributor Level", value=level_name),
                BadgeAttribute(trait_type="Total Donated", value=eligibility.totalDonated),
                BadgeAttribute(trait_type="Chains Contributed", value=len(eligibility.activeChains)),
                BadgeAttribute(trait_type="Active Chains", value=", ".join(eligibility.activeChains)),
                BadgeAttribute(trait_type="Issue Date", value=issued_at.date().isoformat()),
            ]
        )

    async def check_upgrade(self, address: str, current_level: int) -> UpgradeEligibility:
        eligibility = await self.check_eligibility(address)

        if eligibility.currentLevel > current_level:
            return UpgradeEligibility(
                canUpgrade=True,
                currentLevel=current_level,
                newLevel=eligibility.currentLevel,
                newLevelName=eligibility.currentLevelName,
                reason=f"Eligible for upgrade to {eligibility.currentLevelName}"
            )

        return UpgradeEligibility(
            canUpgrade=False,
            currentLevel=current_level,
            reason=(
                f"Need {eligibility.requiredAmount} more to upgrade"
                if eligibility.requiredAmount is not None else "Already at highest level"
            )
        )

    async def get_chain_badge_info(self, address: str, chain_id: str, top: int = 10) -> ChainBadgeInfo:
        contribution = await self.chain_manager.get_user_contribution(chain_id, address)
        pool_stats = await self.chain_manager.get_chain_statistics(chain_id)
        rankings = await self.chain_manager.get_chain_rankings(chain_id, self.chain_manager.activity_window)

        user_rank = next((r.rank for r in rankings if r.donor.lower() == address.lower()), None)
        return ChainBadgeInfo(
            chainId=chain_id,
            contribution=contribution,
            poolStats=pool_stats,
            badgeEligible=contribution.level > 0,
            chainRanking=ChainRankingInfo(
                userRank=user_rank,
                totalContributors=len(rankings),
                topContributors=rankings[:top]
            )
        )

    def get_requirements(self) -> BadgeRequirements:
        levels = []
        for threshold, level in tiers.TIER_THRESHOLDS:
            description, benefits = LEVEL_DETAILS[level]
            levels.append(LevelRequirement(
                level=level,
                name=tiers.level_name(level),
                requiredDonation=str(threshold),
                description=description,
                benefits=benefits
            ))
        return BadgeRequirements(levels=levels)

    async def get_leaderboard(self, page: int = 1, limit: int = 50) -> Leaderboard:
        rankings = await self.chain_manager.get_leaderboard()
        start = (page - 1) * limit

        return Leaderboard(
            topContributors=[
                LeaderboardEntry(
                    rank=r.rank,
                    address=r.donor,
                    totalDonated=r.totalDonated,
                    level=r.level,
                    levelName=r.levelName,
                    donationCount=r.donationCount
                )
                for r in rankings[start:start + limit]
            ],
            total=len(rankings),
            page=page,
            limit=limit,
            totalPages=math.ceil(len(rankings) / limit) if limit else 0,
            lastUpdated=utcnow()
        )
