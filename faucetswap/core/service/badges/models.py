"""Models for the NFT badge service."""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel

from faucetswap.core.service.chains.models import ContributionLevel, DonorRanking, PoolStatistics


class BadgeEligibility(BaseModel):
    address: str
    eligible: bool
    currentLevel: int
    currentLevelName: str
    totalDonated: str
    activeChains: List[str]
    nextLevel: Optional[int] = None
    requiredAmount: Optional[str] = None
    reason: str


class BadgeAttribute(BaseModel):
    trait_type: str  # NFT metadata standard key
    value: Union[str, int, float]


class BadgeMetadata(BaseModel):
    level: int
    levelName: str
    totalDonated: str
    chainsContributed: List[str]
    issuedAt: datetime
    attributes: List[BadgeAttribute]


class UpgradeEligibility(BaseModel):
    canUpgrade: bool
    currentLevel: int
    newLevel: Optional[int] = None
    newLevelName: Optional[str] = None
    reason: str


class ChainRankingInfo(BaseModel):
    userRank: Optional[int] = None
    totalContributors: int
    topContributors: List[DonorRanking]


class ChainBadgeInfo(BaseModel):
    chainId: str
    contribution: ContributionLevel
    poolStats: PoolStatistics
    badgeEligible: bool
    chainRanking: ChainRankingInfo


class LevelRequirement(BaseModel):
    level: int
    name: str
    requiredDonation: str
    description: str
    benefits: List[str]


class BadgeRequirements(BaseModel):
    levels: List[LevelRequirement]


class LeaderboardEntry(BaseModel):
    rank: int
    address: str
    totalDonated: str
    level: int
    levelName: str
    donationCount: int


class Leaderboard(BaseModel):
    topContributors: List[LeaderboardEntry]
    total: int
    page: int
    limit: int
    totalPages: int
    lastUpdated: datetime
