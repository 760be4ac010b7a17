from datetime import datetime, timedelta, timezone

import pytest

from faucetswap.core.service.badges.badge_service import BadgeService
from faucetswap.core.service.chains.manager import ChainManager
from faucetswap.core.service.chains.models import DonationRecord
from faucetswap.infra.config.chains import ChainType

DONOR = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
OTHER = "0x8ba1f109551bd432803012645ac136ddd64dba72"
T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def manager(fake_adapter_factory):
    donations = [
        DonationRecord(chain="ethereum", donor=DONOR, amount="1.5", timestamp=T0),
        DonationRecord(chain="ethereum", donor=OTHER, amount="3", timestamp=T0 + timedelta(minutes=1)),
        DonationRecord(chain="sui", donor=DONOR, amount="0.2", timestamp=T0 + timedelta(minutes=2)),
    ]
    return ChainManager([
        fake_adapter_factory("ethereum", donated={DONOR: "1.5", OTHER: "3"}, donations=donations[:2]),
        fake_adapter_factory("polygon", donated={DONOR: "0.05"}),
        fake_adapter_factory("sui", ChainType.SUI, donated={DONOR: "0.2"}, donations=donations[2:]),
    ])


@pytest.fixture
def badge_service(manager):
    return BadgeService(manager)


async def test_eligibility_uses_highest_level_and_active_totals(badge_service):
    eligibility = await badge_service.check_eligibility(DONOR)

    assert eligibility.eligible is True
    assert eligibility.currentLevel == 2
    assert eligibility.currentLevelName == "Silver"
    # polygon's 0.05 is below Bronze and not counted
    assert eligibility.totalDonated == "1.7"
    assert eligibility.activeChains == ["ethereum", "sui"]
    assert eligibility.nextLevel == 3
    assert eligibility.requiredAmount == "3.3"


async def test_not_eligible_without_donations(badge_service):
    eligibility = await badge_service.check_eligibility("0x0000000000000000000000000000000000000001")

    assert eligibility.eligible is False
    assert eligibility.currentLevel == 0
    assert eligibility.nextLevel == 1
    assert eligibility.requiredAmount == "0.1"
    assert await badge_service.generate_metadata("0x0000000000000000000000000000000000000001") is None


async def test_eligibility_survives_failed_chain(fake_adapter_factory):
    service = BadgeService(ChainManager([
        fake_adapter_factory("ethereum", donated={DONOR: "12"}),
        fake_adapter_factory("sui", ChainType.SUI, failing=("*",)),
    ]))

    eligibility = await service.check_eligibility(DONOR)

    assert eligibility.currentLevel == 4
    assert eligibility.nextLevel is None
    assert eligibility.requiredAmount is None


async def test_metadata_attributes(badge_service):
    metadata = await badge_service.generate_metadata(DONOR)

    assert metadata.level == 2
    assert metadata.chainsContributed == ["ethereum", "sui"]
    attributes = {a.trait_type: a.value for a in metadata.attributes}
    assert attributes["Contributor Level"] == "Silver"
    assert attributes["Total Donated"] == "1.7"
    assert attributes["Chains Contributed"] == 2
    assert attributes["Active Chains"] == "ethereum, sui"
    assert attributes["Issue Date"] == metadata.issuedAt.date().isoformat()


async def test_upgrade(badge_service):
    upgrade = await badge_service.check_upgrade(DONOR, current_level=1)
    assert upgrade.canUpgrade is True
    assert upgrade.newLevel == 2
    assert upgrade.newLevelName == "Silver"

    same = await badge_service.check_upgrade(DONOR, current_level=2)
    assert same.canUpgrade is False
    assert same.reason == "Need 3.3 more to upgrade"


async def test_chain_badge_info_ranks_user(badge_service):
    info = await badge_service.get_chain_badge_info(DONOR, "ethereum")

    assert info.badgeEligible is True
    assert info.contribution.levelName == "Silver"
    assert info.chainRanking.userRank == 2
    assert info.chainRanking.totalContributors == 2
    assert info.chainRanking.topContributors[0].donor == OTHER


def test_requirements_table(badge_service):
    levels = badge_service.get_requirements().levels
    assert [(l.level, l.name, l.requiredDonation) for l in levels] == [
        (1, "Bronze", "0.1"),
        (2, "Silver", "1.0"),
        (3, "Gold", "5.0"),
        (4, "Diamond", "10.0"),
    ]


async def test_leaderboard_across_chains(badge_service):
    board = await badge_service.get_leaderboard(page=1, limit=1)

    assert board.total == 2
    assert board.totalPages == 2
    assert board.topContributors[0].address == OTHER
    assert board.topContributors[0].levelName == "Silver"

    second = await badge_service.get_leaderboard(page=2, limit=1)
    assert second.topContributors[0].address == DONOR
    assert second.topContributors[0].totalDonated == "1.7"
    assert second.topContributors[0].donationCount == 2
