from datetime import datetime, timedelta, timezone

import pytest

from faucetswap.core.clock import utcnow
from faucetswap.core.exceptions.base import ConflictError, UnsupportedChainError
from faucetswap.core.service.chains.base import OperationNotSupportedError
from faucetswap.core.service.chains.manager import ChainManager, aggregate_donors
from faucetswap.core.service.chains.models import DonationRecord
from faucetswap.core.service.chains.tiers import DEFAULT_COOLDOWN_MS, MS_PER_HOUR
from faucetswap.infra.config.chains import ChainType

ADDRESS = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


def donation(chain, donor, amount, minutes):
    return DonationRecord(chain=chain, donor=donor, amount=amount, timestamp=T0 + timedelta(minutes=minutes))


def test_registry_lookup(chain_manager):
    assert chain_manager.get_supported_chains() == ["ethereum", "polygon", "sui"]
    assert chain_manager.get_chain_types() == {"ethereum": "evm", "polygon": "evm", "sui": "sui"}
    assert chain_manager.get_chain_config("sui").decimals == 9
    assert chain_manager.get_chain_config("solana") is None
    assert set(chain_manager.get_all_chain_configs()) == {"ethereum", "polygon", "sui"}


def test_unknown_chain_is_rejected(chain_manager):
    with pytest.raises(UnsupportedChainError) as exc_info:
        chain_manager.get_adapter("solana")
    assert exc_info.value.code == "UNSUPPORTED_CHAIN"


def test_register_duplicate_chain(chain_manager, fake_adapter_factory):
    with pytest.raises(ConflictError):
        chain_manager.register_adapter(fake_adapter_factory("polygon"))


def test_register_chain_builds_adapter_for_chain_type(chain_config_factory):
    manager = ChainManager()
    adapter = manager.register_chain(chain_config_factory("base"))
    assert manager.has_chain("base")
    assert type(adapter).__name__ == "EVMChainAdapter"

    sui = manager.register_chain(chain_config_factory("sui", ChainType.SUI))
    assert type(sui).__name__ == "SuiChainAdapter"


async def test_unregister_chain_closes_adapter(chain_manager):
    adapter = chain_manager.get_adapter("polygon")
    await chain_manager.unregister_chain("polygon")

    assert adapter.closed is True
    assert not chain_manager.has_chain("polygon")
    with pytest.raises(UnsupportedChainError):
        await chain_manager.check_faucet_cooldown("polygon", ADDRESS)


async def test_first_claim_is_free(chain_manager):
    info = await chain_manager.check_faucet_cooldown("ethereum", ADDRESS)
    assert info.canClaim is True
    assert info.remainingTime == 0


async def test_cooldown_after_recent_claim(fake_adapter_factory):
    adapter = fake_adapter_factory(
        "ethereum",
        config_overrides={"cooldown_hours": 12},
        last_claims={ADDRESS: utcnow() - timedelta(hours=1)}
    )
    manager = ChainManager([adapter])

    info = await manager.check_faucet_cooldown("ethereum", ADDRESS)

    assert info.canClaim is False
    assert 10 * MS_PER_HOUR < info.remainingTime <= 11 * MS_PER_HOUR
    assert info.nextClaimTime > utcnow()


async def test_cooldown_elapsed(fake_adapter_factory):
    adapter = fake_adapter_factory("ethereum", last_claims={ADDRESS: utcnow() - timedelta(hours=25)})
    info = await ChainManager([adapter]).check_faucet_cooldown("ethereum", ADDRESS)
    assert info.canClaim is True
    assert info.remainingTime == 0


async def test_rpc_failure_degrades_every_read(fake_adapter_factory):
    manager = ChainManager([fake_adapter_factory("ethereum", failing=("*",))])

    cooldown = await manager.check_faucet_cooldown("ethereum", ADDRESS)
    assert cooldown.canClaim is False
    assert cooldown.remainingTime == DEFAULT_COOLDOWN_MS

    contribution = await manager.get_user_contribution("ethereum", ADDRESS)
    assert contribution.level == 0
    assert contribution.levelName == "None"

    statistics = await manager.get_chain_statistics("ethereum")
    assert statistics.currentBalance == "0"
    assert statistics.availableClaims == 0

    assert await manager.get_recent_donations("ethereum") == []
    assert await manager.record_donation("ethereum", "0xabc") is None

    health = await manager.health_check()
    assert health["ethereum"].status == "unhealthy"
    assert "connection refused" in health["ethereum"].error


async def test_distribute_tokens_is_not_degraded(chain_manager):
    with pytest.raises(OperationNotSupportedError) as exc_info:
        await chain_manager.distribute_tokens("ethereum", ADDRESS, "0.1", "test")
    assert "smart contract" in exc_info.value.message


async def test_contribution_tier_from_donations(fake_adapter_factory):
    manager = ChainManager([fake_adapter_factory("ethereum", donated={ADDRESS: "1.5"})])

    contribution = await manager.get_user_contribution("ethereum", ADDRESS)

    assert contribution.level == 2
    assert contribution.levelName == "Silver"
    assert contribution.totalDonated == "1.5"
    assert contribution.nextLevelRequirement == "3.5"


async def test_multi_chain_contribution_keeps_failed_chains(fake_adapter_factory):
    manager = ChainManager([
        fake_adapter_factory("ethereum", donated={ADDRESS: "6"}),
        fake_adapter_factory("polygon", donated={ADDRESS: "0.2"}),
        fake_adapter_factory("sui", ChainType.SUI, failing=("get_total_donated",)),
    ])

    result = await manager.get_multi_chain_contribution(ADDRESS)

    assert set(result.chains) == {"ethereum", "polygon", "sui"}
    assert result.chains["sui"].level == 0
    assert result.summary.highestLevel == max(c.level for c in result.chains.values()) == 3
    assert result.summary.highestLevelName == "Gold"
    assert result.summary.totalDonatedAcrossChains == "6.2"
    assert result.summary.activeChains == ["ethereum", "polygon"]


async def test_multi_chain_cooldown(fake_adapter_factory):
    manager = ChainManager([
        fake_adapter_factory("ethereum", last_claims={ADDRESS: utcnow()}),
        fake_adapter_factory("polygon"),
        fake_adapter_factory("sui", ChainType.SUI, failing=("get_last_claim_time",)),
    ])

    result = await manager.get_multi_chain_cooldown(ADDRESS)

    assert set(result.chains) == {"ethereum", "polygon", "sui"}
    assert result.claimableChains == ["polygon"]
    assert result.chains["sui"].remainingTime == DEFAULT_COOLDOWN_MS


async def test_recent_activity_is_merged_newest_first(fake_adapter_factory):
    manager = ChainManager([
        fake_adapter_factory("ethereum", donations=[donation("ethereum", "0xa", "1", 1), donation("ethereum", "0xb", "1", 5)]),
        fake_adapter_factory("polygon", donations=[donation("polygon", "0xc", "2", 3)]),
        fake_adapter_factory("sui", ChainType.SUI, failing=("get_recent_donations",)),
    ])

    activity = await manager.get_all_recent_activity(limit=2)

    assert [record.donor for record in activity] == ["0xb", "0xc"]
    timestamps = [record.timestamp for record in await manager.get_all_recent_activity(limit=10)]
    assert timestamps == sorted(timestamps, reverse=True)


async def test_get_donations_filters_and_paginates(fake_adapter_factory):
    records = [donation("ethereum", "0xAA" if i % 2 else "0xbb", "0.5", i) for i in range(5)]
    manager = ChainManager([fake_adapter_factory("ethereum", donations=records)])

    page = await manager.get_donations(donor="0xaa", page=1, limit=1)

    assert page.total == 2
    assert page.totalPages == 2
    assert len(page.items) == 1
    assert page.items[0].donor == "0xAA"


def test_aggregate_donors_ranks_by_total():
    rankings = aggregate_donors([
        donation("ethereum", "0xAA", "0.5", 0),
        donation("polygon", "0xaa", "0.6", 1),
        donation("ethereum", "0xbb", "5", 2),
        donation("ethereum", "0xcc", "0.05", 3),
    ])

    assert [(r.rank, r.donor.lower(), r.totalDonated) for r in rankings] == [
        (1, "0xbb", "5"),
        (2, "0xaa", "1.1"),
        (3, "0xcc", "0.05"),
    ]
    assert rankings[0].levelName == "Gold"
    assert rankings[1].donationCount == 2
    assert rankings[2].level == 0


async def test_chain_status_combines_connection_and_statistics(chain_manager):
    statuses = await chain_manager.get_chain_status()

    assert set(statuses) == {"ethereum", "polygon", "sui"}
    ethereum = statuses["ethereum"]
    assert ethereum.connected is True
    assert ethereum.blockNumber == 100
    assert ethereum.cooldownHours == 12
    assert ethereum.statistics.faucetAmount == "0.1"
    assert ethereum.availableBalance == "1"


async def test_chain_status_degrades_available_balance(chain_manager):
    polygon = chain_manager.get_adapter("polygon")
    polygon.failing.add("get_available_balance")

    status = await chain_manager.get_chain_status("polygon")

    assert status.availableBalance == "0"
    assert status.connected is True
    assert status.statistics.currentBalance == "1"
