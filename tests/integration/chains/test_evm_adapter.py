import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from hexbytes import HexBytes
from web3 import Web3

from faucetswap.core.service.chains.base import ChainNotConfiguredError
from faucetswap.core.service.chains.evm import EVMChainAdapter
from faucetswap.core.service.chains.manager import ChainManager

USER = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
ONE_ETH = 10**18


def resolved(value):
    future = asyncio.get_running_loop().create_future()
    future.set_result(value)
    return future


@pytest.fixture
def contract():
    return MagicMock()


@pytest.fixture
def w3(contract):
    mock = MagicMock()
    mock.eth.contract.return_value = contract
    return mock


@pytest.fixture
def adapter(chain_config_factory, w3):
    return EVMChainAdapter(chain_config_factory("ethereum", cooldown_hours=24), w3=w3)


def donation_event(donor, wei, block, message="thanks"):
    return {
        "args": {"donor": donor, "amount": wei, "message": message},
        "transactionHash": HexBytes("0x" + "ab" * 32),
        "blockNumber": block,
    }


async def test_total_donated_converts_wei(adapter, contract):
    contract.functions.totalDonated.return_value.call = AsyncMock(return_value=3 * ONE_ETH // 2)

    contribution = await adapter.get_contribution(USER)

    assert contribution.level == 2
    assert contribution.totalDonated == "1.5"
    contract.functions.totalDonated.assert_called_once_with(Web3.to_checksum_address(USER))


async def test_never_claimed_can_claim(adapter, contract):
    contract.functions.lastClaim.return_value.call = AsyncMock(return_value=0)

    info = await adapter.check_cooldown(USER)

    assert info.canClaim is True
    assert info.lastClaimTime is None


async def test_recent_claim_blocks(adapter, contract):
    now = int(datetime.now(timezone.utc).timestamp())
    contract.functions.lastClaim.return_value.call = AsyncMock(return_value=now - 3600)

    info = await adapter.check_cooldown(USER)

    assert info.canClaim is False
    assert 22 * 3_600_000 < info.remainingTime <= 23 * 3_600_000


async def test_pool_statistics(adapter, contract):
    contract.functions.getPoolStats.return_value.call = AsyncMock(
        return_value=[2 * ONE_ETH, 5 * ONE_ETH, 3 * ONE_ETH, 7, 20]
    )
    contract.functions.faucetAmount.return_value.call = AsyncMock(return_value=ONE_ETH // 10)

    stats = await adapter.get_pool_statistics()

    assert stats.currentBalance == "2"
    assert stats.totalDonations == "5"
    assert stats.totalClaimed == "3"
    assert stats.totalUsers == 7
    assert stats.availableClaims == 20
    assert stats.faucetAmount == "0.1"
    assert stats.symbol == "ETH"


async def test_recent_donations_newest_first(adapter, contract, w3):
    w3.eth.block_number = resolved(10_000)
    w3.eth.get_block = AsyncMock(side_effect=lambda number: {"timestamp": 1_700_000_000 + number})
    get_logs = AsyncMock(return_value=[
        donation_event("0x1111111111111111111111111111111111111111", ONE_ETH, 9_000),
        donation_event("0x2222222222222222222222222222222222222222", ONE_ETH // 2, 9_500),
        donation_event("0x3333333333333333333333333333333333333333", ONE_ETH // 4, 9_900),
    ])
    contract.events.DonationReceived.return_value.get_logs = get_logs

    records = await adapter.get_recent_donations(limit=2)

    assert [record.blockNumber for record in records] == [9_900, 9_500]
    assert records[0].amount == "0.25"
    assert records[0].txHash == "0x" + "ab" * 32
    assert records[0].timestamp > records[1].timestamp
    assert get_logs.await_args.kwargs["to_block"] == 10_000


async def test_verify_donation_rejects_other_targets(adapter, w3):
    w3.eth.get_transaction_receipt = AsyncMock(
        return_value={"status": 1, "to": "0x0000000000000000000000000000000000000001", "blockNumber": 1}
    )
    assert await adapter.verify_donation("0xdead") is None


async def test_verify_donation_rejects_failed_transactions(adapter, w3):
    w3.eth.get_transaction_receipt = AsyncMock(return_value={"status": 0, "to": adapter.config.pool_address})
    assert await adapter.verify_donation("0xdead") is None


async def test_verify_donation_decodes_event(adapter, contract, w3):
    receipt = {"status": 1, "to": adapter.config.pool_address.lower(), "blockNumber": 42}
    w3.eth.get_transaction_receipt = AsyncMock(return_value=receipt)
    w3.eth.get_block = AsyncMock(return_value={"timestamp": 1_700_000_000})
    contract.events.DonationReceived.return_value.process_receipt.return_value = [
        donation_event(USER, 2 * ONE_ETH, 42)
    ]

    record = await adapter.verify_donation("0x" + "ab" * 32)

    assert record.donor == USER
    assert record.amount == "2"
    assert record.chain == "ethereum"


async def test_missing_pool_address_degrades(chain_config_factory, w3):
    adapter = EVMChainAdapter(chain_config_factory("ethereum", pool_address=None), w3=w3)

    with pytest.raises(ChainNotConfiguredError):
        await adapter.get_total_donated(USER)

    contribution = await ChainManager([adapter]).get_user_contribution("ethereum", USER)
    assert contribution.level == 0


async def test_check_connection(adapter, w3):
    w3.eth.block_number = resolved(123)
    status = await adapter.check_connection()
    assert status.healthy
    assert status.blockNumber == 123


async def test_chain_status_reads_available_balance(adapter, contract, w3):
    w3.eth.block_number = resolved(321)
    contract.functions.getAvailableBalance.return_value.call = AsyncMock(return_value=5 * ONE_ETH // 2)
    contract.functions.getPoolStats.return_value.call = AsyncMock(
        return_value=[3 * ONE_ETH, 5 * ONE_ETH, 2 * ONE_ETH, 4, 30]
    )
    contract.functions.faucetAmount.return_value.call = AsyncMock(return_value=ONE_ETH // 10)

    assert await adapter.get_available_balance() == Decimal("2.5")

    status = await ChainManager([adapter]).get_chain_status("ethereum")

    assert status.availableBalance == "2.5"
    assert status.statistics.currentBalance == "3"
    assert status.blockNumber == 321
