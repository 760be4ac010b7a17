"""
EVM chain adapter: reads the donation pool contract through web3.py's async provider.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

from aiohttp import ClientTimeout
from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3
from web3.logs import DISCARD

from faucetswap.core.clock import utcnow
from faucetswap.core.service.chains import tiers
from faucetswap.core.service.chains.base import BaseChainAdapter, ChainNotConfiguredError
from faucetswap.core.service.chains.models import ConnectionStatus, DonationRecord, PoolStatistics
from faucetswap.infra.config.chains import ChainConfig, ChainType
from faucetswap.infra.config.settings import get_settings

settings = get_settings()


def _view(name: str, inputs: List[dict], outputs: List[dict]) -> dict:
    return {"type": "function", "name": name, "stateMutability": "view", "inputs": inputs, "outputs": outputs}


_ADDRESS_IN = [{"name": "user", "type": "address"}]
_UINT_OUT = [{"name": "", "type": "uint256"}]

DONATION_POOL_ABI = [
    _view("lastClaim", _ADDRESS_IN, _UINT_OUT),
    _view("totalDonated", _ADDRESS_IN, _UINT_OUT),
    _view("faucetAmount", [], _UINT_OUT),
    _view("getAvailableBalance", [], _UINT_OUT),
    # currentBalance, totalDonations, totalClaimed, totalUsers, availableClaims
    _view("getPoolStats", [], [{"name": "", "type": "uint256"} for _ in range(5)]),
    {
        "type": "function",
        "name": "requestFaucet",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "donate",
        "stateMutability": "payable",
        "inputs": [{"name": "message", "type": "string"}],
        "outputs": [],
    },
    {
        "type": "event",
        "name": "DonationReceived",
        "anonymous": False,
        "inputs": [
            {"name": "donor", "type": "address", "indexed": True},
            {"name": "amount", "type": "uint256", "indexed": False},
            {"name": "message", "type": "string", "indexed": False},
        ],
    },
]

# What a wallet needs to call requestFaucet on the pool
FAUCET_CALL_ABI = [entry for entry in DONATION_POOL_ABI if entry["name"] == "requestFaucet"]


class EVMChainAdapter(BaseChainAdapter):
    """Donation pool reads for EVM testnets"""

    chain_type = ChainType.EVM

    def __init__(self, config: ChainConfig, w3: Optional[AsyncWeb3] = None):
        super().__init__(config)
        self.w3 = w3 or AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                config.rpc_url,
                request_kwargs={"timeout": ClientTimeout(total=settings.HTTP_EVM_RPC_TIMEOUT)}
            )
        )
        self._contract = None

    @property
    def contract(self):
        if not self.config.pool_address:
            raise ChainNotConfiguredError(self.chain_id, "pool_address")
        if self._contract is None:
            self._contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(self.config.pool_address),
                abi=DONATION_POOL_ABI
            )
        return self._contract

    async def get_last_claim_time(self, address: str) -> Optional[datetime]:
        seconds = await self.contract.functions.lastClaim(Web3.to_checksum_address(address)).call()
        if not seconds:
            return None
        return datetime.fromtimestamp(int(seconds), tz=timezone.utc)

    async def get_total_donated(self, address: str) -> Decimal:
        wei = await self.contract.functions.totalDonated(Web3.to_checksum_address(address)).call()
        return self.to_human(wei)

    async def get_available_balance(self) -> Decimal:
        wei = await self.contract.functions.getAvailableBalance().call()
        return self.to_human(wei)

    async def get_pool_statistics(self) -> PoolStatistics:
        pool_stats, faucet_amount = await asyncio.gather(
            self.contract.functions.getPoolStats().call(),
            self.contract.functions.faucetAmount().call(),
        )
        current_balance, total_donations, total_claimed, total_users, available_claims = pool_stats

        stats = PoolStatistics(
            currentBalance=tiers.format_amount(self.to_human(current_balance)),
            totalDonations=tiers.format_amount(self.to_human(total_donations)),
            totalClaimed=tiers.format_amount(self.to_human(total_claimed)),
            totalUsers=int(total_users),
            availableClaims=int(available_claims),
            faucetAmount=tiers.format_amount(self.to_human(faucet_amount)),
            symbol=self.config.symbol
        )
        self.logger.debug(
            "Pool statistics read",
            extra={"chain": self.chain_id, "current_balance": stats.currentBalance, "available_claims": stats.availableClaims}
        )
        return stats

    async def _block_time(self, block_number: int) -> datetime:
        block = await self.w3.eth.get_block(block_number)
        return datetime.fromtimestamp(int(block["timestamp"]), tz=timezone.utc)

    def _to_record(self, event: Any, timestamp: datetime) -> DonationRecord:
        tx_hash = event["transactionHash"]
        return DonationRecord(
            chain=self.chain_id,
            donor=event["args"]["donor"],
            amount=tiers.format_amount(self.to_human(event["args"]["amount"])),
            message=event["args"]["message"],
            txHash=HexBytes(tx_hash).to_0x_hex() if tx_hash is not None else None,
            blockNumber=event["blockNumber"],
            timestamp=timestamp,
            symbol=self.config.symbol
        )

    async def get_recent_donations(self, limit: int = 10) -> List[DonationRecord]:
        contract = self.contract
        latest = await self.w3.eth.block_number
        from_block = max(0, latest - settings.EVM_LOG_LOOKBACK_BLOCKS)

        events = await contract.events.DonationReceived().get_logs(from_block=from_block, to_block=latest)
        events = list(events)[-limit:] if limit > 0 else []

        timestamps = await asyncio.gather(*(self._block_time(event["blockNumber"]) for event in events))
        records = [self._to_record(event, ts) for event, ts in zip(events, timestamps)]
        records.reverse()
        return records

    async def verify_donation(self, tx_hash: str) -> Optional[DonationRecord]:
        contract = self.contract
        receipt = await self.w3.eth.get_transaction_receipt(tx_hash)

        if receipt is None or receipt["status"] != 1:
            self.logger.warning("Donation transaction failed or missing", extra={"chain": self.chain_id, "tx_hash": tx_hash})
            return None

        target = receipt.get("to")
        if not target or target.lower() != self.config.pool_address.lower():
            self.logger.warning(
                "Donation transaction does not target the pool",
                extra={"chain": self.chain_id, "tx_hash": tx_hash, "to": target}
            )
            return None

        events = contract.events.DonationReceived().process_receipt(receipt, errors=DISCARD)
        if not events:
            return None

        timestamp = await self._block_time(receipt["blockNumber"])
        return self._to_record(events[0], timestamp)

    async def check_connection(self) -> ConnectionStatus:
        block_number = await self.w3.eth.block_number
        return ConnectionStatus(status="healthy", blockNumber=int(block_number), lastChecked=utcnow())

    async def close(self) -> None:
        provider = self.w3.provider
        disconnect = getattr(provider, "disconnect", None)
        if disconnect is not None:
            await disconnect()
