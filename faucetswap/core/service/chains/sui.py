"""
Sui chain adapter: reads the pool object and its Move events over the fullnode JSON-RPC API.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from faucetswap.core.clock import utcnow
from faucetswap.core.http_client import create_client
from faucetswap.core.service.chains import tiers
from faucetswap.core.service.chains.base import BaseChainAdapter, ChainNotConfiguredError, ChainRPCError
from faucetswap.core.service.chains.models import ConnectionStatus, DonationRecord, PoolStatistics
from faucetswap.infra.config.chains import ChainConfig, ChainType
from faucetswap.infra.config.settings import get_settings

settings = get_settings()

POOL_MODULE = "faucet_pool"
DONATION_EVENT = "DonationReceived"
CLAIM_EVENT = "FaucetClaimed"


def _as_int(value: Any) -> int:
    """Move u64 values arrive as strings; Balance<T> sometimes as {"value": ...}"""
    if isinstance(value, dict):
        value = value.get("value", 0)
    return int(value or 0)


def _from_ms(timestamp_ms: Any) -> datetime:
    return datetime.fromtimestamp(int(timestamp_ms) / 1000, tz=timezone.utc)


class SuiChainAdapter(BaseChainAdapter):
    """Donation pool reads for Sui"""

    chain_type = ChainType.SUI

    def __init__(self, config: ChainConfig, client: Optional[httpx.AsyncClient] = None):
        super().__init__(config)
        self.client = client or create_client("sui_rpc")
        self._request_id = 0

    @property
    def package_id(self) -> str:
        if not self.config.package_id:
            raise ChainNotConfiguredError(self.chain_id, "package_id")
        return self.config.package_id

    @property
    def pool_object_id(self) -> str:
        if not self.config.pool_address:
            raise ChainNotConfiguredError(self.chain_id, "pool_address")
        return self.config.pool_address

    def _event_type(self, name: str) -> str:
        return f"{self.package_id}::{POOL_MODULE}::{name}"

    async def _rpc(self, method: str, params: List[Any]) -> Any:
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params}

        response = await self.client.post(self.config.rpc_url, json=payload)
        response.raise_for_status()
        body = response.json()

        if body.get("error"):
            raise ChainRPCError(self.chain_id, method, body["error"].get("message", "unknown error"))
        return body.get("result")

    async def _iter_events(self, query: Dict[str, Any], page_limit: Optional[int] = None) -> AsyncIterator[dict]:
        """
        Events matching the query, newest first.
        Raises ChainRPCError when more than SUI_MAX_EVENT_PAGES pages would be needed.
        """
        cursor = None
        limit = page_limit or settings.SUI_EVENT_PAGE_LIMIT

        for _ in range(settings.SUI_MAX_EVENT_PAGES):
            page = await self._rpc("suix_queryEvents", [query, cursor, limit, True]) or {}
            for event in page.get("data", []):
                yield event
            if not page.get("hasNextPage"):
                return
            cursor = page.get("nextCursor")

        raise ChainRPCError(
            self.chain_id,
            "suix_queryEvents",
            f"event history exceeds {settings.SUI_MAX_EVENT_PAGES} pages of {limit}"
        )

    async def _iter_own_events(self, event_name: str, address: str) -> AsyncIterator[dict]:
        """
        This package's `event_name` events sent by `address`.

        Fullnodes accept a single filter per query, so the scan is keyed on the
        sender (bounded by one user's activity) and the event type is matched here.
        """
        event_type = self._event_type(event_name)
        async for event in self._iter_events({"Sender": address}):
            if event.get("type") == event_type:
                yield event

    async def _get_pool_fields(self) -> Dict[str, Any]:
        result = await self._rpc("sui_getObject", [self.pool_object_id, {"showContent": True}])
        data = (result or {}).get("data")
        if not data:
            raise ChainRPCError(self.chain_id, "sui_getObject", f"pool object {self.pool_object_id} not found")
        return data.get("content", {}).get("fields", {})

    def _to_record(self, event: dict) -> DonationRecord:
        parsed = event.get("parsedJson", {})
        return DonationRecord(
            chain=self.chain_id,
            donor=parsed.get("donor") or event.get("sender"),
            amount=tiers.format_amount(self.to_human(_as_int(parsed.get("amount")))),
            message=parsed.get("message"),
            txHash=event.get("id", {}).get("txDigest"),
            timestamp=_from_ms(event.get("timestampMs", 0)),
            symbol=self.config.symbol
        )

    async def get_last_claim_time(self, address: str) -> Optional[datetime]:
        async for event in self._iter_own_events(CLAIM_EVENT, address):
            return _from_ms(event["timestampMs"])
        return None

    async def get_total_donated(self, address: str) -> Decimal:
        total_mist = 0
        async for event in self._iter_own_events(DONATION_EVENT, address):
            total_mist += _as_int(event.get("parsedJson", {}).get("amount"))
        return self.to_human(total_mist)

    async def get_available_balance(self) -> Decimal:
        fields = await self._get_pool_fields()
        return self.to_human(_as_int(fields.get("balance")))

    async def get_pool_statistics(self) -> PoolStatistics:
        fields = await self._get_pool_fields()
        balance = self.to_human(_as_int(fields.get("balance")))
        faucet_amount = self.to_human(_as_int(fields.get("faucet_amount")))

        return PoolStatistics(
            currentBalance=tiers.format_amount(balance),
            totalDonations=tiers.format_amount(self.to_human(_as_int(fields.get("total_donated")))),
            totalClaimed=tiers.format_amount(self.to_human(_as_int(fields.get("total_claimed")))),
            totalUsers=_as_int(fields.get("total_users")),
            availableClaims=int(balance / faucet_amount) if faucet_amount > 0 else 0,
            faucetAmount=tiers.format_amount(faucet_amount),
            symbol=self.config.symbol
        )

    async def get_recent_donations(self, limit: int = 10) -> List[DonationRecord]:
        if limit <= 0:
            return []
        query = {"MoveEventType": self._event_type(DONATION_EVENT)}
        page = await self._rpc("suix_queryEvents", [query, None, limit, True]) or {}
        return [self._to_record(event) for event in page.get("data", [])[:limit]]

    async def verify_donation(self, tx_hash: str) -> Optional[DonationRecord]:
        donation_type = self._event_type(DONATION_EVENT)
        result = await self._rpc(
            "sui_getTransactionBlock",
            [tx_hash, {"showEffects": True, "showEvents": True}]
        )
        if not result:
            return None

        status = result.get("effects", {}).get("status", {}).get("status")
        if status != "success":
            self.logger.warning("Donation transaction failed on chain", extra={"chain": self.chain_id, "tx_hash": tx_hash, "status": status})
            return None

        for event in result.get("events", []):
            if event.get("type") == donation_type:
                event.setdefault("timestampMs", result.get("timestampMs", 0))
                event.setdefault("id", {"txDigest": tx_hash})
                return self._to_record(event)
        return None

    async def check_connection(self) -> ConnectionStatus:
        checkpoint = await self._rpc("sui_getLatestCheckpointSequenceNumber", [])
        return ConnectionStatus(status="healthy", blockNumber=int(checkpoint), lastChecked=utcnow())

    async def close(self) -> None:
        await self.client.aclose()
