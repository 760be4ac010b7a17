"""
Shared fixtures: in-memory SQLite database, fake Redis, scripted chain adapters
and an HTTP client bound to the application.
"""

from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator, List, Optional

import httpx
import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from faucetswap.app import create_app
from faucetswap.core.clock import utcnow
from faucetswap.core.dependencies import get_redis_client
from faucetswap.core.service.chains.base import BaseChainAdapter, ChainRPCError
from faucetswap.core.service.chains.manager import ChainManager
from faucetswap.core.service.chains.models import ConnectionStatus, DonationRecord, PoolStatistics
from faucetswap.core.service.faucet.models import FaucetConfig
from faucetswap.infra.config.chains import ChainConfig, ChainType
from faucetswap.infra.database import get_async_session
from faucetswap.infra.models import Base
from faucetswap.infra.repository.donation_pool_repository import DonationPoolRepository
from faucetswap.infra.repository.faucet_config_repository import FaucetConfigRepository
from faucetswap.infra.repository.faucet_request_repository import FaucetRequestRepository
from faucetswap.infra.repository.user_repository import UserRepository

POOL_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


class FakeRedis:
    """The handful of redis.asyncio calls the app makes, backed by a dict"""

    def __init__(self):
        self.store = {}

    async def setex(self, key, ttl, value):
        self.store[key] = value
        return True

    async def get(self, key):
        return self.store.get(key)

    async def getdel(self, key):
        return self.store.pop(key, None)

    async def ping(self):
        return True


class FakeChainAdapter(BaseChainAdapter):
    """
    Adapter with scripted on-chain answers.
    Operations listed in `failing` raise ChainRPCError.
    """

    def __init__(
        self,
        config: ChainConfig,
        last_claims: Optional[dict] = None,
        donated: Optional[dict] = None,
        donations: Optional[List[DonationRecord]] = None,
        statistics: Optional[PoolStatistics] = None,
        block_number: int = 100,
        failing: tuple = ()
    ):
        super().__init__(config)
        self.last_claims = last_claims or {}
        self.donated = donated or {}
        self.donations = donations or []
        self.statistics = statistics or PoolStatistics(currentBalance="1", faucetAmount="0.1", symbol=config.symbol)
        self.block_number = block_number
        self.failing = set(failing)
        self.verified = {}
        self.closed = False

    def _maybe_fail(self, operation: str):
        if operation in self.failing or "*" in self.failing:
            raise ChainRPCError(self.chain_id, operation, "connection refused")

    async def get_last_claim_time(self, address: str) -> Optional[datetime]:
        self._maybe_fail("get_last_claim_time")
        return self.last_claims.get(address.lower())

    async def get_total_donated(self, address: str) -> Decimal:
        self._maybe_fail("get_total_donated")
        return Decimal(str(self.donated.get(address.lower(), "0")))

    async def get_pool_statistics(self) -> PoolStatistics:
        self._maybe_fail("get_pool_statistics")
        return self.statistics

    async def get_recent_donations(self, limit: int = 10) -> List[DonationRecord]:
        self._maybe_fail("get_recent_donations")
        ordered = sorted(self.donations, key=lambda record: record.timestamp, reverse=True)
        return ordered[:limit]

    async def get_available_balance(self) -> Decimal:
        self._maybe_fail("get_available_balance")
        return Decimal(self.statistics.currentBalance)

    async def check_connection(self) -> ConnectionStatus:
        self._maybe_fail("check_connection")
        return ConnectionStatus(status="healthy", blockNumber=self.block_number, lastChecked=utcnow())

    async def verify_donation(self, tx_hash: str) -> Optional[DonationRecord]:
        self._maybe_fail("verify_donation")
        return self.verified.get(tx_hash)

    async def close(self) -> None:
        self.closed = True


def make_chain_config(chain_id: str = "ethereum", chain_type: ChainType = ChainType.EVM, **overrides) -> ChainConfig:
    values = dict(
        chain_id=chain_id,
        chain_type=chain_type,
        name=chain_id.title(),
        symbol="SUI" if chain_type == ChainType.SUI else "ETH",
        decimals=9 if chain_type == ChainType.SUI else 18,
        rpc_url=f"https://rpc.{chain_id}.test",
        faucet_url=f"https://faucet.{chain_id}.test",
        pool_address=POOL_ADDRESS,
        package_id="0xabc" if chain_type == ChainType.SUI else None,
        cooldown_hours=24,
        max_amount="0.1",
    )
    values.update(overrides)
    return ChainConfig(**values)


@pytest.fixture
def chain_config_factory():
    return make_chain_config


@pytest.fixture
def fake_adapter_factory():
    def _factory(chain_id: str = "ethereum", chain_type: ChainType = ChainType.EVM, config_overrides=None, **kwargs):
        return FakeChainAdapter(make_chain_config(chain_id, chain_type, **(config_overrides or {})), **kwargs)
    return _factory


@pytest.fixture
def chain_manager(fake_adapter_factory) -> ChainManager:
    """ethereum (12h cooldown), polygon and sui, all healthy"""
    return ChainManager([
        fake_adapter_factory("ethereum", config_overrides={"cooldown_hours": 12}),
        fake_adapter_factory("polygon"),
        fake_adapter_factory("sui", ChainType.SUI),
    ])


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded_session(db_session, chain_manager) -> AsyncSession:
    """Faucet configuration and empty pools for every chain of the chain_manager fixture"""
    config_repository = FaucetConfigRepository(db_session)
    pool_repository = DonationPoolRepository(db_session)
    for config in chain_manager.get_all_chain_configs().values():
        await config_repository.upsert(FaucetConfig.from_chain_config(config))
        await pool_repository.ensure_pool(config.chain_id, config.symbol)
    return db_session


@pytest.fixture
def repositories(seeded_session):
    return {
        "users": UserRepository(seeded_session),
        "requests": FaucetRequestRepository(seeded_session),
        "configs": FaucetConfigRepository(seeded_session),
        "pools": DonationPoolRepository(seeded_session),
    }


@pytest.fixture
def app(chain_manager, seeded_session, fake_redis):
    """Application wired to the test database, fake Redis and fake chains; lifespan does not run"""
    application = create_app(chain_manager=chain_manager)

    async def _session():
        yield seeded_session

    async def _redis():
        return fake_redis

    application.dependency_overrides[get_async_session] = _session
    application.dependency_overrides[get_redis_client] = _redis
    return application


@pytest.fixture
async def api_client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def login(api_client):
    """Sign in with a wallet; returns (Authorization headers, login response body)"""
    async def _login(account=None):
        account = account or Account.create()
        nonce = (await api_client.get("/api/v1/auth/nonce")).json()
        signature = Account.sign_message(encode_defunct(text=nonce["message"]), private_key=account.key).signature.hex()
        response = await api_client.post(
            "/api/v1/auth/login",
            json={"address": account.address, "signature": signature, "message": nonce["message"]}
        )
        assert response.status_code == 200, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body
    return _login
