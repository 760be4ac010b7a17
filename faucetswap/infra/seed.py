"""
Seed faucet configuration and empty donation pools for every configured chain.

    python -m faucetswap.infra.seed
"""

import asyncio
from typing import Iterable, List

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import AsyncSession

from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.faucet.models import FaucetConfig
from faucetswap.infra.config.chains import ChainConfig
from faucetswap.infra.config.settings import settings
from faucetswap.infra.database import DatabaseManager
from faucetswap.infra.repository.donation_pool_repository import DonationPoolRepository
from faucetswap.infra.repository.faucet_config_repository import FaucetConfigRepository

logger = get_logger(__name__)


async def seed_chains(session: AsyncSession, chains: Iterable[ChainConfig]) -> List[FaucetConfig]:
    config_repository = FaucetConfigRepository(session)
    pool_repository = DonationPoolRepository(session)

    seeded = []
    for chain in chains:
        seeded.append(await config_repository.upsert(FaucetConfig.from_chain_config(chain)))
        await pool_repository.ensure_pool(chain.chain_id, chain.symbol)
    logger.info("Seeded faucet configuration", extra={"chains": [config.chain for config in seeded]})
    return seeded


async def main() -> None:
    database = DatabaseManager()
    try:
        await database.create_tables()
        async with database.get_session_factory()() as session:
            await seed_chains(session, [chain for chain in settings.CHAINS if chain.enabled])
    finally:
        await database.close()


if __name__ == "__main__":
    load_dotenv()
    asyncio.run(main())
