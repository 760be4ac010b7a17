"""
Faucet configuration repository using SQLAlchemy ORM
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from faucetswap.core.service.faucet.models import FaucetConfig
from faucetswap.infra.models import FaucetConfigModel
from faucetswap.core.logger.logger import get_logger

logger = get_logger(__name__)


class FaucetConfigRepository:
    """Read access to seeded per-chain faucet configuration"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _model_to_entity(self, model: FaucetConfigModel) -> FaucetConfig:
        return FaucetConfig(
            chain=model.chain,
            name=model.name,
            token_symbol=model.token_symbol,
            rpc_url=model.rpc_url,
            faucet_url=model.faucet_url,
            cooldown_hours=model.cooldown_hours,
            max_amount=model.max_amount,
            min_balance=model.min_balance
        )

    async def get_by_chain(self, chain: str) -> Optional[FaucetConfig]:
        stmt = select(FaucetConfigModel).where(FaucetConfigModel.chain == chain)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    async def list_all(self) -> List[FaucetConfig]:
        stmt = select(FaucetConfigModel).order_by(FaucetConfigModel.chain)
        result = await self.session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars()]

    async def upsert(self, config: FaucetConfig) -> FaucetConfig:
        """Insert or overwrite the row for config.chain (seeding only)"""
        try:
            stmt = select(FaucetConfigModel).where(FaucetConfigModel.chain == config.chain)
            model = (await self.session.execute(stmt)).scalar_one_or_none()
            if model is None:
                model = FaucetConfigModel(chain=config.chain)
                self.session.add(model)

            model.name = config.name
            model.token_symbol = config.token_symbol
            model.rpc_url = config.rpc_url
            model.faucet_url = config.faucet_url
            model.cooldown_hours = config.cooldown_hours
            model.max_amount = config.max_amount
            model.min_balance = config.min_balance

            await self.session.commit()

        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to upsert faucet config", extra={"chain": config.chain, "error": str(e)})
            raise

        logger.debug("Faucet config upserted", extra={"chain": config.chain})
        return self._model_to_entity(model)
