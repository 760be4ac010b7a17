"""
Donation pool repository using SQLAlchemy ORM
"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from faucetswap.core.clock import as_utc
from faucetswap.core.service.chains.models import DonationRecord
from faucetswap.core.service.faucet.models import DonationPool
from faucetswap.infra.models import DonationPoolModel, RecordedDonationModel
from faucetswap.core.logger.logger import get_logger

logger = get_logger(__name__)


class DonationPoolRepository:
    """Cached donation pool totals per chain"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _model_to_entity(self, model: DonationPoolModel) -> DonationPool:
        return DonationPool(
            chain=model.chain,
            token=model.token,
            totalAmount=model.total_amount,
            available=model.available,
            distributed=model.distributed,
            updatedAt=as_utc(model.updated_at)
        )

    async def _find(self, chain: str) -> Optional[DonationPoolModel]:
        stmt = select(DonationPoolModel).where(DonationPoolModel.chain == chain)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def get_by_chain(self, chain: str) -> Optional[DonationPool]:
        model = await self._find(chain)
        return self._model_to_entity(model) if model else None

    async def list_all(self) -> List[DonationPool]:
        stmt = select(DonationPoolModel).order_by(DonationPoolModel.chain)
        result = await self.session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars()]

    async def ensure_pool(self, chain: str, token: str) -> DonationPool:
        """Create an empty pool row for the chain if none exists (seeding)"""
        model = await self._find(chain)
        if model is None:
            try:
                model = DonationPoolModel(chain=chain, token=token, total_amount="0", available="0", distributed="0")
                self.session.add(model)
                await self.session.commit()
            except Exception as e:
                await self.session.rollback()
                logger.error("Failed to create donation pool", extra={"chain": chain, "error": str(e)})
                raise
        return self._model_to_entity(model)

    async def is_recorded(self, chain: str, tx_hash: str) -> bool:
        stmt = select(RecordedDonationModel.id).where(
            RecordedDonationModel.chain == chain,
            RecordedDonationModel.tx_hash == tx_hash
        )
        return (await self.session.execute(stmt)).first() is not None

    async def add_donation(self, chain: str, token: str, donation: DonationRecord, tx_hash: str) -> DonationPool:
        """
        Count a verified donation once: the (chain, tx_hash) row and the pool totals
        are committed together. A replayed hash raises IntegrityError.
        """
        amount = Decimal(donation.amount)
        try:
            self.session.add(RecordedDonationModel(
                chain=chain,
                tx_hash=tx_hash,
                donor=donation.donor,
                amount=donation.amount
            ))

            stmt = select(DonationPoolModel).where(DonationPoolModel.chain == chain).with_for_update()
            model = (await self.session.execute(stmt)).scalar_one_or_none()
            if model is None:
                model = DonationPoolModel(chain=chain, token=token, total_amount="0", available="0", distributed="0")
                self.session.add(model)

            model.total_amount = str(Decimal(model.total_amount or "0") + amount)
            model.available = str(Decimal(model.available or "0") + amount)

            await self.session.commit()

        except IntegrityError:
            await self.session.rollback()
            logger.warning("Donation already recorded", extra={"chain": chain, "tx_hash": tx_hash})
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error(
                "Failed to record donation in pool cache",
                extra={"chain": chain, "tx_hash": tx_hash, "amount": str(amount), "error": str(e)}
            )
            raise

        logger.info(
            "Donation pool updated",
            extra={"chain": chain, "tx_hash": tx_hash, "amount": str(amount), "total": model.total_amount}
        )
        return self._model_to_entity(model)
