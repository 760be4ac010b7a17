"""
Faucet request repository using SQLAlchemy ORM
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from faucetswap.core.clock import as_utc
from faucetswap.core.service.faucet.models import FaucetRequestRecord, FaucetSource, FaucetStatus
from faucetswap.infra.models import FaucetRequestModel, UserModel
from faucetswap.core.logger.logger import get_logger

logger = get_logger(__name__)


class FaucetRequestRepository:
    """Repository for the append-only faucet request history"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _model_to_entity(self, model: FaucetRequestModel) -> FaucetRequestRecord:
        return FaucetRequestRecord(
            id=model.id,
            user_id=model.user_id,
            chain=model.chain,
            token=model.token,
            amount=model.amount,
            source=FaucetSource(model.source),
            status=FaucetStatus(model.status),
            requested_at=as_utc(model.requested_at),
            completed_at=as_utc(model.completed_at),
            cooldown_until=as_utc(model.cooldown_until),
            tx_hash=model.tx_hash
        )

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    async def get_active_request(self, user_id: UUID, chain: str, now: datetime) -> Optional[FaucetRequestRecord]:
        """Latest request whose cooldown has not elapsed yet"""
        stmt = (
            select(FaucetRequestModel)
            .where(
                FaucetRequestModel.user_id == user_id,
                FaucetRequestModel.chain == chain,
                FaucetRequestModel.cooldown_until > now
            )
            .order_by(FaucetRequestModel.requested_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    async def get_latest_per_chain(self, user_id: UUID) -> Dict[str, FaucetRequestRecord]:
        """Latest request of the user on every chain they ever used"""
        stmt = (
            select(FaucetRequestModel)
            .where(FaucetRequestModel.user_id == user_id)
            .order_by(FaucetRequestModel.requested_at.desc())
        )
        result = await self.session.execute(stmt)

        latest: Dict[str, FaucetRequestRecord] = {}
        for model in result.scalars():
            if model.chain not in latest:
                latest[model.chain] = self._model_to_entity(model)
        return latest

    async def get_by_id(self, request_id: UUID) -> Optional[FaucetRequestRecord]:
        model = await self.session.get(FaucetRequestModel, request_id)
        return self._model_to_entity(model) if model else None

    async def create_request(
        self,
        user_id: UUID,
        chain: str,
        token: str,
        amount: str,
        source: FaucetSource,
        status: FaucetStatus,
        requested_at: datetime,
        cooldown_until: datetime
    ) -> FaucetRequestRecord:
        """
        Insert a faucet request and commit the surrounding transaction

        Args:
            user_id: Requesting user
            chain: Chain identifier
            token: Token symbol
            amount: Amount in human units (as string)
            source: Official faucet or community pool
            status: Initial status
            requested_at: Request timestamp
            cooldown_until: End of the cooldown window

        Returns:
            The stored request
        """
        try:
            model = FaucetRequestModel(
                user_id=user_id,
                chain=chain,
                token=token,
                amount=amount,
                source=source.value,
                status=status.value,
                requested_at=requested_at,
                cooldown_until=cooldown_until
            )
            self.session.add(model)
            await self.session.commit()
            await self.session.refresh(model)

        except Exception as e:
            await self.session.rollback()
            logger.error(
                "Failed to store faucet request",
                extra={"user_id": str(user_id), "chain": chain, "error": str(e)}
            )
            raise

        logger.info(
            "Faucet request stored",
            extra={
                "request_id": str(model.id),
                "user_id": str(user_id),
                "chain": chain,
                "source": source.value,
                "status": status.value
            }
        )
        return self._model_to_entity(model)

    async def update_status(
        self,
        request_id: UUID,
        status: FaucetStatus,
        tx_hash: Optional[str],
        completed_at: Optional[datetime]
    ) -> Optional[FaucetRequestRecord]:
        try:
            model = await self.session.get(FaucetRequestModel, request_id)
            if model is None:
                return None

            model.status = status.value
            if tx_hash:
                model.tx_hash = tx_hash
            if completed_at is not None:
                model.completed_at = completed_at

            await self.session.commit()
            await self.session.refresh(model)
            return self._model_to_entity(model)

        except Exception as e:
            await self.session.rollback()
            logger.error(
                "Failed to update faucet request status",
                extra={"request_id": str(request_id), "status": status.value, "error": str(e)}
            )
            raise

    async def get_history(self, user_id: UUID, limit: int = 20) -> List[FaucetRequestRecord]:
        stmt = (
            select(FaucetRequestModel)
            .where(FaucetRequestModel.user_id == user_id)
            .order_by(FaucetRequestModel.requested_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars()]

    async def list_requests(
        self,
        page: int = 1,
        limit: int = 20,
        chain: Optional[str] = None,
        status: Optional[FaucetStatus] = None
    ) -> Tuple[List[Tuple[FaucetRequestRecord, str]], int]:
        """Paged listing joined with the requester's wallet address, newest first"""
        filters = []
        if chain:
            filters.append(FaucetRequestModel.chain == chain)
        if status:
            filters.append(FaucetRequestModel.status == status.value)

        count_stmt = select(func.count()).select_from(FaucetRequestModel).where(*filters)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(FaucetRequestModel, UserModel.wallet_address)
            .join(UserModel, UserModel.id == FaucetRequestModel.user_id)
            .where(*filters)
            .order_by(FaucetRequestModel.requested_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        rows = [(self._model_to_entity(model), wallet_address) for model, wallet_address in result.all()]
        return rows, total

    async def count_by(self, column_name: str) -> Dict[str, int]:
        """Request counts grouped by chain, source or status"""
        column = getattr(FaucetRequestModel, column_name)
        stmt = select(column, func.count()).group_by(column)
        result = await self.session.execute(stmt)
        return {key: count for key, count in result.all()}

    async def count_unique_users(self) -> int:
        stmt = select(func.count(func.distinct(FaucetRequestModel.user_id)))
        return (await self.session.execute(stmt)).scalar_one()
