"""
User repository using SQLAlchemy ORM
"""

from typing import Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from faucetswap.core.clock import as_utc
from faucetswap.core.service.auth.models.user import User, Wallet
from faucetswap.infra.models import UserModel, WalletModel
from faucetswap.core.logger.logger import get_logger

logger = get_logger(__name__)


class UserRepository:
    """Repository for user database operations using SQLAlchemy ORM"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _model_to_entity(self, model: UserModel) -> User:
        """Convert SQLAlchemy model to Pydantic entity"""
        return User(
            id=model.id,
            wallet_address=model.wallet_address,
            email=model.email,
            wallets=[
                Wallet(
                    id=wallet.id,
                    chain=wallet.chain,
                    address=wallet.address,
                    created_at=as_utc(wallet.created_at),
                )
                for wallet in model.wallets
            ],
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at)
        )

    async def _find_by_wallet(self, wallet_address: str) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.wallet_address == wallet_address.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        user_model = await self.session.get(UserModel, user_id)
        return self._model_to_entity(user_model) if user_model else None

    async def lock_user(self, user_id: UUID) -> Optional[User]:
        """
        Load the user with a row lock held until the session's transaction ends.
        Serializes concurrent faucet requests of the same user. SQLite ignores FOR UPDATE.
        """
        stmt = select(UserModel).where(UserModel.id == user_id).with_for_update()
        result = await self.session.execute(stmt)
        user_model = result.scalar_one_or_none()
        return self._model_to_entity(user_model) if user_model else None

    async def get_user_by_wallet(self, wallet_address: str) -> Optional[User]:
        """
        Get user by login wallet address

        Args:
            wallet_address: Wallet address, any case

        Returns:
            User object or None
        """
        user_model = await self._find_by_wallet(wallet_address)
        return self._model_to_entity(user_model) if user_model else None

    async def get_or_create_user(self, wallet_address: str) -> User:
        """
        Get existing user or create new one

        Args:
            wallet_address: Wallet address, stored lowercased

        Returns:
            User object
        """
        user_model = await self._find_by_wallet(wallet_address)
        if user_model:
            return self._model_to_entity(user_model)

        try:
            new_user = UserModel(wallet_address=wallet_address.lower())
            self.session.add(new_user)
            await self.session.commit()
            await self.session.refresh(new_user, attribute_names=["wallets"])

            logger.info(
                "New user created in database",
                extra={
                    "wallet_address": wallet_address.lower(),
                    "user_id": str(new_user.id)
                }
            )
            return self._model_to_entity(new_user)

        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                f"User already exists (race condition): {e}",
                extra={"wallet_address": wallet_address.lower()}
            )
            user_model = await self._find_by_wallet(wallet_address)
            if user_model is None:
                raise
            return self._model_to_entity(user_model)

    async def link_wallet(self, user_id: UUID, chain: str, address: str) -> User:
        """Add or replace the user's wallet for a chain"""
        try:
            stmt = select(WalletModel).where(WalletModel.user_id == user_id, WalletModel.chain == chain)
            result = await self.session.execute(stmt)
            wallet = result.scalar_one_or_none()

            if wallet:
                wallet.address = address
            else:
                self.session.add(WalletModel(user_id=user_id, chain=chain, address=address))

            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(
                "Failed to link wallet",
                extra={"user_id": str(user_id), "chain": chain, "error": str(e)}
            )
            raise

        user_model = await self.session.get(UserModel, user_id, populate_existing=True)
        await self.session.refresh(user_model, attribute_names=["wallets"])
        return self._model_to_entity(user_model)
