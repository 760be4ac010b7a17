"""
SQLAlchemy ORM models for database tables
"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func
import uuid

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    """SQLAlchemy ORM model for users table"""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    wallet_address = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow, server_default=func.now())

    wallets = relationship("WalletModel", back_populates="user", lazy="selectin", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_users_wallet_address', 'wallet_address', unique=True),
    )

    def __repr__(self):
        return f"<User(id='{self.id}', wallet_address='{self.wallet_address}')>"


class WalletModel(Base):
    """SQLAlchemy ORM model for wallets table (one linked address per user and chain)"""

    __tablename__ = "wallets"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    chain = Column(String(50), nullable=False)
    address = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    user = relationship("UserModel", back_populates="wallets")

    __table_args__ = (
        Index('idx_wallets_user_chain', 'user_id', 'chain', unique=True),
        Index('idx_wallets_address', 'address'),
    )

    def __repr__(self):
        return f"<Wallet(user_id='{self.user_id}', chain='{self.chain}', address='{self.address}')>"


class FaucetConfigModel(Base):
    """SQLAlchemy ORM model for faucet_configs table"""

    __tablename__ = "faucet_configs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    chain = Column(String(50), nullable=False, unique=True)
    name = Column(String(100), nullable=False)
    token_symbol = Column(String(20), nullable=False)
    rpc_url = Column(String(500), nullable=False)
    faucet_url = Column(String(500), nullable=True)
    cooldown_hours = Column(Integer, nullable=False, default=24)
    max_amount = Column(String(100), nullable=False)
    min_balance = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow, server_default=func.now())

    def __repr__(self):
        return f"<FaucetConfig(chain='{self.chain}', cooldown_hours={self.cooldown_hours})>"


class DonationPoolModel(Base):
    """SQLAlchemy ORM model for donation_pools table (cache of on-chain pool state)"""

    __tablename__ = "donation_pools"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    chain = Column(String(50), nullable=False, unique=True)
    token = Column(String(20), nullable=False)
    total_amount = Column(String(100), nullable=False, default="0")
    available = Column(String(100), nullable=False, default="0")
    distributed = Column(String(100), nullable=False, default="0")
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow, server_default=func.now())

    def __repr__(self):
        return f"<DonationPool(chain='{self.chain}', total='{self.total_amount}', available='{self.available}')>"


class RecordedDonationModel(Base):
    """SQLAlchemy ORM model for recorded_donations table (donation txs already counted in a pool)"""

    __tablename__ = "recorded_donations"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    chain = Column(String(50), nullable=False)
    tx_hash = Column(String(255), nullable=False)
    donor = Column(String(255), nullable=False)
    amount = Column(String(100), nullable=False)
    recorded_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    __table_args__ = (
        Index('idx_recorded_donations_chain_tx', 'chain', 'tx_hash', unique=True),
    )

    def __repr__(self):
        return f"<RecordedDonation(chain='{self.chain}', tx_hash='{self.tx_hash}')>"


class FaucetRequestModel(Base):
    """SQLAlchemy ORM model for faucet_requests table"""

    __tablename__ = "faucet_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    chain = Column(String(50), nullable=False)
    token = Column(String(20), nullable=False)
    amount = Column(String(100), nullable=False)
    source = Column(String(30), nullable=False)
    status = Column(String(20), nullable=False)
    tx_hash = Column(String(255), nullable=True)
    requested_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cooldown_until = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_faucet_requests_user_chain', 'user_id', 'chain'),
        Index('idx_faucet_requests_user_chain_requested', 'user_id', 'chain', 'requested_at'),
        Index('idx_faucet_requests_status', 'status'),
        Index('idx_faucet_requests_requested', 'requested_at'),
    )

    def __repr__(self):
        return f"<FaucetRequest(user_id='{self.user_id}', chain='{self.chain}', status='{self.status}')>"
