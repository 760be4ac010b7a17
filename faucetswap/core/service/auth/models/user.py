"""
User model for persistent database storage
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class Wallet(BaseModel):
    """Address linked to a user on one chain"""
    id: Optional[UUID] = None
    chain: str
    address: str
    created_at: Optional[datetime] = None


class User(BaseModel):
    """User database model"""
    model_config = ConfigDict(use_enum_values=True)

    id: UUID
    wallet_address: str  # lowercased login address
    email: Optional[str] = None
    wallets: List[Wallet] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def address_for_chain(self, chain: str) -> str:
        """Linked wallet for the chain, falling back to the login address"""
        for wallet in self.wallets:
            if wallet.chain == chain:
                return wallet.address
        return self.wallet_address
