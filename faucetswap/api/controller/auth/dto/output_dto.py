"""
Output DTOs for authentication, user and health endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from faucetswap.core.service.auth.models.user import User


class NonceResponseDto(BaseModel):
    nonce: str = Field(..., description="Single-use hex nonce")
    message: str = Field(..., description="Message to be signed by wallet")
    expiresAt: datetime


class WalletDto(BaseModel):
    chain: str
    address: str
    createdAt: Optional[datetime] = None


class UserDto(BaseModel):
    """Public view of a user"""

    id: str
    address: str
    email: Optional[str] = None
    wallets: List[WalletDto] = []
    createdAt: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserDto":
        return cls(
            id=str(user.id),
            address=user.wallet_address,
            email=user.email,
            wallets=[WalletDto(chain=w.chain, address=w.address, createdAt=w.created_at) for w in user.wallets],
            createdAt=user.created_at
        )


class LoginResponseDto(BaseModel):
    """Token fields keep their OAuth2 names; everything else is camelCase"""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration time in seconds")
    user: UserDto
    isNewUser: bool = False


class HealthCheckResponseDto(BaseModel):
    status: str = Field(..., description="healthy or degraded")
    version: str
    services: Dict[str, Any]
    timestamp: datetime
