"""
Wallet-signature login models.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from faucetswap.core.service.auth.models.token import TokenResponse
from faucetswap.core.service.auth.models.user import User


class NonceChallenge(BaseModel):
    """Message the wallet must sign to log in"""
    nonce: str = Field(..., description="Hex nonce, single use")
    message: str = Field(..., description="Exact text to sign")
    expires_at: datetime


class LoginResult(BaseModel):
    token: TokenResponse
    user: User
    is_new_user: bool = False
