from datetime import datetime

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """JWT token payload structure"""
    sub: str = Field(..., description="User id")
    wallet_address: str = Field(..., description="User's login wallet address")
    exp: datetime = Field(..., description="Token expiration timestamp")
    iat: datetime = Field(..., description="Token issued at timestamp")
    jti: str = Field(..., description="Unique token identifier")


class TokenResponse(BaseModel):
    """Response model for token generation"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until the token expires
