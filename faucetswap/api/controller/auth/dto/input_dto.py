"""
Input DTOs for authentication and user API endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LoginRequestDto(BaseModel):
    """
    Wallet login request.

    Fields are optional so that malformed logins reach the service and fail
    with the same 401 as a bad signature.
    """

    address: Optional[str] = Field(None, description="EVM wallet address")
    signature: Optional[str] = Field(None, description="personal_sign signature (hex)")
    message: Optional[str] = Field(None, description="Exact message returned by /auth/nonce")


class AddWalletRequestDto(BaseModel):
    """Link an address on another chain to the current user."""

    chain: str = Field(..., min_length=1, max_length=50, description="Chain identifier, e.g. sui")
    address: str = Field(..., min_length=1, max_length=100, description="Address on that chain")

    @field_validator('chain', 'address')
    @classmethod
    def strip_value(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Value cannot be empty')
        return v.strip()
