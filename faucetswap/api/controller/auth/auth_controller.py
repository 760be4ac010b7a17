"""
Authentication controller: nonce challenge, wallet login and profile.
"""

from fastapi import APIRouter, Depends

from faucetswap.api.controller.auth.dto.input_dto import LoginRequestDto
from faucetswap.api.controller.auth.dto.output_dto import LoginResponseDto, NonceResponseDto, UserDto
from faucetswap.core.dependencies import get_auth_service, get_current_user
from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.auth.auth_service import AuthService
from faucetswap.core.service.auth.models.user import User

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/nonce", response_model=NonceResponseDto)
async def get_nonce(auth_service: AuthService = Depends(get_auth_service)):
    """
    Issue a single-use nonce and the exact message the wallet must sign.
    """
    challenge = await auth_service.create_nonce()
    return NonceResponseDto(nonce=challenge.nonce, message=challenge.message, expiresAt=challenge.expires_at)


@router.post("/login", response_model=LoginResponseDto)
async def login(request: LoginRequestDto, auth_service: AuthService = Depends(get_auth_service)):
    """
    Verify the signed nonce message and return a JWT access token.

    Any failure (malformed input, bad signature, unknown or reused nonce)
    returns 401 "Authentication failed".
    """
    result = await auth_service.login(request.address, request.signature, request.message)
    return LoginResponseDto(
        access_token=result.token.access_token,
        token_type=result.token.token_type,
        expires_in=result.token.expires_in,
        user=UserDto.from_user(result.user),
        isNewUser=result.is_new_user
    )


@router.get("/profile", response_model=UserDto)
async def get_profile(user: User = Depends(get_current_user)):
    return UserDto.from_user(user)
