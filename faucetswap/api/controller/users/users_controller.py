"""User profile and wallet linking."""

from fastapi import APIRouter, Depends, status

from faucetswap.api.controller.auth.dto.input_dto import AddWalletRequestDto
from faucetswap.api.controller.auth.dto.output_dto import UserDto
from faucetswap.core.dependencies import get_current_user, get_user_service
from faucetswap.core.service.auth.models.user import User
from faucetswap.core.service.users.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserDto)
async def get_me(user: User = Depends(get_current_user)):
    return UserDto.from_user(user)


@router.post("/me/wallets", response_model=UserDto, status_code=status.HTTP_201_CREATED)
async def add_wallet(
    request: AddWalletRequestDto,
    user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Link an address on another chain; replaces any earlier link for that chain"""
    updated = await user_service.add_wallet(user, request.chain, request.address)
    return UserDto.from_user(updated)
