"""
FastAPI dependency injection functions.
Sessions, repositories and services are built per request; the chain
registry and WebSocket manager live on app.state.
"""

from uuid import UUID

from fastapi import Depends, Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from faucetswap.api.middleware.authentication.jwt_bearer import jwt_bearer
from faucetswap.core.exceptions.base import ForbiddenError, UnauthorizedError
from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.auth.auth_service import AuthService
from faucetswap.core.service.auth.cache.nonce_store import NonceStore
from faucetswap.core.service.auth.models.token import TokenPayload
from faucetswap.core.service.auth.models.user import User
from faucetswap.core.service.badges.badge_service import BadgeService
from faucetswap.core.service.chains.manager import ChainManager
from faucetswap.core.service.faucet.faucet_service import FaucetService
from faucetswap.core.service.users.user_service import UserService
from faucetswap.core.service.websocket.manager import ConnectionManager
from faucetswap.infra.config.redis import get_redis
from faucetswap.infra.config.settings import settings
from faucetswap.infra.database import get_async_session
from faucetswap.infra.repository.donation_pool_repository import DonationPoolRepository
from faucetswap.infra.repository.faucet_config_repository import FaucetConfigRepository
from faucetswap.infra.repository.faucet_request_repository import FaucetRequestRepository
from faucetswap.infra.repository.user_repository import UserRepository

logger = get_logger(__name__)


async def get_redis_client() -> Redis:
    return get_redis()


def get_chain_manager(request: Request) -> ChainManager:
    return request.app.state.chain_manager


def get_ws_manager(request: Request) -> ConnectionManager:
    return request.app.state.ws_manager


async def get_user_repository(session: AsyncSession = Depends(get_async_session)) -> UserRepository:
    return UserRepository(session)


async def get_faucet_request_repository(session: AsyncSession = Depends(get_async_session)) -> FaucetRequestRepository:
    return FaucetRequestRepository(session)


async def get_faucet_config_repository(session: AsyncSession = Depends(get_async_session)) -> FaucetConfigRepository:
    return FaucetConfigRepository(session)


async def get_donation_pool_repository(session: AsyncSession = Depends(get_async_session)) -> DonationPoolRepository:
    return DonationPoolRepository(session)


async def get_auth_service(
    redis_client: Redis = Depends(get_redis_client),
    user_repository: UserRepository = Depends(get_user_repository)
) -> AuthService:
    return AuthService(NonceStore(redis_client), user_repository)


async def get_faucet_service(
    user_repository: UserRepository = Depends(get_user_repository),
    request_repository: FaucetRequestRepository = Depends(get_faucet_request_repository),
    config_repository: FaucetConfigRepository = Depends(get_faucet_config_repository),
    pool_repository: DonationPoolRepository = Depends(get_donation_pool_repository),
    chain_manager: ChainManager = Depends(get_chain_manager)
) -> FaucetService:
    return FaucetService(user_repository, request_repository, config_repository, pool_repository, chain_manager)


async def get_badge_service(chain_manager: ChainManager = Depends(get_chain_manager)) -> BadgeService:
    return BadgeService(chain_manager)


async def get_user_service(
    user_repository: UserRepository = Depends(get_user_repository),
    chain_manager: ChainManager = Depends(get_chain_manager)
) -> UserService:
    return UserService(user_repository, chain_manager)


async def get_current_user(
    payload: TokenPayload = Depends(jwt_bearer),
    user_repository: UserRepository = Depends(get_user_repository)
) -> User:
    """Resolve the bearer token to a stored user"""
    try:
        user_id = UUID(payload.sub)
    except ValueError:
        raise UnauthorizedError("Invalid token")

    user = await user_repository.get_by_id(user_id)
    if user is None:
        logger.warning("Token subject has no user", extra={"user_id": payload.sub})
        raise UnauthorizedError("Invalid token")
    return user


def is_admin(user: User) -> bool:
    return user.wallet_address.lower() in {address.lower() for address in settings.ADMIN_ADDRESSES}


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        logger.warning("Admin endpoint denied", extra={"user_id": str(user.id)})
        raise ForbiddenError("Admin access required")
    return user
