"""User profile and linked wallets."""

from faucetswap.core.exceptions.base import BadRequestError
from faucetswap.core.exceptions.handler import ServiceErrorCode
from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.auth.models.user import User
from faucetswap.core.service.auth.signature_verification import is_evm_address
from faucetswap.core.service.chains.manager import ChainManager
from faucetswap.infra.config.chains import ChainType
from faucetswap.infra.repository.user_repository import UserRepository

logger = get_logger(__name__)


def is_sui_address(address: str) -> bool:
    value = address[2:] if address.startswith("0x") else ""
    return 0 < len(value) <= 64 and all(c in "0123456789abcdefABCDEF" for c in value)


class UserService:
    def __init__(self, user_repository: UserRepository, chain_manager: ChainManager):
        self.user_repository = user_repository
        self.chain_manager = chain_manager

    async def add_wallet(self, user: User, chain: str, address: str) -> User:
        """Link an address on a supported chain; replaces the previous one for that chain"""
        chain_type = self.chain_manager.get_chain_types().get(chain)
        if chain_type is None:
            raise BadRequestError(ServiceErrorCode.UNSUPPORTED_CHAIN, f"Unsupported chain: {chain}", {"chain": chain})

        valid = is_sui_address(address) if chain_type == ChainType.SUI.value else is_evm_address(address)
        if not valid:
            raise BadRequestError(
                ServiceErrorCode.INVALID_ADDRESS,
                f"Invalid {chain_type} address",
                {"chain": chain, "address": address}
            )

        updated = await self.user_repository.link_wallet(user.id, chain, address.lower())
        logger.info("Wallet linked", extra={"user_id": str(user.id), "chain": chain})
        return updated
