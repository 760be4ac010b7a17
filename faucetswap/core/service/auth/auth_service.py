import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from faucetswap.core.exceptions.base import UnauthorizedError
from faucetswap.core.logger.logger import logger
from faucetswap.core.service.auth.cache.nonce_store import NonceStore
from faucetswap.core.service.auth.jwt_service import JWTService
from faucetswap.core.service.auth.models.auth import LoginResult, NonceChallenge
from faucetswap.core.service.auth.signature_verification import SignatureVerificationService, is_evm_address
from faucetswap.infra.config.settings import settings
from faucetswap.infra.repository.user_repository import UserRepository

LOGIN_MESSAGE_TEMPLATE = "Please sign this message to authenticate with FaucetSwap.\nNonce: {nonce}"
NONCE_PATTERN = re.compile(r"Nonce: ([0-9a-fA-F]+)\s*$")


class AuthService:
    """Nonce issuance and wallet-signature login"""

    NONCE_EXPIRY_SECONDS = settings.NONCE_EXPIRY_SECONDS
    NONCE_BYTES = settings.NONCE_BYTES

    def __init__(
        self,
        nonce_store: NonceStore,
        user_repository: UserRepository,
        jwt_service: Optional[JWTService] = None,
        signature_service: Optional[SignatureVerificationService] = None
    ):
        self.store = nonce_store
        self.user_repository = user_repository
        self.jwt_service = jwt_service or JWTService()
        self.signature_service = signature_service or SignatureVerificationService()

    def _generate_nonce(self) -> str:
        """Generate a cryptographically secure nonce"""
        return secrets.token_hex(self.NONCE_BYTES)

    @staticmethod
    def extract_nonce(message: str) -> Optional[str]:
        match = NONCE_PATTERN.search(message or "")
        return match.group(1) if match else None

    async def create_nonce(self) -> NonceChallenge:
        nonce = self._generate_nonce()
        await self.store.save_nonce(nonce, self.NONCE_EXPIRY_SECONDS)

        logger.info("Issued login nonce", extra={"expires_in": self.NONCE_EXPIRY_SECONDS})
        return NonceChallenge(
            nonce=nonce,
            message=LOGIN_MESSAGE_TEMPLATE.format(nonce=nonce),
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=self.NONCE_EXPIRY_SECONDS)
        )

    async def login(self, address: Optional[str], signature: Optional[str], message: Optional[str]) -> LoginResult:
        """
        Verify the signed nonce message and return a bearer token.
        Every failure raises the same UnauthorizedError.
        """
        if not address or not signature or not message or not is_evm_address(address):
            logger.warning("Login rejected: malformed input", extra={"wallet_address": address})
            raise UnauthorizedError()

        is_valid, error = self.signature_service.verify_signature(address, signature, message)
        if not is_valid:
            logger.warning("Login rejected: bad signature", extra={"wallet_address": address, "reason": error})
            raise UnauthorizedError()

        nonce = self.extract_nonce(message)
        if nonce is None or not await self.store.consume_nonce(nonce):
            logger.warning("Login rejected: unknown or reused nonce", extra={"wallet_address": address})
            raise UnauthorizedError()

        existing = await self.user_repository.get_user_by_wallet(address)
        user = existing or await self.user_repository.get_or_create_user(address)
        token = self.jwt_service.create_access_token(user)

        logger.info(
            "User logged in",
            extra={"wallet_address": user.wallet_address, "user_id": str(user.id), "new_user": existing is None}
        )
        return LoginResult(token=token, user=user, is_new_user=existing is None)
