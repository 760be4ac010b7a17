import redis.asyncio as redis

from faucetswap.core.logger.logger import logger


class NonceStore:
    """Redis store for single-use login nonces"""

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client
        self.key_prefix = "auth:nonce:"

    def _get_key(self, nonce: str) -> str:
        return f"{self.key_prefix}{nonce.lower()}"

    async def save_nonce(self, nonce: str, ttl: int) -> None:
        """Save nonce with TTL in seconds"""
        try:
            await self.redis.setex(self._get_key(nonce), ttl, "1")
            logger.debug("Saved nonce", extra={"ttl": ttl})
        except Exception as e:
            logger.error("Error saving nonce", extra={"error": str(e)})
            raise

    async def consume_nonce(self, nonce: str) -> bool:
        """Atomically read and delete; True only the first time a live nonce is used"""
        try:
            value = await self.redis.getdel(self._get_key(nonce))
            return value is not None
        except Exception as e:
            logger.error("Error consuming nonce", extra={"error": str(e)})
            raise
