import redis.asyncio as redis
from functools import lru_cache
from faucetswap.infra.config.settings import settings
from faucetswap.core.logger.logger import logger


@lru_cache()
def get_redis_pool() -> redis.ConnectionPool:
    """Shared connection pool for the nonce store and health checks"""
    return redis.ConnectionPool.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        max_connections=settings.REDIS_MAX_CONNECTIONS
    )


def get_redis() -> redis.Redis:
    return redis.Redis(connection_pool=get_redis_pool())


async def ping_redis() -> bool:
    try:
        return bool(await get_redis().ping())
    except Exception as e:
        logger.error("Redis ping failed", extra={"error": str(e)})
        raise
