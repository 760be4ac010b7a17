from typing import Awaitable, Callable, TypeVar

from faucetswap.core.exceptions.handler import ServiceError
from faucetswap.core.logger.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def with_fallback(
    operation: Awaitable[T],
    default: Callable[[Exception], T],
    chain_id: str,
    operation_name: str
) -> T:
    """
    Await an adapter call and turn any failure into a degraded default.
    ServiceError subclasses are deliberate rejections and propagate unchanged.
    """
    try:
        return await operation
    except ServiceError:
        raise
    except Exception as e:
        logger.warning(
            f"Chain call failed, using degraded default: {chain_id}.{operation_name}",
            extra={
                "chain": chain_id,
                "operation": operation_name,
                "error_type": type(e).__name__,
                "error": str(e)
            }
        )
        return default(e)
