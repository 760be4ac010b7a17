from typing import Any, Dict, Optional
from fastapi import status

from faucetswap.core.exceptions.handler import ServiceError, ServiceErrorCode


class UnsupportedChainError(ServiceError):
    def __init__(self, chain_id: str, status_code: int = status.HTTP_404_NOT_FOUND):
        super().__init__(
            code=ServiceErrorCode.UNSUPPORTED_CHAIN,
            message=f"Unsupported chain: {chain_id}",
            status_code=status_code,
            details={"chain": chain_id},
        )


class CooldownActiveError(ServiceError):
    def __init__(self, remaining_ms: int, remaining_hours: int, cooldown_until: Any):
        super().__init__(
            code=ServiceErrorCode.COOLDOWN_ACTIVE,
            message=f"Cooldown active. Try again in {remaining_hours} hours",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={
                "remainingTime": remaining_ms,
                "remainingHours": remaining_hours,
                "cooldownUntil": cooldown_until,
            },
        )


class NotFoundError(ServiceError):
    def __init__(self, code: str, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class BadRequestError(ServiceError):
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
        )


class UnauthorizedError(ServiceError):
    """Every login failure maps here with the same message."""
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            code=ServiceErrorCode.AUTHENTICATION_FAILED,
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class ForbiddenError(ServiceError):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            code=ServiceErrorCode.FORBIDDEN,
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
        )


class ConflictError(ServiceError):
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )
