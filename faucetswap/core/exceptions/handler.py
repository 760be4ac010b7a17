"""
Error envelope and exception handlers.

Every error leaves the API as
{"success": false, "error": {"code", "message", "timestamp", "details"?, "request_id"?}}.
"""

import traceback
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from faucetswap.core.clock import utcnow
from faucetswap.core.logger.logger import get_logger
from faucetswap.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()


class ServiceErrorCode:
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_ADDRESS = "INVALID_ADDRESS"

    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    INVALID_TOKEN = "INVALID_TOKEN"
    FORBIDDEN = "FORBIDDEN"

    UNSUPPORTED_CHAIN = "UNSUPPORTED_CHAIN"
    CHAIN_NOT_CONFIGURED = "CHAIN_NOT_CONFIGURED"
    CHAIN_ALREADY_REGISTERED = "CHAIN_ALREADY_REGISTERED"
    OPERATION_NOT_SUPPORTED = "OPERATION_NOT_SUPPORTED"

    USER_NOT_FOUND = "USER_NOT_FOUND"
    COOLDOWN_ACTIVE = "COOLDOWN_ACTIVE"
    REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    DONATION_NOT_VERIFIED = "DONATION_NOT_VERIFIED"
    DONATION_ALREADY_RECORDED = "DONATION_ALREADY_RECORDED"

    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Codes for plain HTTPExceptions raised by FastAPI/Starlette or the bearer dependency
_HTTP_STATUS_CODES = {
    401: ServiceErrorCode.INVALID_TOKEN,
    403: ServiceErrorCode.FORBIDDEN,
    404: ServiceErrorCode.NOT_FOUND,
    422: ServiceErrorCode.INVALID_INPUT,
}


class ServiceError(Exception):
    """Business-rule rejection; rendered by GlobalErrorHandler.service_error_handler."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


def error_envelope(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message, "timestamp": utcnow().isoformat()}
    if details:
        error["details"] = details
    if request_id:
        error["request_id"] = request_id
    return {"success": False, "error": error}


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": request.headers.get("X-Request-ID", "unknown"),
        "path": request.url.path,
        "method": request.method,
    }


def _respond(
    status_code: int,
    code: str,
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(error_envelope(code, message, details, request_id)),
        headers=headers
    )


class GlobalErrorHandler:
    """Exception handlers registered in create_app"""

    @staticmethod
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        context = _request_context(request)
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"Service error: {exc.code}",
            extra={
                **context,
                "error_code": exc.code,
                "error_message": exc.message,
                "status_code": exc.status_code,
                "details": exc.details,
            }
        )
        return _respond(exc.status_code, exc.code, exc.message, context["request_id"], exc.details)

    @staticmethod
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        context = _request_context(request)
        code = _HTTP_STATUS_CODES.get(exc.status_code, ServiceErrorCode.INTERNAL_ERROR)
        logger.warning(
            f"HTTP exception: {exc.status_code}",
            extra={**context, "status_code": exc.status_code, "detail": exc.detail}
        )
        return _respond(
            exc.status_code, code, str(exc.detail), context["request_id"],
            headers=getattr(exc, "headers", None)
        )

    @staticmethod
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        context = _request_context(request)
        validation_errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "input": error.get("input"),
            }
            for error in exc.errors()
        ]
        logger.warning(
            f"Validation error: {len(validation_errors)} errors",
            extra={**context, "validation_errors": validation_errors}
        )
        return _respond(
            422, ServiceErrorCode.INVALID_INPUT, "Validation failed", context["request_id"],
            {"validation_errors": validation_errors}
        )

    @staticmethod
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        context = _request_context(request)
        logger.error(
            f"Unexpected error: {type(exc).__name__}",
            extra={**context, "error_type": type(exc).__name__, "error": str(exc)},
            exc_info=True
        )

        if settings.DEBUG:
            message = f"Internal error: {exc}"
            details = {"traceback": traceback.format_exc()}
        else:
            message = "An unexpected error occurred. Please try again."
            details = None
        return _respond(500, ServiceErrorCode.INTERNAL_ERROR, message, context["request_id"], details)
