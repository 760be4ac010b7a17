import time
import traceback
from typing import Optional
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from faucetswap.core.logger.logger import logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its duration and an X-Request-ID correlation id"""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()

        correlation_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = correlation_id

        log_context = {
            "request_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        }

        response: Optional[Response] = None
        try:
            response = await call_next(request)

            log_context.update({
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2)
            })
            response.headers["X-Request-ID"] = correlation_id

            logger.info("Request handled", extra=log_context)
            return response

        except Exception as e:
            log_context.update({
                "error": str(e),
                "error_type": e.__class__.__name__,
                "stack_trace": traceback.format_exc(),
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2)
            })
            logger.error("Request failed", extra=log_context)
            raise
