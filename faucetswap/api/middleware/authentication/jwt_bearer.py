from typing import Optional

from fastapi import Request, HTTPException, status
from fastapi.security import HTTPBearer

from faucetswap.core.logger.logger import logger
from faucetswap.core.service.auth.jwt_service import JWTService
from faucetswap.core.service.auth.models.token import TokenPayload


class CustomHTTPBearer(HTTPBearer):
    """Bearer scheme that returns the verified token payload"""

    def __init__(self, jwt_service: Optional[JWTService] = None, **kwargs):
        super().__init__(auto_error=False, **kwargs)
        self.jwt_service = jwt_service or JWTService()

    @staticmethod
    def _unauthorized(detail: str) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )

    async def __call__(self, request: Request) -> TokenPayload:
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            raise self._unauthorized("Not authenticated")

        try:
            scheme, credentials = auth_header.split()
        except ValueError:
            raise self._unauthorized("Invalid authorization header")

        if scheme.lower() != "bearer":
            raise self._unauthorized("Invalid authentication scheme")

        try:
            return self.jwt_service.verify_token(credentials)
        except HTTPException as e:
            logger.warning("Authentication error", extra={"detail": str(e.detail), "path": request.url.path})
            raise


jwt_bearer = CustomHTTPBearer()
