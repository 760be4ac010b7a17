from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from faucetswap.infra.config.settings import settings
from faucetswap.infra.database import get_database_manager
from faucetswap.core.logger.logger import logger
from faucetswap.api.router import auth, badges, chains, faucet, health, users, websocket
from faucetswap.api.middleware.logging.request_logging import RequestLoggingMiddleware
from faucetswap.core.exceptions.handler import ServiceError, GlobalErrorHandler
from faucetswap.core.service.chains.manager import ChainManager, build_chain_manager
from faucetswap.core.service.websocket.manager import ConnectionManager


def create_app(chain_manager: ChainManager = None) -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="""
FaucetSwap API - multi-chain testnet faucet with a community donation pool.

## Services
- **Faucet**: per-chain claim requests with a cooldown window
- **Chains**: pool statistics, cooldowns and contributions read from chain
- **Badges**: NFT contribution tiers derived from donations
- **Auth**: wallet-signature login with JWT bearer tokens

## Authentication
Protected endpoints require a JWT Bearer token from `/api/v1/auth/login`.
        """,
        version=settings.APP_VERSION,
        docs_url="/",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
        max_age=600,  # 10 minutes
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(ServiceError, GlobalErrorHandler.service_error_handler)
    app.add_exception_handler(StarletteHTTPException, GlobalErrorHandler.http_exception_handler)
    app.add_exception_handler(RequestValidationError, GlobalErrorHandler.validation_error_handler)
    app.add_exception_handler(Exception, GlobalErrorHandler.general_exception_handler)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(chains.router, prefix="/api/v1")
    app.include_router(faucet.router, prefix="/api/v1")
    app.include_router(badges.router, prefix="/api/v1")
    app.include_router(websocket.router)  # /ws

    # Chain registry and WebSocket clients are process-wide
    app.state.chain_manager = chain_manager or build_chain_manager(settings)
    app.state.ws_manager = ConnectionManager()

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            "Starting FaucetSwap API",
            extra={
                "service": settings.APP_NAME,
                "version": settings.APP_VERSION,
                "chains": app.state.chain_manager.get_supported_chains()
            }
        )
        if settings.DB_CREATE_TABLES:
            await get_database_manager().create_tables()

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down FaucetSwap API", extra={"service": settings.APP_NAME, "version": settings.APP_VERSION})
        await app.state.chain_manager.close()
        await get_database_manager().close()

    return app
