from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, status

from faucetswap.api.controller.auth.dto.output_dto import HealthCheckResponseDto
from faucetswap.core.logger.logger import logger
from faucetswap.infra.config.redis import ping_redis
from faucetswap.infra.config.settings import settings
from faucetswap.infra.database import get_database_manager

router = APIRouter(tags=["Health"])


async def check_redis_health() -> Dict[str, str]:
    try:
        await ping_redis()
        return {"status": "healthy", "message": "Connected"}
    except Exception as e:
        return {"status": "unhealthy", "message": f"Connection failed: {str(e)}"}


async def check_database_health() -> Dict[str, str]:
    try:
        await get_database_manager().ping()
        return {"status": "healthy", "message": "Connected"}
    except Exception as e:
        logger.error("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "message": f"Connection failed: {str(e)}"}


async def check_chains_health(request: Request) -> Dict[str, Any]:
    results = await request.app.state.chain_manager.health_check()
    healthy = sum(1 for result in results.values() if result.healthy)
    return {
        "status": "healthy" if healthy == len(results) else "degraded",
        "message": f"{healthy}/{len(results)} chains reachable",
        "chains": {chain_id: result.model_dump(mode="json") for chain_id, result in results.items()}
    }


@router.get("/health", status_code=status.HTTP_200_OK, response_model=HealthCheckResponseDto)
async def health_check(request: Request):
    """
    Status of the database, Redis, chain RPCs and WebSocket clients.
    Always 200; a failing component marks the whole service degraded.
    """
    services = {
        "database": await check_database_health(),
        "redis": await check_redis_health(),
        "chains": await check_chains_health(request),
        "websocket": {
            "status": "healthy",
            "message": f"{request.app.state.ws_manager.get_connection_count()} clients connected"
        },
    }

    overall = "healthy" if all(s["status"] == "healthy" for s in services.values()) else "degraded"
    return HealthCheckResponseDto(
        status=overall,
        version=settings.APP_VERSION,
        services=services,
        timestamp=datetime.now(timezone.utc)
    )
