"""
Faucet controller: claim requests, status updates, cooldowns and statistics.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from faucetswap.core.dependencies import (
    get_current_user,
    get_faucet_service,
    get_ws_manager,
    is_admin,
    require_admin,
)
from faucetswap.core.logger.logger import get_logger
from faucetswap.core.service.auth.models.user import User
from faucetswap.core.service.faucet.faucet_service import FaucetService
from faucetswap.core.service.faucet.models import (
    CooldownStatusResponse,
    DonationPool,
    FaucetRequestInput,
    FaucetRequestResponse,
    FaucetRequestView,
    FaucetStatistics,
    FaucetStatus,
    PaginatedRequests,
    StatusUpdateInput,
)
from faucetswap.core.service.websocket.manager import ConnectionManager

logger = get_logger(__name__)
router = APIRouter(
    prefix="/faucet",
    tags=["Faucet"],
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        429: {"description": "Cooldown active"}
    }
)


@router.post("/request", response_model=FaucetRequestResponse, status_code=status.HTTP_201_CREATED)
async def request_faucet(
    request: FaucetRequestInput,
    user: User = Depends(get_current_user),
    faucet_service: FaucetService = Depends(get_faucet_service),
    ws_manager: ConnectionManager = Depends(get_ws_manager)
):
    """
    Request tokens from the official faucet or the community pool.

    Official requests return a redirect URL; community pool requests return
    the contract call the wallet has to make. Rejected with 429 while the
    previous request's cooldown is running.
    """
    response = await faucet_service.request_faucet(user.id, request.chain, request.source)

    await ws_manager.publish("faucet_request", {
        "chain": response.chain,
        "address": user.wallet_address,
        "message": f"Faucet request on {response.chain} via {response.source.value}",
        "requestId": response.requestId,
    })
    return response


@router.patch("/request/{request_id}/status", response_model=FaucetRequestView)
async def update_request_status(
    request_id: UUID,
    update: StatusUpdateInput,
    user: User = Depends(get_current_user),
    faucet_service: FaucetService = Depends(get_faucet_service),
    ws_manager: ConnectionManager = Depends(get_ws_manager)
):
    """Mark a request as processing, succeeded or failed; used by the frontend after the contract call"""
    view = await faucet_service.update_request_status(
        request_id, update.status, user, tx_hash=update.txHash, is_admin=is_admin(user)
    )

    await ws_manager.publish("faucet_status", {
        "chain": view.chain,
        "address": user.wallet_address,
        "message": f"Faucet request {view.status.value.lower()} on {view.chain}",
        "requestId": view.id,
        "status": view.status.value,
        "txHash": view.txHash,
    })
    return view


@router.get("/cooldown/{address}", response_model=CooldownStatusResponse)
async def get_cooldown_status(
    address: str,
    chain: Optional[str] = Query(None),
    faucet_service: FaucetService = Depends(get_faucet_service)
):
    return await faucet_service.get_cooldown_status(address, chain)


@router.get("/cooldown/{address}/{chain}", response_model=CooldownStatusResponse)
async def get_chain_cooldown(address: str, chain: str, faucet_service: FaucetService = Depends(get_faucet_service)):
    return await faucet_service.get_cooldown_status(address, chain)


@router.get("/history/{address}", response_model=List[FaucetRequestView])
async def get_user_history(
    address: str,
    limit: int = Query(20, ge=1, le=100),
    faucet_service: FaucetService = Depends(get_faucet_service)
):
    return await faucet_service.get_user_history(address, limit)


@router.get("/statistics", response_model=FaucetStatistics)
async def get_statistics(faucet_service: FaucetService = Depends(get_faucet_service)):
    return await faucet_service.get_statistics()


@router.get("/pools", response_model=List[DonationPool])
async def get_donation_pools(faucet_service: FaucetService = Depends(get_faucet_service)):
    return await faucet_service.list_donation_pools()


@router.get("/admin/requests", response_model=PaginatedRequests)
async def list_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    chain: Optional[str] = Query(None),
    status: Optional[FaucetStatus] = Query(None),
    admin: User = Depends(require_admin),
    faucet_service: FaucetService = Depends(get_faucet_service)
):
    return await faucet_service.list_requests(page=page, limit=limit, chain=chain, status=status)
