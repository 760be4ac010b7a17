"""WebSocket router for live faucet and donation notifications."""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from faucetswap.core.logger.logger import logger

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    Push-only channel: clients receive faucet_request, faucet_status and
    donation events. Incoming messages are logged and ignored.
    """
    manager = websocket.app.state.ws_manager
    await manager.connect(websocket)

    try:
        while True:
            data = await websocket.receive_text()
            logger.debug("Received via WebSocket", extra={"payload": data[:200]})
    except WebSocketDisconnect:
        manager.disconnect(websocket)
    except Exception as e:
        logger.error("WebSocket error", extra={"error": str(e)})
        manager.disconnect(websocket)
