"""WebSocket connection manager for live faucet and donation events."""

from typing import Any, Dict, List
from fastapi import WebSocket

from faucetswap.core.clock import utcnow
from faucetswap.core.logger.logger import logger


class ConnectionManager:
    """Tracks connected clients and fans events out to all of them."""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

        await websocket.send_json({"type": "welcome", "timestamp": utcnow().isoformat()})
        logger.info("WebSocket client connected", extra={"clients": len(self.active_connections)})

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info("WebSocket client disconnected", extra={"clients": len(self.active_connections)})

    async def broadcast(self, data: Dict[str, Any]):
        """
        Send a JSON payload to every client.
        Clients whose send fails are dropped.
        """
        disconnected = []
        for connection in list(self.active_connections):
            try:
                await connection.send_json(data)
            except Exception as e:
                logger.warning("WebSocket send failed, dropping client", extra={"error": str(e)})
                disconnected.append(connection)

        for connection in disconnected:
            self.disconnect(connection)

    async def publish(self, event_type: str, payload: Dict[str, Any]):
        await self.broadcast({"type": event_type, **payload, "timestamp": utcnow().isoformat()})

    def get_connection_count(self) -> int:
        return len(self.active_connections)
