"""WebSocket connection management."""

import logging

from fastapi import WebSocket

from daybook.api.models import EventMessage

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks board clients and fans store change messages out to them."""

    def __init__(self) -> None:
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"[ConnectionManager] Client connected (total: {len(self.active_connections)})")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(
                f"[ConnectionManager] Client disconnected (total: {len(self.active_connections)})"
            )

    async def broadcast(self, message: EventMessage) -> int:
        """Send a change message to every client, dropping the ones that fail.

        Args:
            message: Store action and affected entity id

        Returns:
            Number of clients the message reached
        """
        if not self.active_connections:
            return 0

        payload = message.model_dump_json()
        logger.debug(f"[ConnectionManager] {message.type} -> {len(self.active_connections)} clients")

        delivered = 0
        dead_connections = []
        for connection in list(self.active_connections):
            try:
                await connection.send_text(payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"[ConnectionManager] Dropping client after failed {message.type}: {e}")
                dead_connections.append(connection)

        for connection in dead_connections:
            self.disconnect(connection)
        return delivered
