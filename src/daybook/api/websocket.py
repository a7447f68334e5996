"""WebSocket API endpoints for real-time updates."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from daybook.factory import get_connection_manager
from daybook.websocket.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def board_updates(
    websocket: WebSocket,
    manager: Annotated[ConnectionManager, Depends(get_connection_manager)],
) -> None:
    """Push an EventMessage to the client after every store mutation.

    Clients only listen; the single command understood is "ping", answered
    with "pong" as a keepalive.
    """
    await manager.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
            else:
                logger.warning(f"[WebSocket] Ignoring client message: {data!r}")
    except WebSocketDisconnect:
        logger.info("[WebSocket] Client disconnected normally")
    except Exception as e:
        logger.error(f"[WebSocket] Error: {e}", exc_info=True)
    finally:
        manager.disconnect(websocket)
