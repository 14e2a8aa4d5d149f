# cocktailbot/api/ws.py

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from cocktailbot.ws.manager import ws_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ws"])


@router.websocket("/ws/events")
async def ws_events(ws: WebSocket):
    """Dispense progress for the touchscreen.

    Server push only; anything the client sends is read and ignored so the
    connection stays alive.
    """
    await ws_manager.connect(ws)
    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        ws_manager.disconnect(ws)
    except Exception as e:
        logger.warning("[WS] receive loop ended: %r", e)
        ws_manager.disconnect(ws)
