# cocktailbot/ws/manager.py

from __future__ import annotations

import logging
from typing import Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Touchscreen / service-panel sockets that receive dispense events."""

    def __init__(self) -> None:
        self._active: Set[WebSocket] = set()

    @property
    def count(self) -> int:
        return len(self._active)

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self._active.add(ws)
        logger.info("[WS] client connected (%d open)", len(self._active))

    def disconnect(self, ws: WebSocket) -> None:
        self._active.discard(ws)

    async def broadcast_json(self, payload: dict) -> None:
        dead = []
        for ws in list(self._active):
            try:
                await ws.send_json(payload)
            except Exception as e:
                logger.debug("[WS] dropping client: %r", e)
                dead.append(ws)

        for ws in dead:
            self.disconnect(ws)


ws_manager = ConnectionManager()
