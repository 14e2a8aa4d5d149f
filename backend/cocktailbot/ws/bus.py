# cocktailbot/ws/bus.py

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional

from cocktailbot.ws.manager import ws_manager


class WsEventBus:
    """Queue between the code producing dispense events and the sockets.

    publish() never awaits and is safe to call from any thread (the MQTT
    gateway's network loop included): the event is handed to the application
    loop with call_soon_threadsafe, and run() broadcasts it from there.
    Before set_loop() is called events are dropped.
    """

    def __init__(self) -> None:
        self._queue: Optional[asyncio.Queue] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def set_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._queue = asyncio.Queue()

    def publish(self, event_type: str, data: Dict[str, Any]) -> None:
        if self._loop is None or self._queue is None:
            return
        event = {"type": event_type, "ts": int(time.time()), "data": data}
        self._loop.call_soon_threadsafe(self._queue.put_nowait, event)

    async def run(self) -> None:
        while True:
            event = await self._queue.get()
            await ws_manager.broadcast_json(event)


ws_bus = WsEventBus()
