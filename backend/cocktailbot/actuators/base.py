# cocktailbot/actuators/base.py

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActuationResult:
    ok: bool
    detail: str = ""


class ActuatorGateway(ABC):
    """Runs one pump for exactly duration_ms, then stops it.

    Subclasses implement `_run`. Calls for the same address are serialized so
    two requests never drive one physical pump at the same time; calls for
    different addresses may overlap freely.
    """

    name = "base"

    def __init__(self) -> None:
        self._locks: Dict[int, asyncio.Lock] = {}

    def _lock_for(self, address: int) -> asyncio.Lock:
        lock = self._locks.get(address)
        if lock is None:
            lock = self._locks[address] = asyncio.Lock()
        return lock

    async def activate(
        self,
        address: int,
        duration_ms: int,
        timeout_ms: Optional[int] = None,
    ) -> ActuationResult:
        """Run the pump on `address`.

        `timeout_ms` bounds the run itself, counted from the moment this call
        owns the pin; waiting behind another run on the same pin does not
        count. Overrunning raises asyncio.TimeoutError.
        """
        if duration_ms <= 0:
            return ActuationResult(ok=False, detail=f"invalid duration {duration_ms}ms")

        async with self._lock_for(address):
            logger.debug("[ACTUATOR:%s] pin %s on for %sms", self.name, address, duration_ms)
            if timeout_ms is None:
                result = await self._run(address, duration_ms)
            else:
                result = await asyncio.wait_for(self._run(address, duration_ms), timeout=timeout_ms / 1000.0)
            if not result.ok:
                logger.warning("[ACTUATOR:%s] pin %s failed: %s", self.name, address, result.detail)
            return result

    @abstractmethod
    async def _run(self, address: int, duration_ms: int) -> ActuationResult:
        ...

    def start(self) -> None:
        """Hook for gateways holding a connection; no-op by default."""

    def stop(self) -> None:
        """Counterpart of start()."""
