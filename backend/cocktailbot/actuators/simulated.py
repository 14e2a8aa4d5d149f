# cocktailbot/actuators/simulated.py

from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional, Set, Tuple

from cocktailbot.actuators.base import ActuationResult, ActuatorGateway


class SimulatedActuatorGateway(ActuatorGateway):
    """Pretends to run pumps. Used off the Pi and in tests.

    time_scale=0 returns immediately, 1.0 waits the real duration.
    Addresses in fail_addresses report a failure after their (scaled) run;
    addresses in hang_addresses never finish.
    """

    name = "simulated"

    def __init__(
        self,
        time_scale: float = 1.0,
        fail_addresses: Optional[Iterable[int]] = None,
        hang_addresses: Optional[Iterable[int]] = None,
    ) -> None:
        super().__init__()
        self.time_scale = time_scale
        self.fail_addresses: Set[int] = set(fail_addresses or ())
        self.hang_addresses: Set[int] = set(hang_addresses or ())
        self.calls: List[Tuple[int, int]] = []
        self.finished: List[int] = []

    async def _run(self, address: int, duration_ms: int) -> ActuationResult:
        self.calls.append((address, duration_ms))

        if address in self.hang_addresses:
            await asyncio.Event().wait()

        await asyncio.sleep(duration_ms / 1000.0 * self.time_scale)
        self.finished.append(address)

        if address in self.fail_addresses:
            return ActuationResult(ok=False, detail=f"simulated failure on pin {address}")
        return ActuationResult(ok=True, detail=f"pin {address} ran {duration_ms}ms")
