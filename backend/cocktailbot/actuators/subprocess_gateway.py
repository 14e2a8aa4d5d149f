# cocktailbot/actuators/subprocess_gateway.py

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from cocktailbot.actuators.base import ActuationResult, ActuatorGateway

logger = logging.getLogger(__name__)


class SubprocessActuatorGateway(ActuatorGateway):
    """
    Drives the pumps through the GPIO helper script on the Pi:

        <python_bin> <script> activate <pin> <duration_ms>

    Exit code 0 means the pump ran for the full duration. Anything else is a
    failure; stderr (or stdout) is passed back as the diagnostic.
    """

    name = "subprocess"

    def __init__(self, script: str, python_bin: str = "python3") -> None:
        super().__init__()
        self.script = script
        self.python_bin = python_bin

    async def _run(self, address: int, duration_ms: int) -> ActuationResult:
        if not Path(self.script).exists():
            return ActuationResult(ok=False, detail=f"Python script not found: {self.script}")

        proc = await asyncio.create_subprocess_exec(
            self.python_bin, self.script, "activate", str(address), str(duration_ms),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            # watchdog gave up on this call; do not leave the helper holding the pin
            if proc.returncode is None:
                proc.kill()
                await proc.wait()
            logger.error("[ACTUATOR:subprocess] killed helper for pin %s", address)
            raise

        out = stdout.decode("utf-8", errors="ignore").strip()
        err = stderr.decode("utf-8", errors="ignore").strip()
        if proc.returncode != 0:
            return ActuationResult(
                ok=False,
                detail=err or out or f"helper exited with code {proc.returncode}",
            )
        return ActuationResult(ok=True, detail=out)
