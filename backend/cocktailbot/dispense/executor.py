# cocktailbot/dispense/executor.py

from __future__ import annotations

import asyncio
import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from cocktailbot.actuators.base import ActuatorGateway
from cocktailbot.core.errors import ActuatorFault, DispenseCancelled
from cocktailbot.dispense.types import DispenseBatch, PumpRun

logger = logging.getLogger(__name__)

DEFAULT_WATCHDOG_MARGIN_MS = 5000

Listener = Callable[[str, Dict[str, Any]], None]


class ExecutorState(str, enum.Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    SETTLING = "SETTLING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


@dataclass
class ExecutionReport:
    """What actually happened on the hardware during one execute() call."""

    batches_total: int = 0
    batches_completed: int = 0
    succeeded: List[PumpRun] = field(default_factory=list)
    failed: List[PumpRun] = field(default_factory=list)
    elapsed_ms: int = 0


class DispenseExecutor:
    """
    Walks a schedule against an actuator gateway.

    IDLE -> RUNNING(i) -> [SETTLING] -> RUNNING(i+1) ... -> COMPLETED
    FAILED / CANCELLED are reachable from RUNNING and SETTLING.

    Runs of one batch start together and are all awaited before the batch is
    judged (a failed pump never leaves its siblings running unobserved). A
    failure stops every later batch; pumps that already ran are not undone.
    """

    def __init__(
        self,
        watchdog_margin_ms: int = DEFAULT_WATCHDOG_MARGIN_MS,
        listener: Optional[Listener] = None,
    ) -> None:
        self.watchdog_margin_ms = watchdog_margin_ms
        self.listener = listener
        self.state = ExecutorState.IDLE
        self.batch_index: Optional[int] = None
        self.report = ExecutionReport()

    def _emit(self, event: str, **data: Any) -> None:
        if self.listener is None:
            return
        try:
            self.listener(event, data)
        except Exception:
            logger.exception("[DISPENSE] listener failed for event %s", event)

    def _set_state(self, state: ExecutorState) -> None:
        self.state = state
        self._emit("state", state=state.value, batch_index=self.batch_index)

    async def _activate(self, actuator: ActuatorGateway, run: PumpRun) -> None:
        timeout_ms = run.duration_ms + self.watchdog_margin_ms
        try:
            result = await actuator.activate(run.address, run.duration_ms, timeout_ms=timeout_ms)
        except asyncio.TimeoutError:
            raise ActuatorFault(
                f"Pump {run.pump_id} (pin {run.address}) did not finish within {timeout_ms / 1000.0:.1f}s",
                pump_id=run.pump_id,
                address=run.address,
                ingredient_id=run.ingredient_id,
            )

        if not result.ok:
            raise ActuatorFault(
                f"Pump {run.pump_id} (pin {run.address}) failed: {result.detail or 'no detail'}",
                pump_id=run.pump_id,
                address=run.address,
                ingredient_id=run.ingredient_id,
            )

    async def _run_batch(self, actuator: ActuatorGateway, batch: DispenseBatch) -> None:
        results = await asyncio.gather(
            *(self._activate(actuator, run) for run in batch.runs),
            return_exceptions=True,
        )

        first_fault: Optional[ActuatorFault] = None
        for run, outcome in zip(batch.runs, results):
            if isinstance(outcome, BaseException):
                self.report.failed.append(run)
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                if not isinstance(outcome, ActuatorFault):
                    outcome = ActuatorFault(
                        f"Pump {run.pump_id} (pin {run.address}) raised {outcome!r}",
                        pump_id=run.pump_id,
                        address=run.address,
                        ingredient_id=run.ingredient_id,
                    )
                if first_fault is None:
                    first_fault = outcome
            else:
                self.report.succeeded.append(run)

        if first_fault is not None:
            raise first_fault

    async def _settle(self, delay_ms: int, cancel_event: Optional[asyncio.Event]) -> None:
        self._set_state(ExecutorState.SETTLING)
        if cancel_event is None:
            await asyncio.sleep(delay_ms / 1000.0)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay_ms / 1000.0)
        except asyncio.TimeoutError:
            return

    async def execute(
        self,
        schedule: Sequence[DispenseBatch],
        actuator: ActuatorGateway,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExecutionReport:
        if self.state is not ExecutorState.IDLE:
            raise RuntimeError(f"executor already used (state={self.state.value})")

        self.report = ExecutionReport(batches_total=len(schedule))
        started = time.monotonic()

        try:
            for index, batch in enumerate(schedule):
                if cancel_event is not None and cancel_event.is_set():
                    self._set_state(ExecutorState.CANCELLED)
                    logger.warning("[DISPENSE] cancelled before batch %d/%d", index + 1, len(schedule))
                    raise DispenseCancelled(report=self.report)

                self.batch_index = index
                self._set_state(ExecutorState.RUNNING)
                logger.info(
                    "[DISPENSE] batch %d/%d: %s",
                    index + 1, len(schedule),
                    ", ".join(f"pump {r.pump_id} {r.volume_ml}ml/{r.duration_ms}ms" for r in batch.runs),
                )

                try:
                    await self._run_batch(actuator, batch)
                except ActuatorFault as fault:
                    fault.report = self.report
                    self._set_state(ExecutorState.FAILED)
                    logger.error("[DISPENSE] batch %d failed: %s", index + 1, fault.message)
                    raise

                self.report.batches_completed += 1
                self._emit("batch_done", batch_index=index, batches_total=len(schedule))

                is_last = index == len(schedule) - 1
                if not is_last and batch.settle_after_ms > 0:
                    await self._settle(batch.settle_after_ms, cancel_event)

            self.batch_index = None
            self._set_state(ExecutorState.COMPLETED)
            return self.report
        finally:
            self.report.elapsed_ms = int((time.monotonic() - started) * 1000)
