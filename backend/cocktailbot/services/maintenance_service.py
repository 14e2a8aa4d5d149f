# cocktailbot/services/maintenance_service.py
"""
Pump calibration and line maintenance.

Calibration is two steps: run the pump for a fixed time, let the operator
measure what came out, then store measured_ml / seconds as the flow rate.

Maintenance runs go through the same executor as a dispense, as a single
batch, so they get the same watchdog and the same join-then-fail behaviour.
"""

import logging
from typing import List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from cocktailbot.actuators.base import ActuatorGateway
from cocktailbot.core.config import Settings, settings
from cocktailbot.db.models.pump import Pump
from cocktailbot.dispense.executor import DispenseExecutor
from cocktailbot.dispense.types import DispenseBatch, PumpRun
from cocktailbot.services import pumps_service
from cocktailbot.services.dispense_service import machine

logger = logging.getLogger(__name__)


async def _run_pumps(
    actuator: ActuatorGateway,
    pumps: List[Pump],
    duration_ms: int,
    activity: str,
    cfg: Settings = settings,
) -> None:
    batch = DispenseBatch(runs=tuple(
        PumpRun(
            pump_id=pump.id,
            address=pump.pin,
            ingredient_id=pump.ingredient_id or "",
            volume_ml=0,
            duration_ms=duration_ms,
        )
        for pump in pumps
    ))
    with machine.hold(activity) as cancel_event:
        executor = DispenseExecutor(watchdog_margin_ms=cfg.ACTUATOR_WATCHDOG_MARGIN_MS)
        await executor.execute([batch], actuator, cancel_event=cancel_event)


async def run_calibration(
    actuator: ActuatorGateway,
    pump: Pump,
    duration_ms: Optional[int] = None,
    cfg: Settings = settings,
) -> int:
    duration = duration_ms or cfg.CALIBRATION_RUN_MS
    logger.info("[CALIBRATION] pump %s running %dms, measure the output", pump.id, duration)
    await _run_pumps(actuator, [pump], duration, f"calibrate:{pump.id}", cfg)
    return duration


def apply_calibration(db: Session, pump: Pump, measured_ml: float, duration_ms: Optional[int] = None) -> Pump:
    duration = duration_ms or settings.CALIBRATION_RUN_MS
    if measured_ml <= 0:
        raise ValueError("measured amount must be positive")

    flow_rate = measured_ml / (duration / 1000.0)
    logger.info(
        "[CALIBRATION] pump %s (%s): %sml in %dms -> %.3f ml/s",
        pump.id, pump.ingredient_id, measured_ml, duration, flow_rate,
    )
    return pumps_service.set_flow_rate(db, pump, flow_rate)


async def vent_pump(actuator: ActuatorGateway, pump: Pump, duration_ms: int, cfg: Settings = settings) -> None:
    logger.info("[MAINTENANCE] venting pump %s for %dms", pump.id, duration_ms)
    await _run_pumps(actuator, [pump], duration_ms, f"vent:{pump.id}", cfg)


async def clean_all(
    actuator: ActuatorGateway,
    db: Session,
    duration_ms: int,
    cfg: Settings = settings,
) -> List[int]:
    pumps = [pump for pump in await run_in_threadpool(pumps_service.list_pumps, db) if pump.enabled]
    logger.info("[MAINTENANCE] cleaning %d pumps for %dms", len(pumps), duration_ms)
    await _run_pumps(actuator, pumps, duration_ms, "clean", cfg)
    return [pump.id for pump in pumps]
