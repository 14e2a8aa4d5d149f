# cocktailbot/services/dispense_service.py
"""
Caller side of the dispense core: "pour this cocktail / shot at this size".

For every request the pump configuration and tank levels are read fresh from
the database, the order is validated and scheduled before any pump moves, the
schedule is executed, and afterwards the tanks are drawn down for the pumps
that actually ran. Every request leaves one row in dispense_runs.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from cocktailbot.actuators.base import ActuatorGateway
from cocktailbot.core.config import Settings, settings
from cocktailbot.core.errors import (
    ActuatorFault,
    DispenseCancelled,
    DispenseError,
    InsufficientStock,
    MachineBusy,
)
from cocktailbot.db.models.dispense_run import DispenseRun
from cocktailbot.dispense.availability import check_availability
from cocktailbot.dispense.executor import DispenseExecutor, ExecutionReport
from cocktailbot.dispense.scaler import scale
from cocktailbot.dispense.scheduler import build_schedule, build_shot_schedule, schedule_duration_ms
from cocktailbot.dispense.types import Cocktail, DispenseBatch, RecipeLine
from cocktailbot.services import levels_service, pumps_service
from cocktailbot.ws.bus import ws_bus

logger = logging.getLogger(__name__)


# ===== one order at a time =====

class MachineGuard:
    """Marks the machine busy for the duration of a dispense or maintenance run.

    Everything runs on the application event loop, so checking and setting the
    flag cannot interleave with another request.
    """

    def __init__(self) -> None:
        self.busy = False
        self.activity: Optional[str] = None
        self.cancel_event: Optional[asyncio.Event] = None

    @contextmanager
    def hold(self, activity: str):
        if self.busy:
            raise MachineBusy()
        self.busy = True
        self.activity = activity
        self.cancel_event = asyncio.Event()
        try:
            yield self.cancel_event
        finally:
            self.busy = False
            self.activity = None
            self.cancel_event = None

    def cancel(self) -> bool:
        if not self.busy or self.cancel_event is None:
            return False
        self.cancel_event.set()
        return True


machine = MachineGuard()


@dataclass
class DispenseOutcome:
    run: DispenseRun
    schedule: List[DispenseBatch]
    manual_steps: List[RecipeLine] = field(default_factory=list)
    low_ingredients: List[str] = field(default_factory=list)
    report: Optional[ExecutionReport] = None


# ===== helpers =====

def _log_run(
    db: Session,
    kind: str,
    target_id: str,
    size_ml: float,
    status: str,
    schedule: Sequence[DispenseBatch] = (),
    report: Optional[ExecutionReport] = None,
    error: Optional[DispenseError] = None,
) -> DispenseRun:
    run = DispenseRun(
        kind=kind,
        target_id=target_id,
        size_ml=size_ml,
        status=status,
        error_kind=error.kind if error else None,
        error_detail=error.message[:255] if error else None,
        batches_total=len(schedule),
        batches_completed=report.batches_completed if report else 0,
        elapsed_ms=report.elapsed_ms if report else None,
    )
    db.add(run)
    db.commit()
    db.refresh(run)
    return run


def _event_listener(kind: str, target_id: str):
    def listener(event: str, data: Dict[str, Any]) -> None:
        ws_bus.publish(f"dispense_{event}", {"kind": kind, "target_id": target_id, **data})
    return listener


def manual_steps_for(cocktail: Cocktail, size_ml: float) -> List[RecipeLine]:
    return [line for line in scale(cocktail.lines, size_ml) if not line.is_automatic]


def list_runs(db: Session, target_id: Optional[str] = None, limit: int = 50) -> List[DispenseRun]:
    stmt = select(DispenseRun)
    if target_id:
        stmt = stmt.where(DispenseRun.target_id == target_id)
    stmt = stmt.order_by(desc(DispenseRun.id)).limit(limit)
    return list(db.scalars(stmt))


# ===== preview =====

def preview_schedule(db: Session, cocktail: Cocktail, size_ml: float, cfg: Settings = settings) -> Dict[str, Any]:
    schedule = build_schedule(
        cocktail,
        size_ml,
        pumps_service.load_mappings(db),
        deferred_ingredients=cfg.deferred_ingredients,
        settle_delay_ms=cfg.SETTLE_DELAY_MS,
    )
    return {
        "schedule": schedule,
        "manual_steps": manual_steps_for(cocktail, size_ml),
        "estimated_ms": schedule_duration_ms(schedule),
    }


def availability_for(db: Session, cocktail: Cocktail, size_ml: float, cfg: Settings = settings):
    return check_availability(
        cocktail,
        size_ml,
        pumps_service.load_mappings(db),
        levels_service.load_levels(db),
        low_multiplier=cfg.LOW_STOCK_MULTIPLIER,
    )


# ===== dispense =====

def _preflight(
    db: Session,
    kind: str,
    target_id: str,
    cocktail: Cocktail,
    size_ml: float,
    check_stock: bool,
    cfg: Settings,
) -> Tuple[List[DispenseBatch], List[str]]:
    """Validate and schedule the order. Nothing here touches a pump."""
    mappings = pumps_service.load_mappings(db)
    levels = levels_service.load_levels(db)

    schedule: List[DispenseBatch] = []
    low: List[str] = []
    try:
        if kind == "shot":
            schedule = build_shot_schedule(target_id, size_ml, mappings)
        else:
            schedule = build_schedule(
                cocktail,
                size_ml,
                mappings,
                deferred_ingredients=cfg.deferred_ingredients,
                settle_delay_ms=cfg.SETTLE_DELAY_MS,
            )

        if check_stock:
            availability = check_availability(
                cocktail, size_ml, mappings, levels, low_multiplier=cfg.LOW_STOCK_MULTIPLIER,
            )
            if not availability.can_make:
                raise InsufficientStock(availability.missing_ingredients)
            low = availability.low_ingredients
    except DispenseError as e:
        logger.warning("[DISPENSE] %s %s @ %sml rejected: %s", kind, target_id, size_ml, e.message)
        _log_run(db, kind, target_id, size_ml, "REJECTED", schedule, error=e)
        raise
    return schedule, low


def _record(
    db: Session,
    kind: str,
    target_id: str,
    size_ml: float,
    status: str,
    schedule: Sequence[DispenseBatch],
    report: ExecutionReport,
    error: Optional[DispenseError] = None,
) -> DispenseRun:
    # what already ran is in the glass; the tanks have to reflect it
    levels_service.consume(db, report.succeeded)
    return _log_run(db, kind, target_id, size_ml, status, schedule, report=report, error=error)


async def _dispense(
    db: Session,
    kind: str,
    cocktail: Cocktail,
    size_ml: float,
    actuator: ActuatorGateway,
    check_stock: bool,
    cfg: Settings,
) -> DispenseOutcome:
    target_id = cocktail.id if kind == "cocktail" else cocktail.lines[0].ingredient_id

    # held from pre-flight on; checked levels stay valid until the pumps start
    with machine.hold(f"{kind}:{target_id}") as cancel_event:
        # sync database work stays off the event loop
        schedule, low = await run_in_threadpool(
            _preflight, db, kind, target_id, cocktail, size_ml, check_stock, cfg,
        )
        manual_steps = manual_steps_for(cocktail, size_ml)

        logger.info("[DISPENSE] %s %s @ %sml started (%d batches)", kind, target_id, size_ml, len(schedule))
        ws_bus.publish("dispense_started", {
            "kind": kind,
            "target_id": target_id,
            "size_ml": size_ml,
            "batches_total": len(schedule),
            "estimated_ms": schedule_duration_ms(schedule),
        })

        executor = DispenseExecutor(
            watchdog_margin_ms=cfg.ACTUATOR_WATCHDOG_MARGIN_MS,
            listener=_event_listener(kind, target_id),
        )
        try:
            report = await executor.execute(schedule, actuator, cancel_event=cancel_event)
        except (ActuatorFault, DispenseCancelled) as e:
            report = e.report or executor.report
            status = "CANCELLED" if isinstance(e, DispenseCancelled) else "FAILED"
            await run_in_threadpool(_record, db, kind, target_id, size_ml, status, schedule, report, e)
            ws_bus.publish("dispense_failed", {"kind": kind, "target_id": target_id, **e.to_dict()})
            raise

        run = await run_in_threadpool(_record, db, kind, target_id, size_ml, "COMPLETED", schedule, report)

    logger.info("[DISPENSE] %s %s @ %sml completed in %dms", kind, target_id, size_ml, report.elapsed_ms)
    ws_bus.publish("dispense_completed", {
        "kind": kind,
        "target_id": target_id,
        "size_ml": size_ml,
        "run_id": run.id,
        "manual_steps": [
            {"ingredient_id": s.ingredient_id, "volume_ml": s.volume_ml, "instructions": s.instructions}
            for s in manual_steps
        ],
    })

    return DispenseOutcome(
        run=run,
        schedule=schedule,
        manual_steps=manual_steps,
        low_ingredients=low,
        report=report,
    )


async def dispense_cocktail(
    db: Session,
    cocktail: Cocktail,
    size_ml: float,
    actuator: ActuatorGateway,
    check_stock: bool = True,
    cfg: Settings = settings,
) -> DispenseOutcome:
    return await _dispense(db, "cocktail", cocktail, size_ml, actuator, check_stock, cfg)


async def dispense_shot(
    db: Session,
    ingredient_id: str,
    actuator: ActuatorGateway,
    size_ml: Optional[float] = None,
    check_stock: bool = True,
    cfg: Settings = settings,
) -> DispenseOutcome:
    size = size_ml or cfg.SHOT_SIZE_ML
    shot = Cocktail(
        id=f"shot:{ingredient_id}",
        name=ingredient_id,
        lines=(RecipeLine(ingredient_id=ingredient_id, volume_ml=size),),
    )
    return await _dispense(db, "shot", shot, size, actuator, check_stock, cfg)


def cancel_current() -> bool:
    cancelled = machine.cancel()
    if cancelled:
        logger.warning("[DISPENSE] cancel requested for %s", machine.activity)
    return cancelled
