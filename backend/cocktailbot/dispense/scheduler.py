# cocktailbot/dispense/scheduler.py

import logging
from dataclasses import replace
from typing import AbstractSet, Dict, List, Sequence, Tuple

from cocktailbot.core.errors import CalibrationFault, UnresolvedIngredient
from cocktailbot.dispense.resolver import resolve
from cocktailbot.dispense.scaler import round_half_up, scale
from cocktailbot.dispense.types import (
    AUTOMATIC,
    POUR_FLOAT,
    Cocktail,
    DispenseBatch,
    PumpMapping,
    PumpRun,
    RecipeLine,
)

logger = logging.getLogger(__name__)

DEFAULT_DEFERRED_INGREDIENTS = frozenset({"grenadine"})
DEFAULT_SETTLE_DELAY_MS = 2000


def duration_ms(volume_ml: float, flow_rate_ml_s: float) -> int:
    return round_half_up(volume_ml / flow_rate_ml_s * 1000)


def is_deferred(line: RecipeLine, deferred_ingredients: AbstractSet[str]) -> bool:
    return line.pour_style == POUR_FLOAT or line.ingredient_id in deferred_ingredients


def _resolve_all(
    lines: Sequence[RecipeLine],
    mappings: Sequence[PumpMapping],
) -> List[Tuple[RecipeLine, PumpMapping]]:
    resolved = []
    for line in lines:
        pump = resolve(line.ingredient_id, mappings)
        if pump is None:
            raise UnresolvedIngredient(line.ingredient_id)
        resolved.append((line, pump))

    # calibration is validated for every line before any duration is built
    for line, pump in resolved:
        if pump.flow_rate_ml_s <= 0:
            raise CalibrationFault(pump.pump_id, line.ingredient_id, pump.flow_rate_ml_s)
    return resolved


def _merge_same_pump(runs: List[PumpRun], mappings: Sequence[PumpMapping]) -> List[PumpRun]:
    """One run per pump within a batch; repeated ingredients are summed."""
    flow_rates = {pump.pump_id: pump.flow_rate_ml_s for pump in mappings}
    merged: Dict[int, PumpRun] = {}
    for run in runs:
        first = merged.get(run.pump_id)
        if first is None:
            merged[run.pump_id] = run
            continue
        volume = first.volume_ml + run.volume_ml
        merged[run.pump_id] = replace(
            first,
            volume_ml=volume,
            duration_ms=duration_ms(volume, flow_rates[run.pump_id]),
        )
    return list(merged.values())


def _to_run(line: RecipeLine, pump: PumpMapping) -> PumpRun:
    return PumpRun(
        pump_id=pump.pump_id,
        address=pump.address,
        ingredient_id=line.ingredient_id,
        volume_ml=int(line.volume_ml),
        duration_ms=duration_ms(line.volume_ml, pump.flow_rate_ml_s),
    )


def build_schedule(
    cocktail: Cocktail,
    target_volume_ml: float,
    mappings: Sequence[PumpMapping],
    deferred_ingredients: AbstractSet[str] = DEFAULT_DEFERRED_INGREDIENTS,
    settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
) -> List[DispenseBatch]:
    """
    Turn a cocktail into an ordered list of pump batches.

    Batch 1 runs every immediate line at once. Deferred (float) lines follow,
    one batch each in recipe order, after settle_delay_ms. Manual lines are
    left for the operator and never scheduled.

    Raises UnresolvedIngredient / CalibrationFault before producing anything.
    """
    automatic = [line for line in scale(cocktail.lines, target_volume_ml) if line.dispense_class == AUTOMATIC]
    resolved = _resolve_all(automatic, mappings)

    immediate, deferred = [], []
    for line, pump in resolved:
        # nothing to pour once scaled down to 0 ml
        if line.volume_ml <= 0:
            continue
        run = _to_run(line, pump)
        if is_deferred(line, deferred_ingredients):
            deferred.append(run)
        else:
            immediate.append(run)

    immediate = _merge_same_pump(immediate, mappings)

    schedule: List[DispenseBatch] = []
    if immediate:
        schedule.append(DispenseBatch(
            runs=tuple(immediate),
            settle_after_ms=settle_delay_ms if deferred else 0,
        ))
    for run in deferred:
        schedule.append(DispenseBatch(runs=(run,), settle_after_ms=0))

    logger.info(
        "[SCHEDULE] %s @ %sml -> %d batch(es), %d immediate, %d deferred",
        cocktail.id, target_volume_ml, len(schedule), len(immediate), len(deferred),
    )
    return schedule


def build_shot_schedule(
    ingredient_id: str,
    volume_ml: float,
    mappings: Sequence[PumpMapping],
) -> List[DispenseBatch]:
    shot = Cocktail(
        id=f"shot:{ingredient_id}",
        name=ingredient_id,
        lines=(RecipeLine(ingredient_id=ingredient_id, volume_ml=volume_ml),),
    )
    # a shot is never deferred, whatever the ingredient
    return build_schedule(shot, volume_ml, mappings, deferred_ingredients=frozenset())


def schedule_duration_ms(schedule: Sequence[DispenseBatch]) -> int:
    """Expected wall time: slowest pump of every batch plus settle delays."""
    total = 0
    for index, batch in enumerate(schedule):
        total += max((run.duration_ms for run in batch.runs), default=0)
        if index < len(schedule) - 1:
            total += batch.settle_after_ms
    return total
