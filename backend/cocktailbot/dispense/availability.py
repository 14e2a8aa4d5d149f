# cocktailbot/dispense/availability.py

import logging
from typing import Sequence

from cocktailbot.dispense.resolver import resolve
from cocktailbot.dispense.scaler import scale
from cocktailbot.dispense.types import Availability, Cocktail, PumpMapping, TankLevel

logger = logging.getLogger(__name__)

DEFAULT_LOW_MULTIPLIER = 2.0


def check_availability(
    cocktail: Cocktail,
    target_volume_ml: float,
    mappings: Sequence[PumpMapping],
    levels: Sequence[TankLevel],
    low_multiplier: float = DEFAULT_LOW_MULTIPLIER,
) -> Availability:
    """
    Classify an order against the current tank levels.

    - missing: no enabled pump, no level for the pump, or current < required
    - low:     required <= current < low_multiplier * required
    - manual lines never count
    """
    levels_by_pump = {level.pump_id: level for level in levels}
    low, missing = [], []

    for line in scale(cocktail.lines, target_volume_ml):
        if not line.is_automatic:
            continue

        pump = resolve(line.ingredient_id, mappings)
        if pump is None:
            missing.append(line.ingredient_id)
            continue

        level = levels_by_pump.get(pump.pump_id)
        if level is None:
            missing.append(line.ingredient_id)
            continue

        required = line.volume_ml
        if level.current_ml < required:
            missing.append(line.ingredient_id)
        elif level.current_ml < required * low_multiplier:
            low.append(line.ingredient_id)

    result = Availability(
        can_make=not missing,
        low_ingredients=low,
        missing_ingredients=missing,
    )
    logger.debug(
        "[AVAILABILITY] %s @ %sml -> can_make=%s low=%s missing=%s",
        cocktail.id, target_volume_ml, result.can_make, low, missing,
    )
    return result
