# cocktailbot/dispense/scaler.py

import math
from dataclasses import replace
from typing import List, Sequence

from cocktailbot.core.errors import InvalidRecipe
from cocktailbot.dispense.types import RecipeLine


def round_half_up(value: float) -> int:
    # round(x, 9) first so 37.4999999997 from float scaling still lands on 38
    return int(math.floor(round(value, 9) + 0.5))


def scale(lines: Sequence[RecipeLine], target_volume_ml: float) -> List[RecipeLine]:
    """
    Scale a recipe linearly so its volumes add up to target_volume_ml.

    Each line is rounded on its own (half up, whole ml), so the scaled total
    may be off by at most len(lines) / 2 ml.
    """
    if not lines:
        raise InvalidRecipe("Recipe has no ingredients")

    original_total = sum(line.volume_ml for line in lines)
    if original_total <= 0:
        raise InvalidRecipe(f"Recipe total volume must be positive (got {original_total} ml)")
    if target_volume_ml <= 0:
        raise InvalidRecipe(f"Target volume must be positive (got {target_volume_ml} ml)")

    factor = target_volume_ml / original_total
    return [
        replace(line, volume_ml=round_half_up(line.volume_ml * factor))
        for line in lines
    ]
