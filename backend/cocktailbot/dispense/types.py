# cocktailbot/dispense/types.py
"""
Value types the dispense core works on.

These are snapshots built by the service layer from the database rows for a
single request; the core never sees ORM objects or sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

AUTOMATIC = "automatic"
MANUAL = "manual"

POUR_IMMEDIATE = "immediate"
POUR_FLOAT = "float"


@dataclass(frozen=True)
class Ingredient:
    id: str
    name: str
    alcoholic: bool = False
    category: Optional[str] = None


@dataclass(frozen=True)
class RecipeLine:
    ingredient_id: str
    volume_ml: float
    dispense_class: str = AUTOMATIC
    pour_style: str = POUR_IMMEDIATE
    instructions: Optional[str] = None

    @property
    def is_automatic(self) -> bool:
        return self.dispense_class == AUTOMATIC


@dataclass(frozen=True)
class Cocktail:
    id: str
    name: str
    lines: Tuple[RecipeLine, ...]
    description: Optional[str] = None
    alcoholic: bool = True
    image: Optional[str] = None


@dataclass(frozen=True)
class PumpMapping:
    pump_id: int
    ingredient_id: Optional[str]
    flow_rate_ml_s: float
    address: int
    enabled: bool = True


@dataclass(frozen=True)
class TankLevel:
    pump_id: int
    current_ml: float
    capacity_ml: float


@dataclass(frozen=True)
class PumpRun:
    pump_id: int
    address: int
    ingredient_id: str
    volume_ml: int
    duration_ms: int


@dataclass(frozen=True)
class DispenseBatch:
    """Runs started together; `settle_after_ms` is waited before the next batch."""

    runs: Tuple[PumpRun, ...]
    settle_after_ms: int = 0


@dataclass
class Availability:
    can_make: bool
    low_ingredients: List[str] = field(default_factory=list)
    missing_ingredients: List[str] = field(default_factory=list)
