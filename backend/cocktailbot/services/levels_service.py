# cocktailbot/services/levels_service.py

from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from cocktailbot.core.config import settings
from cocktailbot.db.models.pump import Pump
from cocktailbot.db.models.tank_level import TankLevel
from cocktailbot.dispense import types
from cocktailbot.dispense.types import PumpRun


def get_level(db: Session, pump_id: int) -> Optional[TankLevel]:
    return db.get(TankLevel, pump_id)


def list_levels(db: Session) -> List[TankLevel]:
    stmt = select(TankLevel).order_by(TankLevel.pump_id)
    return list(db.scalars(stmt))


def load_levels(db: Session) -> List[types.TankLevel]:
    """Fresh snapshot of every tank level."""
    return [
        types.TankLevel(
            pump_id=level.pump_id,
            current_ml=float(level.current_ml),
            capacity_ml=float(level.capacity_ml),
        )
        for level in list_levels(db)
    ]


def describe(level: TankLevel, ingredient_id: Optional[str] = None) -> Dict:
    current = float(level.current_ml)
    capacity = float(level.capacity_ml)
    return {
        "pump_id": level.pump_id,
        "ingredient_id": ingredient_id,
        "current_ml": current,
        "capacity_ml": capacity,
        "percentage": round(current / capacity * 100) if capacity > 0 else 0,
        "low": current < settings.LOW_LEVEL_ML,
        "critical": current < settings.CRITICAL_LEVEL_ML,
        "updated_at": level.updated_at,
    }


def list_level_status(db: Session) -> List[Dict]:
    ingredients = {pump.id: pump.ingredient_id for pump in db.scalars(select(Pump))}
    return [describe(level, ingredients.get(level.pump_id)) for level in list_levels(db)]


def set_level(
    db: Session,
    pump_id: int,
    current_ml: float,
    capacity_ml: Optional[float] = None,
) -> TankLevel:
    """Refill: store the new total, clamped to the container capacity."""
    if current_ml < 0:
        raise ValueError(f"level must not be negative (got {current_ml})")

    level = get_level(db, pump_id)
    if level is None:
        level = TankLevel(
            pump_id=pump_id,
            capacity_ml=capacity_ml or settings.DEFAULT_TANK_CAPACITY_ML,
        )
    elif capacity_ml is not None:
        level.capacity_ml = capacity_ml

    level.current_ml = min(float(current_ml), float(level.capacity_ml))
    db.add(level)
    db.commit()
    db.refresh(level)
    return level


def refill_all(db: Session) -> List[TankLevel]:
    levels = list_levels(db)
    for level in levels:
        level.current_ml = level.capacity_ml
        db.add(level)
    db.commit()
    return list_levels(db)


def consume(db: Session, runs: Iterable[PumpRun]) -> None:
    """Draw down the tanks for pumps that actually ran (never below 0)."""
    used: Dict[int, float] = {}
    for run in runs:
        used[run.pump_id] = used.get(run.pump_id, 0.0) + run.volume_ml

    for pump_id, volume in used.items():
        level = get_level(db, pump_id)
        if level is None:
            continue
        level.current_ml = max(0.0, float(level.current_ml) - volume)
        db.add(level)
    db.commit()
