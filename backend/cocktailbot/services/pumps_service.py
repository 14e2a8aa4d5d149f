# cocktailbot/services/pumps_service.py

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from cocktailbot.db.models.pump import Pump
from cocktailbot.dispense.types import PumpMapping
from cocktailbot.schemas.pump import PumpUpdate


def get_pump_by_id(db: Session, pump_id: int) -> Optional[Pump]:
    return db.get(Pump, pump_id)


def list_pumps(db: Session) -> List[Pump]:
    stmt = select(Pump).order_by(Pump.id)
    return list(db.scalars(stmt))


def update_pump(db: Session, pump: Pump, data: PumpUpdate) -> Pump:
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(pump, field, value)
    db.add(pump)
    db.commit()
    db.refresh(pump)
    return pump


def set_flow_rate(db: Session, pump: Pump, flow_rate: float) -> Pump:
    if flow_rate <= 0:
        raise ValueError(f"flow rate must be positive (got {flow_rate})")
    pump.flow_rate = flow_rate
    db.add(pump)
    db.commit()
    db.refresh(pump)
    return pump


def load_mappings(db: Session) -> List[PumpMapping]:
    """Fresh snapshot of the pump configuration, ordered by pump id."""
    return [
        PumpMapping(
            pump_id=pump.id,
            ingredient_id=pump.ingredient_id,
            flow_rate_ml_s=float(pump.flow_rate),
            address=pump.pin,
            enabled=bool(pump.enabled),
        )
        for pump in list_pumps(db)
    ]
