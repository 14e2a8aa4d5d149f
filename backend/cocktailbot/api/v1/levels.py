# cocktailbot/api/v1/levels.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from cocktailbot.api.deps import get_db
from cocktailbot.schemas.tank_level import TankLevelOut, TankLevelUpdate
from cocktailbot.services import levels_service, pumps_service

router = APIRouter(prefix="/levels", tags=["levels"])


@router.get("/", response_model=List[TankLevelOut])
def list_levels_endpoint(
    db: Session = Depends(get_db),
):
    return levels_service.list_level_status(db)


@router.put("/{pump_id}", response_model=TankLevelOut)
def set_level_endpoint(
    pump_id: int,
    data: TankLevelUpdate,
    db: Session = Depends(get_db),
):
    """Refill: the body carries the new total in the container, not the added amount."""
    pump = pumps_service.get_pump_by_id(db, pump_id)
    if not pump:
        raise HTTPException(status_code=404, detail="Pump not found")
    level = levels_service.set_level(db, pump_id, data.current_ml, capacity_ml=data.capacity_ml)
    return levels_service.describe(level, pump.ingredient_id)


@router.post("/refill_all", response_model=List[TankLevelOut])
def refill_all_endpoint(
    db: Session = Depends(get_db),
):
    levels_service.refill_all(db)
    return levels_service.list_level_status(db)
