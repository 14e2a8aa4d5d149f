# cocktailbot/schemas/tank_level.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TankLevelOut(BaseModel):
    pump_id: int
    ingredient_id: Optional[str] = None
    current_ml: float
    capacity_ml: float
    percentage: int
    low: bool
    critical: bool
    updated_at: Optional[datetime] = None


class TankLevelUpdate(BaseModel):
    current_ml: float = Field(..., ge=0, description="new total amount in the container")
    capacity_ml: Optional[float] = Field(None, gt=0)
