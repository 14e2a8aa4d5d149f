# cocktailbot/schemas/pump.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PumpOut(BaseModel):
    id: int
    ingredient_id: Optional[str] = None
    pin: int
    flow_rate: float = Field(..., description="calibrated flow rate (ml/s)")
    enabled: bool
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PumpUpdate(BaseModel):
    ingredient_id: Optional[str] = None
    pin: Optional[int] = Field(None, ge=0)
    flow_rate: Optional[float] = Field(None, gt=0)
    enabled: Optional[bool] = None


class CalibrationRunOut(BaseModel):
    pump_id: int
    duration_ms: int
    status: str = "MEASURE_NOW"


class CalibrationResultIn(BaseModel):
    measured_ml: float = Field(..., gt=0, description="amount collected during the calibration run")
    duration_ms: Optional[int] = Field(None, gt=0, description="defaults to the standard calibration run")


class VentRequest(BaseModel):
    duration_ms: int = Field(..., gt=0, le=60000)


class MaintenanceOut(BaseModel):
    pump_ids: List[int]
    duration_ms: int
    status: str = "DONE"
