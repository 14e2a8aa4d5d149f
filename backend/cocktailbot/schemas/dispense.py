# cocktailbot/schemas/dispense.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CocktailDispenseRequest(BaseModel):
    cocktail_id: str = Field(..., examples=["mai-tai"])
    size_ml: float = Field(..., gt=0, examples=[300])
    check_stock: bool = True


class ShotDispenseRequest(BaseModel):
    ingredient_id: str = Field(..., examples=["vodka"])
    size_ml: Optional[float] = Field(None, gt=0, description="defaults to the configured shot size")
    check_stock: bool = True


class PumpRunOut(BaseModel):
    pump_id: int
    pin: int
    ingredient_id: str
    volume_ml: int
    duration_ms: int


class BatchOut(BaseModel):
    runs: List[PumpRunOut]
    settle_after_ms: int = 0


class ManualStepOut(BaseModel):
    ingredient_id: str
    volume_ml: int
    instructions: Optional[str] = None


class ScheduleOut(BaseModel):
    cocktail_id: str
    size_ml: float
    batches: List[BatchOut]
    manual_steps: List[ManualStepOut] = []
    estimated_ms: int


class DispenseResultOut(BaseModel):
    run_id: int
    status: str
    target_id: str
    size_ml: float
    batches: List[BatchOut]
    manual_steps: List[ManualStepOut] = []
    low_ingredients: List[str] = []
    elapsed_ms: int


class SizesOut(BaseModel):
    cocktail_sizes: List[int]
    shot_size: int


class CancelOut(BaseModel):
    cancelled: bool


class DispenseRunOut(BaseModel):
    id: int
    kind: str
    target_id: str
    size_ml: float
    status: str
    error_kind: Optional[str] = None
    error_detail: Optional[str] = None
    batches_total: int
    batches_completed: int
    elapsed_ms: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
