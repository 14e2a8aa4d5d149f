# cocktailbot/api/v1/dispense.py

from typing import List, Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from cocktailbot.actuators.base import ActuatorGateway
from cocktailbot.api.deps import dispense_http_error, get_actuator, get_db
from cocktailbot.core.config import settings
from cocktailbot.core.errors import DispenseError
from cocktailbot.dispense.types import DispenseBatch, RecipeLine
from cocktailbot.schemas.dispense import (
    BatchOut,
    CancelOut,
    CocktailDispenseRequest,
    DispenseResultOut,
    DispenseRunOut,
    ManualStepOut,
    PumpRunOut,
    ScheduleOut,
    ShotDispenseRequest,
    SizesOut,
)
from cocktailbot.services import cocktails_service, dispense_service
from cocktailbot.services.dispense_service import DispenseOutcome

router = APIRouter(prefix="/dispense", tags=["dispense"])


def _batches_out(schedule: Sequence[DispenseBatch]) -> List[BatchOut]:
    return [
        BatchOut(
            runs=[
                PumpRunOut(
                    pump_id=run.pump_id,
                    pin=run.address,
                    ingredient_id=run.ingredient_id,
                    volume_ml=run.volume_ml,
                    duration_ms=run.duration_ms,
                )
                for run in batch.runs
            ],
            settle_after_ms=batch.settle_after_ms,
        )
        for batch in schedule
    ]


def _manual_out(lines: Sequence[RecipeLine]) -> List[ManualStepOut]:
    return [
        ManualStepOut(ingredient_id=line.ingredient_id, volume_ml=int(line.volume_ml), instructions=line.instructions)
        for line in lines
    ]


def _result_out(outcome: DispenseOutcome) -> DispenseResultOut:
    return DispenseResultOut(
        run_id=outcome.run.id,
        status=outcome.run.status,
        target_id=outcome.run.target_id,
        size_ml=outcome.run.size_ml,
        batches=_batches_out(outcome.schedule),
        manual_steps=_manual_out(outcome.manual_steps),
        low_ingredients=outcome.low_ingredients,
        elapsed_ms=outcome.report.elapsed_ms if outcome.report else 0,
    )


def _load_cocktail(db: Session, cocktail_id: str):
    cocktail = cocktails_service.get_cocktail_by_id(db, cocktail_id)
    if not cocktail:
        raise HTTPException(status_code=404, detail="Cocktail not found")
    return cocktails_service.to_domain(cocktail)


@router.get("/sizes", response_model=SizesOut)
def get_sizes():
    return SizesOut(cocktail_sizes=settings.serving_sizes, shot_size=settings.SHOT_SIZE_ML)


@router.get("/schedule/{cocktail_id}", response_model=ScheduleOut)
def preview_schedule_endpoint(
    cocktail_id: str,
    size: float = Query(..., gt=0),
    db: Session = Depends(get_db),
):
    """Dry run: the batches that would be sent to the pumps, nothing is started."""
    cocktail = _load_cocktail(db, cocktail_id)
    try:
        preview = dispense_service.preview_schedule(db, cocktail, size)
    except DispenseError as e:
        raise dispense_http_error(e)
    return ScheduleOut(
        cocktail_id=cocktail_id,
        size_ml=size,
        batches=_batches_out(preview["schedule"]),
        manual_steps=_manual_out(preview["manual_steps"]),
        estimated_ms=preview["estimated_ms"],
    )


@router.post("/cocktail", response_model=DispenseResultOut)
async def dispense_cocktail_endpoint(
    req: CocktailDispenseRequest,
    db: Session = Depends(get_db),
    actuator: ActuatorGateway = Depends(get_actuator),
):
    cocktail = await run_in_threadpool(_load_cocktail, db, req.cocktail_id)
    try:
        outcome = await dispense_service.dispense_cocktail(
            db, cocktail, req.size_ml, actuator, check_stock=req.check_stock,
        )
    except DispenseError as e:
        raise dispense_http_error(e)
    return _result_out(outcome)


@router.post("/shot", response_model=DispenseResultOut)
async def dispense_shot_endpoint(
    req: ShotDispenseRequest,
    db: Session = Depends(get_db),
    actuator: ActuatorGateway = Depends(get_actuator),
):
    try:
        outcome = await dispense_service.dispense_shot(
            db, req.ingredient_id, actuator, size_ml=req.size_ml, check_stock=req.check_stock,
        )
    except DispenseError as e:
        raise dispense_http_error(e)
    return _result_out(outcome)


@router.post("/cancel", response_model=CancelOut)
async def cancel_dispense_endpoint():
    """Stop before the next batch. Pumps that are already running finish their run."""
    return CancelOut(cancelled=dispense_service.cancel_current())


@router.get("/runs", response_model=List[DispenseRunOut])
def list_runs_endpoint(
    target_id: Optional[str] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    return dispense_service.list_runs(db, target_id=target_id, limit=limit)
