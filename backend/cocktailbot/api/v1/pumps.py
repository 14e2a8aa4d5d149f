# cocktailbot/api/v1/pumps.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from cocktailbot.actuators.base import ActuatorGateway
from cocktailbot.api.deps import dispense_http_error, get_actuator, get_db
from cocktailbot.core.errors import DispenseError
from cocktailbot.schemas.pump import (
    CalibrationResultIn,
    CalibrationRunOut,
    MaintenanceOut,
    PumpOut,
    PumpUpdate,
    VentRequest,
)
from cocktailbot.services import maintenance_service, pumps_service

router = APIRouter(prefix="/pumps", tags=["pumps"])


@router.get("/", response_model=List[PumpOut])
def list_pumps_endpoint(
    db: Session = Depends(get_db),
):
    return pumps_service.list_pumps(db)


@router.post("/clean", response_model=MaintenanceOut)
async def clean_pumps_endpoint(
    req: VentRequest,
    db: Session = Depends(get_db),
    actuator: ActuatorGateway = Depends(get_actuator),
):
    """Run every enabled pump at once, e.g. with warm water in the tanks."""
    try:
        pump_ids = await maintenance_service.clean_all(actuator, db, req.duration_ms)
    except DispenseError as e:
        raise dispense_http_error(e)
    return MaintenanceOut(pump_ids=pump_ids, duration_ms=req.duration_ms)


@router.get("/{pump_id}", response_model=PumpOut)
def get_pump_endpoint(
    pump_id: int,
    db: Session = Depends(get_db),
):
    pump = pumps_service.get_pump_by_id(db, pump_id)
    if not pump:
        raise HTTPException(status_code=404, detail="Pump not found")
    return pump


@router.patch("/{pump_id}", response_model=PumpOut)
def update_pump_endpoint(
    pump_id: int,
    data: PumpUpdate,
    db: Session = Depends(get_db),
):
    pump = pumps_service.get_pump_by_id(db, pump_id)
    if not pump:
        raise HTTPException(status_code=404, detail="Pump not found")
    return pumps_service.update_pump(db, pump, data)


@router.post("/{pump_id}/calibrate", response_model=CalibrationRunOut)
async def calibrate_pump_endpoint(
    pump_id: int,
    db: Session = Depends(get_db),
    actuator: ActuatorGateway = Depends(get_actuator),
):
    """Step 1: run the pump for the standard calibration time."""
    pump = await run_in_threadpool(pumps_service.get_pump_by_id, db, pump_id)
    if not pump:
        raise HTTPException(status_code=404, detail="Pump not found")
    try:
        duration = await maintenance_service.run_calibration(actuator, pump)
    except DispenseError as e:
        raise dispense_http_error(e)
    return CalibrationRunOut(pump_id=pump_id, duration_ms=duration)


@router.post("/{pump_id}/calibration", response_model=PumpOut)
def apply_calibration_endpoint(
    pump_id: int,
    data: CalibrationResultIn,
    db: Session = Depends(get_db),
):
    """Step 2: store the measured amount as the new flow rate."""
    pump = pumps_service.get_pump_by_id(db, pump_id)
    if not pump:
        raise HTTPException(status_code=404, detail="Pump not found")
    return maintenance_service.apply_calibration(db, pump, data.measured_ml, data.duration_ms)


@router.post("/{pump_id}/vent", response_model=MaintenanceOut)
async def vent_pump_endpoint(
    pump_id: int,
    req: VentRequest,
    db: Session = Depends(get_db),
    actuator: ActuatorGateway = Depends(get_actuator),
):
    pump = await run_in_threadpool(pumps_service.get_pump_by_id, db, pump_id)
    if not pump:
        raise HTTPException(status_code=404, detail="Pump not found")
    try:
        await maintenance_service.vent_pump(actuator, pump, req.duration_ms)
    except DispenseError as e:
        raise dispense_http_error(e)
    return MaintenanceOut(pump_ids=[pump_id], duration_ms=req.duration_ms)
