# cocktailbot/api/deps.py

from typing import Generator

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from cocktailbot.actuators.base import ActuatorGateway
from cocktailbot.actuators.factory import get_actuator as _get_actuator
from cocktailbot.core.errors import ActuatorFault, DispenseError, InvalidRecipe
from cocktailbot.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actuator() -> ActuatorGateway:
    return _get_actuator()


def dispense_http_error(error: DispenseError) -> HTTPException:
    """Map the dispense error taxonomy onto HTTP status codes."""
    if isinstance(error, InvalidRecipe):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(error, ActuatorFault):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        # unresolved ingredient, calibration fault, insufficient stock, busy, cancelled
        code = status.HTTP_409_CONFLICT
    return HTTPException(status_code=code, detail=error.to_dict())
