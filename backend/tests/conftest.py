# tests/conftest.py

import os

# must be in place before cocktailbot.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ACTUATOR_BACKEND"] = "simulated"
os.environ["SIMULATION_TIME_SCALE"] = "0"
os.environ["SETTLE_DELAY_MS"] = "0"

import pytest
from fastapi.testclient import TestClient

from cocktailbot.actuators.simulated import SimulatedActuatorGateway
from cocktailbot.api.deps import get_actuator
from cocktailbot.db import models  # noqa: F401
from cocktailbot.db.session import Base, SessionLocal, engine
from cocktailbot.dispense.types import Cocktail, PumpMapping, RecipeLine, TankLevel
from cocktailbot.services import seed_service


@pytest.fixture()
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        seed_service.seed_defaults(session)
        yield session
    finally:
        session.close()


@pytest.fixture()
def actuator():
    return SimulatedActuatorGateway(time_scale=0)


@pytest.fixture()
def client(db, actuator):
    from cocktailbot.main import app

    app.dependency_overrides[get_actuator] = lambda: actuator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ===== plain domain fixtures for the core tests =====

@pytest.fixture()
def mai_tai():
    return Cocktail(
        id="mai-tai",
        name="Mai Tai",
        lines=(
            RecipeLine("rum", 40),
            RecipeLine("juice", 30),
            RecipeLine("grenadine", 10),
        ),
    )


@pytest.fixture()
def mai_tai_pumps():
    return [
        PumpMapping(pump_id=1, ingredient_id="rum", flow_rate_ml_s=20, address=17),
        PumpMapping(pump_id=2, ingredient_id="juice", flow_rate_ml_s=15, address=27),
        PumpMapping(pump_id=3, ingredient_id="grenadine", flow_rate_ml_s=10, address=22),
    ]


@pytest.fixture()
def full_tanks():
    return [
        TankLevel(pump_id=1, current_ml=1000, capacity_ml=1000),
        TankLevel(pump_id=2, current_ml=1000, capacity_ml=1000),
        TankLevel(pump_id=3, current_ml=1000, capacity_ml=1000),
    ]
