# cocktailbot/main.py

from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cocktailbot.actuators.factory import get_actuator
from cocktailbot.core.config import settings
from cocktailbot.core.log_setup import setup_logging
from cocktailbot.db import init_db

from cocktailbot.api.v1 import cocktails as cocktails_router
from cocktailbot.api.v1 import dispense as dispense_router
from cocktailbot.api.v1 import ingredients as ingredients_router
from cocktailbot.api.v1 import levels as levels_router
from cocktailbot.api.v1 import pumps as pumps_router

from cocktailbot.api import ws as ws_router
from cocktailbot.services.dispense_service import machine
from cocktailbot.ws.bus import ws_bus

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.APP_NAME)

    # tables + default catalog / pumps on first start
    init_db.init()

    origins = settings.cors_origins
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # REST API
    app.include_router(ingredients_router.router, prefix="/api/v1")
    app.include_router(cocktails_router.router, prefix="/api/v1")
    app.include_router(pumps_router.router, prefix="/api/v1")
    app.include_router(levels_router.router, prefix="/api/v1")
    app.include_router(dispense_router.router, prefix="/api/v1")

    # progress events for the touchscreen
    app.include_router(ws_router.router)

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "actuator": settings.ACTUATOR_BACKEND,
            "busy": machine.busy,
            "activity": machine.activity,
        }

    @app.on_event("startup")
    async def on_startup():
        ws_bus.set_loop(asyncio.get_running_loop())
        asyncio.create_task(ws_bus.run())

        # MQTT gateway connects here; the others have nothing to open
        get_actuator().start()
        logger.info("actuator backend: %s", settings.ACTUATOR_BACKEND)

    @app.on_event("shutdown")
    async def on_shutdown():
        get_actuator().stop()

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("cocktailbot.main:app", host="0.0.0.0", port=8000)
