# cocktailbot/core/config.py

from functools import lru_cache
from typing import FrozenSet, List

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseSettings):
    # .env first, then the process environment
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Cocktail Machine Backend"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./cocktailbot.db"

    BACKEND_CORS_ORIGINS: str = ""

    # simulated | subprocess | mqtt
    ACTUATOR_BACKEND: str = "simulated"
    PUMP_HELPER_SCRIPT: str = "pump_control.py"
    PYTHON_BIN: str = "python3"
    SIMULATION_TIME_SCALE: float = 1.0

    MQTT_BROKER_HOST: str = "localhost"
    MQTT_BROKER_PORT: int = 1883
    MQTT_CLIENT_ID: str = "cocktailbot-backend"
    MQTT_PUMP_CMD_TOPIC: str = "machine/cmd/pump"
    MQTT_PUMP_RESULT_TOPIC: str = "machine/event/pump_result"

    # dispense rules
    DEFERRED_INGREDIENTS: str = "grenadine"
    SETTLE_DELAY_MS: int = 2000
    LOW_STOCK_MULTIPLIER: float = 2.0
    ACTUATOR_WATCHDOG_MARGIN_MS: int = 5000

    SERVING_SIZES: str = "200,300,400"
    SHOT_SIZE_ML: int = 20

    CALIBRATION_RUN_MS: int = 2000

    # tank level warnings (ml)
    LOW_LEVEL_ML: float = 100.0
    CRITICAL_LEVEL_ML: float = 50.0

    PUMP_COUNT: int = 10
    DEFAULT_TANK_CAPACITY_ML: float = 1000.0

    @property
    def cors_origins(self) -> List[str]:
        return _split_csv(self.BACKEND_CORS_ORIGINS)

    @property
    def deferred_ingredients(self) -> FrozenSet[str]:
        return frozenset(_split_csv(self.DEFERRED_INGREDIENTS))

    @property
    def serving_sizes(self) -> List[int]:
        return [int(size) for size in _split_csv(self.SERVING_SIZES)]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
