# cocktailbot/actuators/factory.py

from functools import lru_cache

from cocktailbot.actuators.base import ActuatorGateway
from cocktailbot.core.config import Settings, settings


def build_actuator(cfg: Settings) -> ActuatorGateway:
    backend = cfg.ACTUATOR_BACKEND.strip().lower()

    if backend == "simulated":
        from cocktailbot.actuators.simulated import SimulatedActuatorGateway
        return SimulatedActuatorGateway(time_scale=cfg.SIMULATION_TIME_SCALE)

    if backend == "subprocess":
        from cocktailbot.actuators.subprocess_gateway import SubprocessActuatorGateway
        return SubprocessActuatorGateway(script=cfg.PUMP_HELPER_SCRIPT, python_bin=cfg.PYTHON_BIN)

    if backend == "mqtt":
        from cocktailbot.actuators.mqtt_gateway import MqttActuatorGateway
        return MqttActuatorGateway(
            host=cfg.MQTT_BROKER_HOST,
            port=cfg.MQTT_BROKER_PORT,
            client_id=cfg.MQTT_CLIENT_ID,
            command_topic=cfg.MQTT_PUMP_CMD_TOPIC,
            result_topic=cfg.MQTT_PUMP_RESULT_TOPIC,
        )

    raise ValueError(f"unknown ACTUATOR_BACKEND: {cfg.ACTUATOR_BACKEND!r}")


@lru_cache
def get_actuator() -> ActuatorGateway:
    # one gateway per process so the per-pin locks are shared by every request
    return build_actuator(settings)
