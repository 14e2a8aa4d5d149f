# cocktailbot/bridge.py
"""
Pump bridge for the MQTT actuator backend.

Runs on the machine that owns the GPIO pins. Takes pump commands from the
broker, drives them through a local gateway (normally the GPIO helper
script) and answers on the result topic:

    <cmd topic>    {"request_id", "pin", "duration_ms"}
    <result topic> {"request_id", "pin", "status": "OK"|"ERROR", "detail"}
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import paho.mqtt.client as mqtt

from cocktailbot.actuators.base import ActuatorGateway
from cocktailbot.actuators.subprocess_gateway import SubprocessActuatorGateway
from cocktailbot.core.config import settings
from cocktailbot.core.log_setup import setup_logging

logger = logging.getLogger(__name__)


class PumpBridge:
    def __init__(
        self,
        actuator: ActuatorGateway,
        command_topic: str,
        result_topic: str,
        client: Optional[mqtt.Client] = None,
    ) -> None:
        self.actuator = actuator
        self.command_topic = command_topic
        self.result_topic = result_topic
        self.loop: Optional[asyncio.AbstractEventLoop] = None

        self.client = client or mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id="cocktailbot-bridge")
        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        logger.info("[BRIDGE] connected rc=%s", reason_code)
        client.subscribe(self.command_topic, qos=1)
        logger.info("[BRIDGE] subscribed: %s", self.command_topic)

    def _on_message(self, client, userdata, msg):
        if msg.topic != self.command_topic:
            return
        try:
            data = json.loads(msg.payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("[BRIDGE] invalid JSON payload for pump cmd")
            return

        if self.loop is None:
            logger.error("[BRIDGE] command received before the loop is running")
            return
        # paho thread -> asyncio loop
        future = asyncio.run_coroutine_threadsafe(self.execute(data), self.loop)
        future.add_done_callback(_log_failure)

    def _publish(self, result: Dict[str, Any]) -> None:
        self.client.publish(self.result_topic, json.dumps(result), qos=1)

    async def execute(self, data: Dict[str, Any]) -> Dict[str, Any]:
        request_id = data.get("request_id")
        result: Dict[str, Any] = {"request_id": request_id, "pin": data.get("pin")}

        try:
            pin = int(data["pin"])
            duration_ms = int(data["duration_ms"])
        except (KeyError, TypeError, ValueError):
            result.update(status="ERROR", detail="pin and duration_ms are required")
            logger.warning("[BRIDGE] rejected %s: %s", request_id, data)
            self._publish(result)
            return result

        logger.info("[BRIDGE] pin %s for %sms (%s)", pin, duration_ms, request_id)
        try:
            outcome = await self.actuator.activate(pin, duration_ms)
        except Exception as e:
            # the API side is waiting on this request_id; always answer
            logger.exception("[BRIDGE] pin %s failed to run", pin)
            result.update(status="ERROR", detail=f"{type(e).__name__}: {e}")
        else:
            result.update(status="OK" if outcome.ok else "ERROR", detail=outcome.detail)
        self._publish(result)
        return result

    def run_forever(self, host: str, port: int) -> None:
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)

        logger.info("[BRIDGE] connecting to %s:%s", host, port)
        self.client.connect(host, port, 60)
        self.client.loop_start()
        try:
            self.loop.run_forever()
        except KeyboardInterrupt:
            logger.info("[BRIDGE] KeyboardInterrupt, exiting")
        finally:
            self.client.loop_stop()
            self.client.disconnect()
            self.loop.close()


def _log_failure(future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logger.error("[BRIDGE] command handler crashed: %r", future.exception())


def run() -> None:
    setup_logging()
    bridge = PumpBridge(
        actuator=SubprocessActuatorGateway(script=settings.PUMP_HELPER_SCRIPT, python_bin=settings.PYTHON_BIN),
        command_topic=settings.MQTT_PUMP_CMD_TOPIC,
        result_topic=settings.MQTT_PUMP_RESULT_TOPIC,
    )
    bridge.run_forever(settings.MQTT_BROKER_HOST, settings.MQTT_BROKER_PORT)


if __name__ == "__main__":
    run()
