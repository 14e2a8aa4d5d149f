# cocktailbot/actuators/mqtt_gateway.py

from __future__ import annotations

import asyncio
import json
import logging
import threading
import uuid
from typing import Dict, Tuple

import paho.mqtt.client as mqtt

from cocktailbot.actuators.base import ActuationResult, ActuatorGateway

logger = logging.getLogger(__name__)


class MqttActuatorGateway(ActuatorGateway):
    """Pump control through a bridge on the other side of an MQTT broker.

    - publish  <command_topic>: {"request_id", "pin", "duration_ms"}
    - receive  <result_topic>:  {"request_id", "status": "OK"|..., "detail"}

    paho runs its network loop in its own thread, so results are handed back to
    the waiting coroutine with call_soon_threadsafe.
    """

    name = "mqtt"

    def __init__(
        self,
        host: str,
        port: int,
        client_id: str,
        command_topic: str,
        result_topic: str,
    ) -> None:
        super().__init__()
        self.host = host
        self.port = port
        self.command_topic = command_topic
        self.result_topic = result_topic

        self.client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id,
            clean_session=True,
        )
        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message

        self._pending: Dict[str, Tuple[asyncio.AbstractEventLoop, asyncio.Future]] = {}
        self._pending_lock = threading.Lock()

    # ========== start / stop ==========

    def start(self) -> None:
        logger.info("[MQTT] connecting to %s:%s", self.host, self.port)
        self.client.connect(self.host, self.port, keepalive=60)

        t = threading.Thread(target=self.client.loop_forever, daemon=True)
        t.start()
        logger.info("[MQTT] loop thread started")

    def stop(self) -> None:
        self.client.disconnect()

    # ========== callbacks ==========

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        logger.info("[MQTT] connected rc=%s", reason_code)
        client.subscribe(self.result_topic, qos=1)
        logger.info("[MQTT] subscribed: %s", self.result_topic)

    def _on_message(self, client, userdata, msg):
        if msg.topic != self.result_topic:
            return
        try:
            data = json.loads(msg.payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("[MQTT] payload decode error: %r", e)
            return

        request_id = data.get("request_id")
        with self._pending_lock:
            waiter = self._pending.get(request_id)
        if waiter is None:
            logger.debug("[MQTT] result for unknown request %s", request_id)
            return

        status = str(data.get("status", "")).upper()
        result = ActuationResult(ok=status == "OK", detail=str(data.get("detail") or status))

        loop, future = waiter
        loop.call_soon_threadsafe(_resolve_future, future, result)

    # ========== activation ==========

    async def _run(self, address: int, duration_ms: int) -> ActuationResult:
        loop = asyncio.get_running_loop()
        request_id = uuid.uuid4().hex
        future = loop.create_future()

        with self._pending_lock:
            self._pending[request_id] = (loop, future)
        try:
            payload = json.dumps({
                "request_id": request_id,
                "pin": address,
                "duration_ms": duration_ms,
            })
            logger.debug("[MQTT] publish -> %s: %s", self.command_topic, payload)
            info = self.client.publish(self.command_topic, payload, qos=1, retain=False)
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                return ActuationResult(ok=False, detail=f"publish failed rc={info.rc}")
            return await future
        finally:
            with self._pending_lock:
                self._pending.pop(request_id, None)


def _resolve_future(future: asyncio.Future, result: ActuationResult) -> None:
    if not future.done():
        future.set_result(result)
