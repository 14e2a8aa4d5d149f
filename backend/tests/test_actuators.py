# tests/test_actuators.py

import asyncio
import json
import sys
from types import SimpleNamespace

import paho.mqtt.client as mqtt
import pytest

from cocktailbot.actuators.factory import build_actuator
from cocktailbot.actuators.mqtt_gateway import MqttActuatorGateway
from cocktailbot.actuators.simulated import SimulatedActuatorGateway
from cocktailbot.actuators.subprocess_gateway import SubprocessActuatorGateway
from cocktailbot.core.config import Settings


HELPER = """
import sys
_, cmd, pin, ms = sys.argv
if pin == "99":
    print("GPIO busy", file=sys.stderr)
    sys.exit(1)
print(f"ok {cmd} {pin} {ms}")
"""


# ===== base behaviour =====

def test_non_positive_duration_is_rejected_without_running():
    actuator = SimulatedActuatorGateway(time_scale=0)
    result = asyncio.run(actuator.activate(17, 0))
    assert not result.ok
    assert actuator.calls == []


def test_same_pin_calls_are_serialized():
    actuator = SimulatedActuatorGateway(time_scale=1.0)

    async def scenario():
        first = asyncio.create_task(actuator.activate(17, 50))
        await asyncio.sleep(0.01)
        second = asyncio.create_task(actuator.activate(17, 10))
        other = asyncio.create_task(actuator.activate(27, 10))
        return await asyncio.gather(first, second, other)

    results = asyncio.run(scenario())

    assert all(result.ok for result in results)
    # the second pin-17 call waited for the first; pin 27 did not
    assert actuator.finished == [27, 17, 17]
    assert actuator.calls == [(17, 50), (27, 10), (17, 10)]


# ===== subprocess =====

@pytest.fixture()
def helper_script(tmp_path):
    path = tmp_path / "pump_helper.py"
    path.write_text(HELPER)
    return str(path)


def test_subprocess_success(helper_script):
    actuator = SubprocessActuatorGateway(script=helper_script, python_bin=sys.executable)
    result = asyncio.run(actuator.activate(17, 1500))
    assert result.ok
    assert result.detail == "ok activate 17 1500"


def test_subprocess_failure_passes_stderr(helper_script):
    actuator = SubprocessActuatorGateway(script=helper_script, python_bin=sys.executable)
    result = asyncio.run(actuator.activate(99, 1500))
    assert not result.ok
    assert result.detail == "GPIO busy"


def test_subprocess_missing_script(tmp_path):
    actuator = SubprocessActuatorGateway(script=str(tmp_path / "nope.py"), python_bin=sys.executable)
    result = asyncio.run(actuator.activate(17, 1500))
    assert not result.ok
    assert "not found" in result.detail


# ===== mqtt =====

def _mqtt_gateway():
    return MqttActuatorGateway(
        host="localhost",
        port=1883,
        client_id="test",
        command_topic="machine/cmd/pump",
        result_topic="machine/event/pump_result",
    )


def _reply(gateway, payload):
    msg = SimpleNamespace(topic=gateway.result_topic, payload=json.dumps(payload).encode("utf-8"))
    gateway._on_message(gateway.client, None, msg)


@pytest.mark.parametrize("status, ok", [("OK", True), ("ERROR", False)])
def test_mqtt_round_trip(monkeypatch, status, ok):
    gateway = _mqtt_gateway()
    published = []

    def fake_publish(topic, payload, qos=0, retain=False):
        published.append((topic, json.loads(payload)))
        return SimpleNamespace(rc=mqtt.MQTT_ERR_SUCCESS)

    monkeypatch.setattr(gateway.client, "publish", fake_publish)

    async def scenario():
        task = asyncio.create_task(gateway.activate(17, 2500))
        while not published:
            await asyncio.sleep(0)
        _, body = published[0]
        _reply(gateway, {"request_id": "someone-else", "status": "OK"})
        _reply(gateway, {"request_id": body["request_id"], "status": status, "detail": "done"})
        return await task

    result = asyncio.run(asyncio.wait_for(scenario(), timeout=5))

    topic, body = published[0]
    assert topic == "machine/cmd/pump"
    assert body["pin"] == 17
    assert body["duration_ms"] == 2500
    assert result.ok is ok
    assert result.detail == "done"
    assert gateway._pending == {}


def test_mqtt_publish_failure(monkeypatch):
    gateway = _mqtt_gateway()
    monkeypatch.setattr(
        gateway.client, "publish",
        lambda *a, **kw: SimpleNamespace(rc=mqtt.MQTT_ERR_NO_CONN),
    )
    result = asyncio.run(gateway.activate(17, 2500))
    assert not result.ok
    assert "publish failed" in result.detail


def test_mqtt_ignores_garbage_payload():
    gateway = _mqtt_gateway()
    gateway._on_message(gateway.client, None, SimpleNamespace(topic=gateway.result_topic, payload=b"{not json"))


# ===== factory =====

def test_factory_selects_backend():
    assert isinstance(build_actuator(Settings(ACTUATOR_BACKEND="simulated")), SimulatedActuatorGateway)
    assert isinstance(build_actuator(Settings(ACTUATOR_BACKEND="Subprocess")), SubprocessActuatorGateway)
    assert isinstance(build_actuator(Settings(ACTUATOR_BACKEND="mqtt")), MqttActuatorGateway)


def test_factory_rejects_unknown_backend():
    with pytest.raises(ValueError):
        build_actuator(Settings(ACTUATOR_BACKEND="relay-board"))


# ===== bridge (other side of the mqtt gateway) =====

def _bridge(actuator, published):
    from cocktailbot.bridge import PumpBridge

    bridge = PumpBridge(actuator, "machine/cmd/pump", "machine/event/pump_result")
    bridge.client.publish = lambda topic, payload, qos=0, retain=False: published.append((topic, json.loads(payload)))
    return bridge


def test_bridge_runs_pump_and_reports():
    actuator = SimulatedActuatorGateway(time_scale=0, fail_addresses=[27])
    published = []
    bridge = _bridge(actuator, published)

    ok = asyncio.run(bridge.execute({"request_id": "a", "pin": 17, "duration_ms": 1200}))
    failed = asyncio.run(bridge.execute({"request_id": "b", "pin": 27, "duration_ms": 1200}))

    assert ok["status"] == "OK"
    assert failed["status"] == "ERROR"
    assert actuator.calls == [(17, 1200), (27, 1200)]
    assert [(topic, body["request_id"]) for topic, body in published] == [
        ("machine/event/pump_result", "a"),
        ("machine/event/pump_result", "b"),
    ]


def test_bridge_rejects_incomplete_command():
    actuator = SimulatedActuatorGateway(time_scale=0)
    published = []
    bridge = _bridge(actuator, published)

    result = asyncio.run(bridge.execute({"request_id": "c", "pin": 17}))

    assert result["status"] == "ERROR"
    assert actuator.calls == []
    assert published[0][1]["request_id"] == "c"


def test_bridge_answers_when_the_gateway_raises(helper_script, tmp_path):
    # interpreter does not exist: create_subprocess_exec raises FileNotFoundError
    actuator = SubprocessActuatorGateway(script=helper_script, python_bin=str(tmp_path / "no-python"))
    published = []
    bridge = _bridge(actuator, published)

    result = asyncio.run(bridge.execute({"request_id": "d", "pin": 17, "duration_ms": 500}))

    assert result["status"] == "ERROR"
    assert "FileNotFoundError" in result["detail"]
    assert published == [("machine/event/pump_result", result)]
