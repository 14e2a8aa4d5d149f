# tests/test_api_dispense.py

API = "/api/v1"


def _levels(client):
    return {level["pump_id"]: level["current_ml"] for level in client.get(f"{API}/levels/").json()}


def test_sizes(client):
    body = client.get(f"{API}/dispense/sizes").json()
    assert body == {"cocktail_sizes": [200, 300, 400], "shot_size": 20}


def test_schedule_preview(client, actuator):
    res = client.get(f"{API}/dispense/schedule/mai-tai", params={"size": 300})
    assert res.status_code == 200
    body = res.json()

    first, second = body["batches"]
    assert {run["ingredient_id"]: run["volume_ml"] for run in first["runs"]} == {
        "white-rum": 150, "orange-juice": 113,
    }
    assert second["runs"] == [
        {"pump_id": 8, "pin": 6, "ingredient_id": "grenadine", "volume_ml": 38, "duration_ms": 38000},
    ]
    assert actuator.calls == []


def test_dispense_cocktail(client, actuator):
    res = client.post(f"{API}/dispense/cocktail", json={"cocktail_id": "mai-tai", "size_ml": 300})
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "COMPLETED"
    assert body["target_id"] == "mai-tai"
    assert len(body["batches"]) == 2

    levels = _levels(client)
    assert levels[1] == 850
    assert levels[4] == 887
    assert levels[8] == 962

    runs = client.get(f"{API}/dispense/runs").json()
    assert runs[0]["id"] == body["run_id"]
    assert runs[0]["status"] == "COMPLETED"


def test_dispense_unknown_cocktail(client):
    res = client.post(f"{API}/dispense/cocktail", json={"cocktail_id": "nope", "size_ml": 300})
    assert res.status_code == 404


def test_dispense_shot(client, actuator):
    res = client.post(f"{API}/dispense/shot", json={"ingredient_id": "vodka", "size_ml": 40})
    assert res.status_code == 200
    assert res.json()["batches"][0]["runs"][0]["volume_ml"] == 40
    assert _levels(client)[3] == 960


def test_insufficient_stock_is_409(client, actuator):
    client.put(f"{API}/levels/1", json={"current_ml": 100})

    res = client.post(f"{API}/dispense/cocktail", json={"cocktail_id": "mai-tai", "size_ml": 300})
    assert res.status_code == 409
    detail = res.json()["detail"]
    assert detail["kind"] == "insufficient_stock"
    assert detail["missing_ingredients"] == ["white-rum"]
    assert detail["partial"] is False
    assert actuator.calls == []


def test_unresolved_ingredient_is_409(client, actuator):
    client.patch(f"{API}/pumps/8", json={"enabled": False})

    res = client.post(f"{API}/dispense/cocktail", json={"cocktail_id": "mai-tai", "size_ml": 300})
    assert res.status_code == 409
    assert res.json()["detail"]["kind"] == "unresolved_ingredient"
    assert res.json()["detail"]["ingredient_id"] == "grenadine"
    assert actuator.calls == []

    res = client.post(f"{API}/dispense/shot", json={"ingredient_id": "gin"})
    assert res.status_code == 409


def test_actuator_fault_is_502_and_partial(client, actuator):
    actuator.fail_addresses.add(23)

    res = client.post(f"{API}/dispense/cocktail", json={"cocktail_id": "mai-tai", "size_ml": 300})
    assert res.status_code == 502
    detail = res.json()["detail"]
    assert detail["kind"] == "actuator_fault"
    assert detail["pump_id"] == 4
    assert detail["partial"] is True

    levels = _levels(client)
    assert levels[1] == 850
    assert levels[4] == 1000
    assert levels[8] == 1000

    runs = client.get(f"{API}/dispense/runs", params={"target_id": "mai-tai"}).json()
    assert runs[0]["status"] == "FAILED"


def test_cancel_when_idle(client):
    assert client.post(f"{API}/dispense/cancel").json() == {"cancelled": False}
