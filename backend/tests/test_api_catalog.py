# tests/test_api_catalog.py

API = "/api/v1"

COOLER = {
    "id": "tropical-cooler",
    "name": "Tropical Cooler",
    "alcoholic": False,
    "recipe": [
        {"ingredient_id": "pineapple-juice", "volume_ml": 80},
        {"ingredient_id": "passion-fruit-juice", "volume_ml": 60},
        {"ingredient_id": "grenadine", "volume_ml": 10, "pour_style": "float"},
        {"ingredient_id": "mint", "volume_ml": 5, "dispense_class": "manual", "instructions": "Garnish"},
    ],
}


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["busy"] is False


def test_seeded_ingredients(client):
    res = client.get(f"{API}/ingredients/")
    assert res.status_code == 200
    ids = [item["id"] for item in res.json()]
    assert "white-rum" in ids
    assert "grenadine" in ids


def test_ingredient_crud(client):
    res = client.post(f"{API}/ingredients/", json={"id": "amaretto", "name": "Amaretto", "alcoholic": True, "category": "liqueur"})
    assert res.status_code == 201

    assert client.post(f"{API}/ingredients/", json={"id": "amaretto", "name": "Amaretto"}).status_code == 409
    assert client.get(f"{API}/ingredients/amaretto").json()["name"] == "Amaretto"

    assert client.delete(f"{API}/ingredients/amaretto").status_code == 204
    assert client.get(f"{API}/ingredients/amaretto").status_code == 404


def test_cocktail_crud(client):
    res = client.post(f"{API}/cocktails/", json=COOLER)
    assert res.status_code == 201
    body = res.json()
    assert [line["ingredient_id"] for line in body["recipe"]] == [
        "pineapple-juice", "passion-fruit-juice", "grenadine", "mint",
    ]
    assert [line["position"] for line in body["recipe"]] == [0, 1, 2, 3]
    assert body["recipe"][2]["pour_style"] == "float"

    assert client.post(f"{API}/cocktails/", json=COOLER).status_code == 409

    res = client.put(
        f"{API}/cocktails/tropical-cooler",
        json={"name": "Cooler", "recipe": [{"ingredient_id": "pineapple-juice", "volume_ml": 150}]},
    )
    assert res.status_code == 200
    assert res.json()["name"] == "Cooler"
    assert len(res.json()["recipe"]) == 1

    non_alcoholic = client.get(f"{API}/cocktails/", params={"alcoholic": False}).json()
    assert "tropical-cooler" in [c["id"] for c in non_alcoholic]
    assert "mai-tai" not in [c["id"] for c in non_alcoholic]

    assert client.delete(f"{API}/cocktails/tropical-cooler").status_code == 204
    assert client.get(f"{API}/cocktails/tropical-cooler").status_code == 404


def test_cocktail_validation(client):
    empty = dict(COOLER, recipe=[])
    assert client.post(f"{API}/cocktails/", json=empty).status_code == 422

    negative = dict(COOLER, recipe=[{"ingredient_id": "grenadine", "volume_ml": -5}])
    assert client.post(f"{API}/cocktails/", json=negative).status_code == 422

    bad_class = dict(COOLER, recipe=[{"ingredient_id": "grenadine", "volume_ml": 5, "dispense_class": "robot"}])
    assert client.post(f"{API}/cocktails/", json=bad_class).status_code == 422


def test_cocktail_availability(client):
    res = client.get(f"{API}/cocktails/mai-tai/availability", params={"size": 300})
    assert res.status_code == 200
    assert res.json()["can_make"] is True

    client.put(f"{API}/levels/1", json={"current_ml": 120})
    body = client.get(f"{API}/cocktails/mai-tai/availability", params={"size": 300}).json()
    assert body["can_make"] is False
    assert body["missing_ingredients"] == ["white-rum"]

    assert client.get(f"{API}/cocktails/nope/availability", params={"size": 300}).status_code == 404


def test_levels(client):
    levels = client.get(f"{API}/levels/").json()
    assert len(levels) == 10
    assert levels[0]["ingredient_id"] == "white-rum"
    assert levels[0]["percentage"] == 100

    res = client.put(f"{API}/levels/1", json={"current_ml": 40})
    assert res.status_code == 200
    body = res.json()
    assert body["current_ml"] == 40
    assert body["low"] is True
    assert body["critical"] is True

    # refill above capacity is clamped
    assert client.put(f"{API}/levels/1", json={"current_ml": 5000}).json()["current_ml"] == 1000
    assert client.put(f"{API}/levels/1", json={"current_ml": -1}).status_code == 422
    assert client.put(f"{API}/levels/99", json={"current_ml": 10}).status_code == 404

    client.put(f"{API}/levels/2", json={"current_ml": 10})
    refilled = client.post(f"{API}/levels/refill_all").json()
    assert all(level["current_ml"] == level["capacity_ml"] for level in refilled)


def test_reset_restores_default_cocktails(client):
    client.post(f"{API}/cocktails/", json=COOLER)
    client.put(f"{API}/cocktails/mai-tai", json={"name": "My Mai Tai", "recipe": [{"ingredient_id": "white-rum", "volume_ml": 50}]})
    client.delete(f"{API}/cocktails/virgin-sunrise")

    res = client.post(f"{API}/cocktails/reset")
    assert res.status_code == 200
    ids = sorted(c["id"] for c in res.json())
    assert ids == ["mai-tai", "planters-punch", "rum-sunrise", "virgin-sunrise"]

    mai_tai = client.get(f"{API}/cocktails/mai-tai").json()
    assert mai_tai["name"] == "Mai Tai"
    assert [line["ingredient_id"] for line in mai_tai["recipe"]] == ["white-rum", "orange-juice", "grenadine"]
    assert client.get(f"{API}/cocktails/tropical-cooler").status_code == 404
