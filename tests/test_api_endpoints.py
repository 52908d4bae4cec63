"""Tests for the HTTP API."""

from uuid import uuid4

from fastapi.testclient import TestClient

from energy_balance.api.app import create_app
from tests.conftest import InMemoryStore

PROFILE_PAYLOAD = {
    "name": "Alex",
    "birth_date": "1996-01-15",
    "sex": "male",
    "height_cm": 180,
    "weight_kg": 80,
    "goal": "lose",
}


def _client(container) -> TestClient:  # type: ignore[no-untyped-def]
    return TestClient(create_app(container))


def _create_profile(client: TestClient, **overrides: object) -> dict:
    response = client.post("/profiles", json={**PROFILE_PAYLOAD, **overrides})
    assert response.status_code == 201
    return response.json()["profile"]


def test_health(container) -> None:
    response = _client(container).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_profile_lifecycle(container) -> None:
    client = _client(container)
    first = _create_profile(client)
    second = _create_profile(client, name="Sam", make_current=False)

    listed = client.get("/profiles").json()
    assert [profile["name"] for profile in listed["profiles"]] == ["Alex", "Sam"]
    assert listed["current_profile_id"] == first["id"]

    patched = client.patch(f"/profiles/{first['id']}", json={"weight_kg": 78.5})
    assert patched.status_code == 200
    assert patched.json()["profile"]["weight_kg"] == 78.5

    selected = client.post(f"/profiles/{second['id']}/select")
    assert selected.json()["profile"]["is_current"] is True

    assert client.delete(f"/profiles/{first['id']}").status_code == 204
    assert client.get(f"/profiles/{first['id']}").status_code == 404


def test_profile_validation_error_names_field(container) -> None:
    response = _client(container).post(
        "/profiles", json={**PROFILE_PAYLOAD, "height_cm": 0}
    )

    assert response.status_code == 422
    assert response.json()["detail"] == {
        "field": "height",
        "message": "Height must be greater than zero.",
    }


def test_unknown_timezone_is_rejected(container) -> None:
    response = _client(container).post(
        "/profiles", json={**PROFILE_PAYLOAD, "timezone": "Nowhere/City"}
    )

    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "timezone"


def test_energy_preview_and_recalculate(container, store: InMemoryStore) -> None:
    client = _client(container)
    profile = _create_profile(client)
    inputs = {
        "age": 30,
        "sex": "male",
        "height": 180,
        "weight": 80,
        "activity_level": "moderate",
        "goal": "lose",
    }

    preview = client.post("/energy/preview", json=inputs)
    assert preview.status_code == 200
    assert round(preview.json()["calculation"]["bmr"]) == 1780
    assert store.energy.records == []

    saved = client.post(
        "/energy/recalculate", json={**inputs, "profile_id": profile["id"]}
    )
    assert saved.status_code == 201

    energy = client.get(f"/profiles/{profile['id']}/energy").json()
    assert round(energy["active"]["target_calories"]) == 2259
    assert len(energy["history"]) == 1
    assert energy["advice_context"]["goal"] == "lose"


def test_energy_and_dashboard_agree_on_active_record_for_same_instant(
    container,
) -> None:
    client = _client(container)
    profile = _create_profile(client)
    inputs = {"age": 30, "sex": "male", "height": 180, "weight": 80}

    for goal in ("lose", "gain"):
        saved = client.post(
            "/energy/recalculate",
            json={**inputs, "goal": goal, "profile_id": profile["id"]},
        )
        assert saved.status_code == 201

    energy = client.get(f"/profiles/{profile['id']}/energy").json()
    dashboard = client.get(f"/profiles/{profile['id']}/dashboard").json()

    active = dashboard["dashboard"]["active_record"]
    assert energy["active"]["id"] == active["id"]
    assert energy["history"][0]["id"] == active["id"]
    assert round(active["target_calories"]) == 3259
    assert energy["advice_context"]["goal"] == "gain"


def test_energy_preview_requires_age(container) -> None:
    response = _client(container).post(
        "/energy/preview", json={"sex": "female", "height": 165, "weight": 60}
    )

    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "age"


def test_meal_logging_and_favorites(container) -> None:
    client = _client(container)
    profile = _create_profile(client)
    food = client.post(
        "/foods",
        json={"name": "Yogurt", "calories": 120, "protein_g": 10, "carbs_g": 9},
    ).json()["food"]

    logged = client.post(
        f"/profiles/{profile['id']}/meals",
        json={"food_item_id": food["id"], "quantity": 2},
    )
    assert logged.status_code == 201
    meal = logged.json()["meal"]
    assert meal["calories"] == 240
    assert meal["meal_type"] == "lunch"

    toggled = client.post(f"/profiles/{profile['id']}/favorites/{meal['id']}")
    assert toggled.json()["is_favorite"] is True

    dashboard = client.get(f"/profiles/{profile['id']}/dashboard").json()
    assert dashboard["dashboard"]["calories"]["consumed"] == 240
    assert dashboard["dashboard"]["today_meals"][0]["is_favorite"] is True
    assert dashboard["is_stale"] is False

    deleted = client.delete(f"/profiles/{profile['id']}/meals/{meal['id']}")
    assert deleted.status_code == 204


def test_meal_with_unknown_food_is_not_found(container) -> None:
    client = _client(container)
    profile = _create_profile(client)

    response = client.post(
        f"/profiles/{profile['id']}/meals", json={"food_item_id": str(uuid4())}
    )

    assert response.status_code == 404


def test_water_endpoints(container, store: InMemoryStore) -> None:
    client = _client(container)
    profile = _create_profile(client)
    base = f"/profiles/{profile['id']}/water"

    assert client.post(base, json={}).json()["water"]["total_ml"] == 250
    added = client.post(base, json={"ml": 150}).json()["water"]
    assert (added["total_ml"], added["glasses"]) == (400, 2)

    removed = client.post(f"{base}/remove", json={"ml": 100}).json()["water"]
    assert (removed["total_ml"], removed["glasses"]) == (300, 1)

    assert client.post(base, json={"ml": 0}).status_code == 422
    assert client.delete(base).status_code == 204
    assert store.water.records == {}


def test_sleep_endpoints(container) -> None:
    client = _client(container)
    profile = _create_profile(client)
    base = f"/profiles/{profile['id']}/sleep"

    logged = client.put(
        base,
        json={
            "bedtime": "2026-10-16T23:00:00+00:00",
            "wake_time": "2026-10-17T06:30:00+00:00",
            "quality": 2,
        },
    )
    assert logged.status_code == 200
    assert logged.json()["sleep"]["hours"] == 7.5

    patched = client.patch(base, json={"quality": 4})
    assert patched.json()["sleep"]["quality"] == 4
    assert patched.json()["sleep"]["hours"] == 7.5

    assert client.patch(base, json={"quality": 9}).status_code == 422
    assert client.delete(base).status_code == 204


def test_trends_and_progress(container) -> None:
    client = _client(container)
    profile = _create_profile(client)

    trend = client.get(
        f"/profiles/{profile['id']}/trends", params={"window": 3, "labels": "date"}
    ).json()["trend"]
    assert [day["label"] for day in trend["days"]] == ["Oct 15", "Yesterday", "Today"]

    bad = client.get(f"/profiles/{profile['id']}/trends", params={"window": 0})
    assert bad.status_code == 422

    progress = client.get(
        f"/profiles/{profile['id']}/progress", params={"period": "month"}
    ).json()
    assert progress["summary"]["period_days"] == 30
    assert progress["summary"]["calories"]["target"] == 2000
    assert progress["summary"]["streak_days"] == 0


def test_trends_and_progress_report_stale_store(
    container, store: InMemoryStore
) -> None:
    client = _client(container)
    profile = _create_profile(client)
    store.meals.fail_reads = True
    store.energy.fail_reads = True

    trends = client.get(f"/profiles/{profile['id']}/trends", params={"window": 3})
    assert trends.status_code == 200
    assert trends.json()["is_stale"] is True
    assert trends.json()["trend"]["stale_sources"] == ["meals"]
    assert len(trends.json()["trend"]["days"]) == 3

    progress = client.get(f"/profiles/{profile['id']}/progress")
    assert progress.status_code == 200
    body = progress.json()
    assert body["is_stale"] is True
    assert sorted(body["summary"]["stale_sources"]) == ["energy", "meals"]
    assert body["summary"]["calories"]["target"] == 2000


def test_unknown_profile_is_not_found(container) -> None:
    response = _client(container).get(f"/profiles/{uuid4()}/dashboard")

    assert response.status_code == 404
    assert response.json() == {"detail": "Profile not found."}
