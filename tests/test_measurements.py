"""Tests for measurements, BMI, weight progress and the dashboard stats endpoint."""
import pytest


@pytest.mark.asyncio
async def test_latest_is_null_before_any_measurement(client, account):
    resp = await client.get("/api/v1/measurements/latest", headers=account["headers"])
    assert resp.status_code == 200
    assert resp.json() is None

    resp = await client.get("/api/v1/bmi/current", headers=account["headers"])
    assert resp.json() == {"bmi": None, "category": None}


@pytest.mark.asyncio
async def test_record_and_read_back(client, account):
    h = account["headers"]
    resp = await client.post("/api/v1/measurements", json={"weight": 70, "height": 175, "waist": 80}, headers=h)
    assert resp.status_code == 201
    data = resp.json()
    assert data["bmi"] == 22.9
    assert data["category"] == "healthy"
    assert data["waist"] == 80

    resp = await client.post("/api/v1/measurements", json={"weight": 78.2, "height": 175}, headers=h)
    latest = (await client.get("/api/v1/measurements/latest", headers=h)).json()
    assert latest["weight"] == 78.2
    assert latest["category"] == "overweight"

    history = (await client.get("/api/v1/measurements/history", headers=h)).json()
    assert [m["weight"] for m in history] == [78.2, 70]


@pytest.mark.asyncio
async def test_bmi_history_is_oldest_first(client, account):
    h = account["headers"]
    for w in (90, 85, 80):
        await client.post("/api/v1/measurements", json={"weight": w, "height": 180}, headers=h)
    history = (await client.get("/api/v1/bmi/history", headers=h)).json()
    assert [p["weight"] for p in history] == [90, 85, 80]
    assert history[0]["bmi"] > history[-1]["bmi"]


@pytest.mark.asyncio
async def test_weight_history_progress(client, account):
    h = account["headers"]
    for w in (80, 79, 78):
        await client.post("/api/v1/measurements", json={"weight": w, "height": 180}, headers=h)
    data = (await client.get("/api/v1/weight/history", headers=h)).json()
    assert data["start_weight"] == 80
    assert data["current_weight"] == 78
    assert data["goal_weight"] == 72.0
    assert data["progress"] == 25
    assert len(data["history"]) == 3


@pytest.mark.asyncio
async def test_rejects_non_positive_values(client, account):
    resp = await client.post("/api/v1/measurements", json={"weight": 0, "height": 175}, headers=account["headers"])
    assert resp.status_code == 422
    resp = await client.post("/api/v1/measurements", json={"weight": 70, "height": -1}, headers=account["headers"])
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_free_tier_capped_at_three(client, account, expire_trial):
    h = account["headers"]
    await expire_trial(account["user"]["id"])
    for w in (80, 79, 78):
        resp = await client.post("/api/v1/measurements", json={"weight": w, "height": 180}, headers=h)
        assert resp.status_code == 201

    resp = await client.post("/api/v1/measurements", json={"weight": 77, "height": 180}, headers=h)
    assert resp.status_code == 402
    body = resp.json()
    assert body["error"] == "upgrade_required"
    assert body["feature"] == "measurements"
    assert body["limit"] == 3

    history = (await client.get("/api/v1/measurements/history", headers=h)).json()
    assert len(history) == 3


@pytest.mark.asyncio
async def test_trial_has_no_cap(client, account):
    h = account["headers"]
    for w in range(70, 75):
        resp = await client.post("/api/v1/measurements", json={"weight": w, "height": 180}, headers=h)
        assert resp.status_code == 201


@pytest.mark.asyncio
async def test_second_measurement_creates_progress_notification(client, account):
    h = account["headers"]
    await client.post("/api/v1/measurements", json={"weight": 80, "height": 180}, headers=h)
    assert (await client.get("/api/v1/notifications", headers=h)).json() == []

    await client.post("/api/v1/measurements", json={"weight": 78.5, "height": 180}, headers=h)
    notes = (await client.get("/api/v1/notifications", headers=h)).json()
    assert len(notes) == 1
    assert notes[0]["icon"] == "measurement"
    assert "1.5 kg" in notes[0]["message"]


@pytest.mark.asyncio
async def test_progress_notification_respects_toggle(client, account):
    h = account["headers"]
    await client.patch("/api/v1/notifications/settings/measurement_reminders", json={"enabled": False}, headers=h)
    await client.post("/api/v1/measurements", json={"weight": 80, "height": 180}, headers=h)
    await client.post("/api/v1/measurements", json={"weight": 79, "height": 180}, headers=h)
    assert (await client.get("/api/v1/notifications", headers=h)).json() == []


@pytest.mark.asyncio
async def test_user_stats(client, account):
    h = account["headers"]
    await client.post("/api/v1/measurements", json={"weight": 75.5, "height": 180}, headers=h)
    await client.post("/api/v1/water", json={"amount": 500}, headers=h)
    stats = (await client.get("/api/v1/user/stats", headers=h)).json()
    assert stats["bmi"] == 23.3
    assert stats["category"] == "healthy"
    assert stats["water"] == {"current": 500, "goal": 2643}
    assert stats["calorie_goal"] == 2000
    assert stats["trial_active"] is True
    assert stats["days_remaining"] == 6


@pytest.mark.asyncio
async def test_user_stats_premium_has_no_trial_countdown(client, account, make_premium):
    await make_premium(account["user"]["id"])
    stats = (await client.get("/api/v1/user/stats", headers=account["headers"])).json()
    assert stats["is_premium"] is True
    assert stats["trial_active"] is True
    assert stats["days_remaining"] is None
