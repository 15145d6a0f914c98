"""Tests for the weekly workout schedule."""
from datetime import datetime, timezone

import pytest

from smallyfit.api.workouts import WEEKDAYS

LEGS = {
    "title": "Leg day", "type": "strength", "day": "Monday",
    "exercises": [{"name": "Squat", "sets": 5, "reps": 5}, {"name": "Lunge", "sets": 3, "reps": 12}],
}


@pytest.mark.asyncio
async def test_create_workout_with_exercises(client, account):
    resp = await client.post("/api/v1/workouts", json=LEGS, headers=account["headers"])
    assert resp.status_code == 201
    data = resp.json()
    assert data["day"] == "Monday"
    assert [e["name"] for e in data["exercises"]] == ["Squat", "Lunge"]
    assert data["completed"] is False


@pytest.mark.asyncio
async def test_invalid_day_rejected(client, account):
    resp = await client.post("/api/v1/workouts", json={**LEGS, "day": "Funday"}, headers=account["headers"])
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_schedule_is_monday_first(client, account):
    h = account["headers"]
    await client.post("/api/v1/workouts", json={**LEGS, "day": "Friday"}, headers=h)
    await client.post("/api/v1/workouts", json={**LEGS, "title": "Run", "type": "cardio", "exercises": []}, headers=h)
    schedule = (await client.get("/api/v1/workouts/schedule", headers=h)).json()
    assert [d["day"] for d in schedule] == WEEKDAYS
    assert [w["title"] for w in schedule[0]["workouts"]] == ["Run"]
    assert [w["title"] for w in schedule[4]["workouts"]] == ["Leg day"]
    assert schedule[1]["workouts"] == []


@pytest.mark.asyncio
async def test_today_uses_utc_weekday(client, account):
    h = account["headers"]
    today = WEEKDAYS[datetime.now(timezone.utc).weekday()]
    await client.post("/api/v1/workouts", json={**LEGS, "day": today}, headers=h)
    workouts = (await client.get("/api/v1/workouts/today", headers=h)).json()
    assert len(workouts) == 1


@pytest.mark.asyncio
async def test_complete_workout(client, account):
    h = account["headers"]
    workout = (await client.post("/api/v1/workouts", json=LEGS, headers=h)).json()
    resp = await client.patch(f"/api/v1/workouts/{workout['id']}/complete", headers=h)
    assert resp.status_code == 200
    assert resp.json()["completed"] is True
    assert all(e["completed"] for e in resp.json()["exercises"])

    notes = (await client.get("/api/v1/notifications", headers=h)).json()
    assert notes[0]["icon"] == "workout"


@pytest.mark.asyncio
async def test_toggle_single_exercise(client, account):
    h = account["headers"]
    workout = (await client.post("/api/v1/workouts", json=LEGS, headers=h)).json()
    ex_id = workout["exercises"][0]["id"]
    resp = await client.patch(f"/api/v1/exercises/{ex_id}", json={"completed": True}, headers=h)
    assert resp.json()["completed"] is True

    resp = await client.patch("/api/v1/exercises/missing", json={"completed": True}, headers=h)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_workout(client, account):
    h = account["headers"]
    workout = (await client.post("/api/v1/workouts", json=LEGS, headers=h)).json()
    resp = await client.delete(f"/api/v1/workouts/{workout['id']}", headers=h)
    assert resp.status_code == 204
    schedule = (await client.get("/api/v1/workouts/schedule", headers=h)).json()
    assert all(d["workouts"] == [] for d in schedule)


@pytest.mark.asyncio
async def test_cross_account_access_forbidden(client, make_account):
    owner = await make_account(email="owner@example.com")
    other = await make_account(email="other@example.com")
    workout = (await client.post("/api/v1/workouts", json=LEGS, headers=owner["headers"])).json()

    resp = await client.delete(f"/api/v1/workouts/{workout['id']}", headers=other["headers"])
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"

    ex_id = workout["exercises"][0]["id"]
    resp = await client.patch(f"/api/v1/exercises/{ex_id}", json={"completed": True}, headers=other["headers"])
    assert resp.status_code == 403
