"""Tests for account management, subscription status and the admin premium flag."""
import pytest
from sqlalchemy import func, select

from smallyfit.db.body_tables import MeasurementRow, WaterLogRow
from smallyfit.db.meal_tables import MealItemRow, MealRow
from smallyfit.db.user_tables import AccountRow, SettingsRow
from smallyfit.db.workout_tables import ExerciseRow


@pytest.mark.asyncio
async def test_get_and_update_profile(client, account):
    h = account["headers"]
    resp = await client.get("/api/v1/user", headers=h)
    assert resp.json()["name"] == "Alex"

    resp = await client.patch("/api/v1/user", json={"name": "Alexandra"}, headers=h)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Alexandra"
    assert resp.json()["email"] == "alex@example.com"


@pytest.mark.asyncio
async def test_update_email_to_taken_conflicts(client, make_account):
    await make_account(email="taken@example.com", name="Taken")
    me = await make_account(email="me@example.com")
    resp = await client.patch("/api/v1/user", json={"email": "taken@example.com"}, headers=me["headers"])
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_change_password(client, account):
    h = account["headers"]
    resp = await client.post("/api/v1/user/change-password",
                             json={"current_password": "wrong", "new_password": "newsecret"}, headers=h)
    assert resp.status_code == 400
    assert resp.json()["error"] == "bad_request"

    resp = await client.post("/api/v1/user/change-password",
                             json={"current_password": "secret123", "new_password": "newsecret"}, headers=h)
    assert resp.status_code == 200

    resp = await client.post("/api/v1/auth/login", json={"email": "alex@example.com", "password": "newsecret"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_delete_account_cascades(client, account, db_session):
    h = account["headers"]
    await client.post("/api/v1/measurements", json={"weight": 80, "height": 180}, headers=h)
    await client.post("/api/v1/water", json={"amount": 250}, headers=h)
    await client.post("/api/v1/workouts", json={
        "title": "Legs", "type": "strength", "day": "Monday",
        "exercises": [{"name": "Squat", "sets": 5, "reps": 5}],
    }, headers=h)
    food = (await client.get("/api/v1/food-items?q=banana")).json()[0]
    meal = (await client.post("/api/v1/meals", json={"name": "Breakfast"}, headers=h)).json()
    await client.post(f"/api/v1/meals/{meal['id']}/items",
                      json={"food_item_id": food["id"], "quantity": 120}, headers=h)

    resp = await client.delete("/api/v1/user", headers=h)
    assert resp.status_code == 204

    resp = await client.get("/api/v1/user", headers=h)
    assert resp.status_code == 401

    for table in (AccountRow, SettingsRow, MeasurementRow, WaterLogRow, MealRow, MealItemRow, ExerciseRow):
        count = (await db_session.execute(select(func.count()).select_from(table))).scalar_one()
        assert count == 0, table.__tablename__


@pytest.mark.asyncio
async def test_subscription_me(client, account, expire_trial):
    h = account["headers"]
    resp = await client.get("/api/v1/subscription/me", headers=h)
    assert resp.json()["plan"] == "trial"
    assert resp.json()["days_remaining"] == 6

    await expire_trial(account["user"]["id"])
    resp = await client.get("/api/v1/subscription/me", headers=h)
    data = resp.json()
    assert data["plan"] == "free"
    assert data["trial_active"] is False
    assert data["limits"]["measurements"] == 3


@pytest.mark.asyncio
async def test_admin_grants_premium(client, make_account, make_admin, expire_trial):
    admin = await make_account(email="admin@example.com", name="Admin")
    user = await make_account(email="user@example.com", name="User")
    await make_admin(admin["user"]["id"])
    await expire_trial(user["user"]["id"])

    path = f"/api/v1/admin/accounts/{user['user']['id']}/premium"
    resp = await client.patch(path, json={"is_premium": True}, headers=user["headers"])
    assert resp.status_code == 403

    resp = await client.patch(path, json={"is_premium": True}, headers=admin["headers"])
    assert resp.status_code == 200
    assert resp.json()["is_premium"] is True

    resp = await client.get("/api/v1/subscription/me", headers=user["headers"])
    assert resp.json()["plan"] == "premium"


@pytest.mark.asyncio
async def test_admin_premium_unknown_account(client, account, make_admin):
    await make_admin(account["user"]["id"])
    resp = await client.patch("/api/v1/admin/accounts/missing/premium",
                              json={"is_premium": True}, headers=account["headers"])
    assert resp.status_code == 404
