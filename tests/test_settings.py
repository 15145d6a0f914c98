"""Tests for account settings."""
import pytest


@pytest.mark.asyncio
async def test_defaults(client, account):
    data = (await client.get("/api/v1/settings", headers=account["headers"])).json()
    assert data["dark_mode"] is False
    assert data["units"] == "metric"
    assert data["goal"] == "maintain"
    assert data["calorie_goal"] == 2000


@pytest.mark.asyncio
async def test_partial_update(client, account):
    h = account["headers"]
    resp = await client.patch("/api/v1/settings", json={"dark_mode": True, "goal": "lose"}, headers=h)
    assert resp.status_code == 200
    data = resp.json()
    assert data["dark_mode"] is True
    assert data["goal"] == "lose"
    assert data["calorie_goal"] == 1500
    assert data["units"] == "metric"


@pytest.mark.asyncio
async def test_invalid_values_rejected(client, account):
    h = account["headers"]
    assert (await client.patch("/api/v1/settings", json={"units": "cubits"}, headers=h)).status_code == 422
    assert (await client.patch("/api/v1/settings", json={"goal": "bulk"}, headers=h)).status_code == 422


@pytest.mark.asyncio
async def test_goal_drives_daily_summary(client, account):
    h = account["headers"]
    await client.patch("/api/v1/settings", json={"goal": "gain"}, headers=h)
    summary = (await client.get("/api/v1/meals/daily-summary", headers=h)).json()
    assert summary["calorie_goal"] == 2500
    assert summary["remaining_calories"] == 2500
