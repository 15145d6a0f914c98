"""Tests for the notification inbox and reminder toggles."""
import pytest

from smallyfit.services.notifications import measurement_progress, water_goal_reached


def test_first_measurement_has_no_progress_note():
    assert measurement_progress(None, 80) is None


def test_progress_message_direction():
    assert "lost 2.0 kg" in measurement_progress(80, 78).message
    assert "gained 0.5 kg" in measurement_progress(80, 80.5).message
    assert "unchanged" in measurement_progress(80, 80).message


def test_water_goal_only_on_crossing():
    assert water_goal_reached(1900, 2100, 2000) is not None
    assert water_goal_reached(2000, 2300, 2000) is None
    assert water_goal_reached(1000, 1500, 2000) is None


async def _make_notes(client, h, count=2):
    await client.post("/api/v1/measurements", json={"weight": 80, "height": 180}, headers=h)
    for i in range(count):
        await client.post("/api/v1/measurements", json={"weight": 79 - i, "height": 180}, headers=h)


@pytest.mark.asyncio
async def test_list_newest_first_and_mark_read(client, account):
    h = account["headers"]
    await _make_notes(client, h)
    notes = (await client.get("/api/v1/notifications", headers=h)).json()
    assert len(notes) == 2
    assert notes[0]["created_at"] >= notes[1]["created_at"]
    assert not any(n["read"] for n in notes)

    resp = await client.patch(f"/api/v1/notifications/{notes[0]['id']}/read", headers=h)
    assert resp.json()["read"] is True

    resp = await client.patch("/api/v1/notifications/mark-all-read", headers=h)
    assert resp.json() == {"updated": 1}
    notes = (await client.get("/api/v1/notifications", headers=h)).json()
    assert all(n["read"] for n in notes)


@pytest.mark.asyncio
async def test_cannot_read_someone_elses_notification(client, make_account):
    owner = await make_account(email="owner@example.com")
    other = await make_account(email="other@example.com")
    await _make_notes(client, owner["headers"], count=1)
    note = (await client.get("/api/v1/notifications", headers=owner["headers"])).json()[0]
    resp = await client.patch(f"/api/v1/notifications/{note['id']}/read", headers=other["headers"])
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_toggle_defaults_and_updates(client, account):
    h = account["headers"]
    toggles = (await client.get("/api/v1/notifications/settings", headers=h)).json()
    assert {t["id"]: t["enabled"] for t in toggles} == {
        "water_reminders": True,
        "workout_reminders": True,
        "measurement_reminders": True,
        "motivation_tips": False,
    }

    resp = await client.patch("/api/v1/notifications/settings/water_reminders", json={"enabled": False}, headers=h)
    assert resp.json() == {"id": "water_reminders", "enabled": False}

    # Stored value is reported as-is, including False
    toggles = (await client.get("/api/v1/notifications/settings", headers=h)).json()
    assert {t["id"]: t["enabled"] for t in toggles}["water_reminders"] is False


@pytest.mark.asyncio
async def test_unknown_toggle_is_404(client, account):
    resp = await client.patch("/api/v1/notifications/settings/sms", json={"enabled": True}, headers=account["headers"])
    assert resp.status_code == 404
