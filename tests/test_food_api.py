"""Tests for the food catalog API."""
import pytest

from smallyfit.db.repository import _escape_like
from smallyfit.services.food_catalog import COMMON_FOODS, catalog_profiles


def test_catalog_profiles_are_valid():
    profiles = catalog_profiles()
    assert len(profiles) == len(COMMON_FOODS)
    assert all(p.serving_size == 100 for p in profiles)


def test_escape_like():
    assert _escape_like("50%_off") == "50\\%\\_off"


@pytest.mark.asyncio
async def test_search_is_case_insensitive_substring(client):
    resp = await client.get("/api/v1/food-items", params={"q": "RICE"})
    assert resp.status_code == 200
    names = [f["name"] for f in resp.json()]
    assert names == ["Brown rice, cooked", "White rice, cooked"]


@pytest.mark.asyncio
async def test_wildcards_are_literal(client):
    resp = await client.get("/api/v1/food-items", params={"q": "%"})
    assert resp.json() == []


@pytest.mark.asyncio
async def test_empty_query_lists_catalog(client):
    resp = await client.get("/api/v1/food-items", params={"limit": 5})
    assert len(resp.json()) == 5


@pytest.mark.asyncio
async def test_get_food_item(client):
    food = (await client.get("/api/v1/food-items", params={"q": "salmon"})).json()[0]
    resp = await client.get(f"/api/v1/food-items/{food['id']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["nutrients_per_serving"]["calories"] == 208
    assert data["serving_unit"] == "g"

    resp = await client.get("/api/v1/food-items/unknown")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_create_food_item(client, account):
    payload = {
        "id": "client-chosen",
        "name": "Protein shake",
        "category": "drink",
        "nutrients_per_serving": {"calories": 120, "protein": 24, "carbs": 3, "fat": 1.5},
        "serving_size": 250,
        "serving_unit": "ml",
    }
    resp = await client.post("/api/v1/food-items", json=payload)
    assert resp.status_code == 401

    resp = await client.post("/api/v1/food-items", json=payload, headers=account["headers"])
    assert resp.status_code == 201
    created = resp.json()
    assert created["id"] != "client-chosen"
    assert created["serving_size"] == 250

    found = (await client.get("/api/v1/food-items", params={"q": "shake"})).json()
    assert [f["id"] for f in found] == [created["id"]]


@pytest.mark.asyncio
async def test_create_food_item_validation(client, account):
    resp = await client.post("/api/v1/food-items", json={
        "name": "Bad", "nutrients_per_serving": {"calories": -5}, "serving_size": 0,
    }, headers=account["headers"])
    assert resp.status_code == 422
