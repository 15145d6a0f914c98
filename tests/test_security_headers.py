"""Tests for security headers middleware."""
import pytest


@pytest.mark.asyncio
async def test_security_headers_present(client):
    resp = await client.get("/health")
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"
    assert resp.headers["x-xss-protection"] == "1; mode=block"
    assert "strict-origin" in resp.headers["referrer-policy"]
    assert "camera=()" in resp.headers["permissions-policy"]
    assert "max-age=31536000" in resp.headers["strict-transport-security"]


@pytest.mark.asyncio
async def test_auth_endpoints_no_cache(client):
    resp = await client.post("/api/v1/auth/login", json={"email": "x@x.com", "password": "wrong"})
    assert "no-store" in resp.headers.get("cache-control", "")


@pytest.mark.asyncio
async def test_account_endpoints_no_cache(client, account):
    resp = await client.get("/api/v1/user", headers=account["headers"])
    assert "no-store" in resp.headers.get("cache-control", "")


@pytest.mark.asyncio
async def test_food_catalog_not_marked_no_store(client):
    resp = await client.get("/api/v1/food-items?limit=1")
    assert "no-store" not in resp.headers.get("cache-control", "")
