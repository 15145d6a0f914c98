"""Tests for structured error responses."""
from __future__ import annotations

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient

from smallyfit.api.main import app
from smallyfit.errors import AuthorizationError, NotFoundError, ensure_owner


class _Row:
    account_id = "owner"


def test_ensure_owner():
    ensure_owner(_Row(), "owner", "Meal")
    with pytest.raises(NotFoundError):
        ensure_owner(None, "owner", "Meal")
    with pytest.raises(AuthorizationError) as exc:
        ensure_owner(_Row(), "intruder", "Meal")
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_unknown_route_returns_structured_404(client):
    resp = await client.get("/api/v1/does-not-exist")
    assert resp.status_code == 404
    data = resp.json()
    assert data["error"] == "not_found"
    assert "message" in data


@pytest.mark.asyncio
async def test_validation_error_returns_structured_error(client, account):
    resp = await client.get("/api/v1/meals", params={"date": "not-a-date"}, headers=account["headers"])
    assert resp.status_code == 422
    data = resp.json()
    assert data["error"] == "validation_error"
    assert isinstance(data["details"], list)
    assert data["details"][0]["field"] == "query.date"


@pytest.mark.asyncio
async def test_bad_bearer_token_is_401(client):
    resp = await client.get("/api/v1/user", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


_boom = APIRouter()


@_boom.get("/api/v1/_test/boom")
async def _raise():
    raise RuntimeError("kaboom")


app.include_router(_boom)


@pytest.mark.asyncio
async def test_unhandled_error_does_not_leak(setup_db):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/api/v1/_test/boom")
    assert resp.status_code == 500
    assert resp.json() == {"error": "internal_error", "message": "Something went wrong. Please try again."}
    assert "kaboom" not in resp.text
