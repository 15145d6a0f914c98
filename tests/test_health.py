"""Tests for health/readiness probes and startup validation."""
import pytest

from config.settings import settings
from smallyfit import startup_checks


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["db"] == "connected"


@pytest.mark.asyncio
async def test_ready(client):
    resp = await client.get("/ready")
    assert resp.json() == {"ready": True}


def test_default_secret_in_production_exits(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", "postgresql://db/smallyfit")
    monkeypatch.setattr(settings, "JWT_SECRET", "smallyfit-dev-secret-change-in-prod")
    with pytest.raises(SystemExit):
        startup_checks.validate_settings()


def test_wildcard_cors_in_production_warns(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", "postgresql://db/smallyfit")
    monkeypatch.setattr(settings, "JWT_SECRET", "a-real-secret")
    monkeypatch.setattr(settings, "CORS_ORIGINS", ["*"])
    warnings = startup_checks.validate_settings()
    assert any("CORS_ORIGINS" in w for w in warnings)


def test_dev_defaults_pass(monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", "sqlite+aiosqlite:///smallyfit.db")
    monkeypatch.setattr(settings, "SEED_FOOD_CATALOG", True)
    monkeypatch.setattr(settings, "DEFAULT_WATER_GOAL_ML", 2000)
    assert startup_checks.validate_settings() == []
