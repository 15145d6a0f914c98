"""App settings — loaded from environment."""
from __future__ import annotations

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # API
    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "8000"))

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///smallyfit.db")

    # Auth
    JWT_SECRET = os.getenv("JWT_SECRET", "smallyfit-dev-secret-change-in-prod")

    # CORS origins (comma-separated, or * for dev)
    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",")
    ]

    # Reverse proxies whose X-Forwarded-For is believed (comma-separated IPs).
    # Empty: rate limiting keys on the direct peer address only.
    TRUSTED_PROXIES = [
        p.strip() for p in os.getenv("TRUSTED_PROXIES", "").split(",") if p.strip()
    ]

    # Reference data
    SEED_FOOD_CATALOG = os.getenv("SEED_FOOD_CATALOG", "true").lower() in ("1", "true", "yes")

    # Fallback daily water goal when the user has no measurement yet
    DEFAULT_WATER_GOAL_ML = int(os.getenv("DEFAULT_WATER_GOAL_ML", "2000"))

    # Observability
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")
    SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))

    # Logging
    LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
