"""SmallyFit API: FastAPI application with DB-backed storage."""
from __future__ import annotations

import logging

from smallyfit.logging_config import setup_logging
setup_logging()
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from smallyfit.db.engine import engine, get_session
from smallyfit.db.tables import Base

# ── Sentry Error Tracking ────────────────────────
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR),
        ],
        # Body measurements are personal data
        send_default_pii=False,
        before_send=lambda event, hint: (
            {**event, "request": {**event.get("request", {}), "cookies": None, "data": None}}
            if "request" in event else event
        ),
    )

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate config, create tables, seed the food catalog."""
    from smallyfit.startup_checks import validate_settings
    validate_settings()

    # Import all tables so they're registered with Base.metadata
    import smallyfit.db.user_tables  # noqa: F401
    import smallyfit.db.body_tables  # noqa: F401
    import smallyfit.db.workout_tables  # noqa: F401
    import smallyfit.db.notification_tables  # noqa: F401
    import smallyfit.db.meal_tables  # noqa: F401
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

    if settings.SEED_FOOD_CATALOG:
        from smallyfit.db.engine import async_session
        from smallyfit.services.food_catalog import seed_food_items
        async with async_session() as session:
            await seed_food_items(session)

    yield

    logger.info("Shutting down — draining connections...")
    await engine.dispose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="SmallyFit API",
    version=VERSION,
    description="Personal fitness tracking — measurements, BMI, water, workouts and meals",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Security headers
from smallyfit.middleware.security_headers import SecurityHeadersMiddleware
app.add_middleware(SecurityHeadersMiddleware)

# Prometheus metrics
from smallyfit.middleware.metrics import MetricsMiddleware
app.add_middleware(MetricsMiddleware)

# Rate limiting
from smallyfit.middleware.rate_limit import RateLimitMiddleware
app.add_middleware(RateLimitMiddleware)

# Request ID tracing, added last so it is outermost and every log line carries the id
from smallyfit.middleware.request_id import RequestIDMiddleware
app.add_middleware(RequestIDMiddleware)


# ---- Auth routes ----
from smallyfit.auth import (
    LoginRequest, RefreshRequest, SignUpRequest,
    account_id_from_refresh, create_tokens, hash_password, verify_password,
)
from smallyfit.api.users import account_response
from smallyfit.db.repository import Repository
from smallyfit.errors import ConflictError, SmallyFitError


@app.post("/api/v1/auth/signup", status_code=201)
async def signup(req: SignUpRequest, session: AsyncSession = Depends(get_session)):
    """Create an account (with default settings). The 7-day trial starts now."""
    repo = Repository(session)
    if await repo.get_account_by_email(req.email):
        raise ConflictError("Email already registered")
    account = await repo.create_account(req.name, req.email, hash_password(req.password))
    await session.commit()
    logger.info("Account created: %s", account.id)
    return {"user": account_response(account), **create_tokens(account.id)}


@app.post("/api/v1/auth/login")
async def login(req: LoginRequest, session: AsyncSession = Depends(get_session)):
    """Log in with email + password, returns JWT tokens."""
    account = await Repository(session).get_account_by_email(req.email)
    if not account or not verify_password(req.password, account.password_hash):
        raise HTTPException(401, "Invalid email or password")
    return {"user": account_response(account), **create_tokens(account.id)}


@app.post("/api/v1/auth/refresh")
async def refresh_token(req: RefreshRequest, session: AsyncSession = Depends(get_session)):
    """Exchange a valid refresh token for new access + refresh tokens."""
    account_id = account_id_from_refresh(req.refresh_token)
    if not account_id:
        raise HTTPException(401, "Invalid or expired refresh token")
    account = await Repository(session).get_account(account_id)
    if not account:
        raise HTTPException(401, "Account not found")
    return {"user": account_response(account), **create_tokens(account.id)}


# ---- Feature routers ----
from smallyfit.api.users import router as users_router
from smallyfit.api.measurements import router as measurements_router
from smallyfit.api.water import router as water_router
from smallyfit.api.workouts import router as workouts_router
from smallyfit.api.notifications import router as notifications_router
from smallyfit.api.settings import router as settings_router
from smallyfit.api.food import router as food_router
from smallyfit.api.meals import router as meals_router

app.include_router(users_router)
app.include_router(measurements_router)
app.include_router(water_router)
app.include_router(workouts_router)
app.include_router(notifications_router)
app.include_router(settings_router)
app.include_router(food_router)
app.include_router(meals_router)


@app.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    """Deep health check — validates DB connectivity."""
    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception:
        logger.exception("Health check: database unreachable")
        db_status = "error"
    status = "ok" if db_status == "connected" else "degraded"
    return {"status": status, "db": db_status, "version": VERSION}


@app.get("/ready")
async def readiness(session: AsyncSession = Depends(get_session)):
    """Readiness probe for orchestrators.

    Returns 503 if not ready to serve traffic.
    """
    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Readiness check: database unreachable")
        return JSONResponse(status_code=503, content={"ready": False, "reason": "database unavailable"})
    return {"ready": True}


# --- Structured Error Responses ---

_HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
}


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return clean, structured validation errors instead of raw Pydantic output."""
    errors = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err["loc"]) if err.get("loc") else "unknown"
        errors.append({"field": field, "message": err["msg"]})
    return JSONResponse(status_code=422, content={
        "error": "validation_error",
        "message": "Invalid request data",
        "details": errors,
    })


@app.exception_handler(SmallyFitError)
async def domain_error_handler(request: Request, exc: SmallyFitError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "message": exc.message})


@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.warning("Optimistic lock conflict on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=409, content={
        "error": "conflict",
        "message": "The record was modified by another request. Please retry.",
    })


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Consistent error envelope for all HTTP errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": _HTTP_ERROR_CODES.get(exc.status_code, "error"),
            "message": exc.detail if isinstance(exc.detail, str) else "Request failed",
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions — never leak stack traces."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={
        "error": "internal_error",
        "message": "Something went wrong. Please try again.",
    })
