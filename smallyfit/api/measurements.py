"""Body measurement API — measurements, BMI, weight progress and the dashboard stats."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from smallyfit.api.water import water_goal
from smallyfit.auth import require_account
from smallyfit.db.body_tables import MeasurementRow
from smallyfit.db.engine import get_session
from smallyfit.db.repository import Repository
from smallyfit.db.user_tables import AccountRow
from smallyfit.middleware.metrics import metrics
from smallyfit.services import entitlements
from smallyfit.services.body_metrics import calculate_bmi, calorie_goal, categorize_bmi, weight_progress
from smallyfit.services.entitlements import GatedFeature
from smallyfit.services.notifications import measurement_progress
from smallyfit.services.rounding import round_half_up

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["measurements"])


# ── Schemas ───────────────────────────────────────────────────────────────────

class MeasurementRequest(BaseModel):
    weight: float = Field(..., gt=0, le=500, description="kg")
    height: float = Field(..., gt=0, le=300, description="cm")
    waist: Optional[float] = Field(None, gt=0, le=300)
    hip: Optional[float] = Field(None, gt=0, le=300)
    arms: Optional[float] = Field(None, gt=0, le=150)


def _bmi_fields(row: MeasurementRow) -> dict:
    bmi = calculate_bmi(row.weight, row.height)
    return {"bmi": round_half_up(bmi, 1), "category": categorize_bmi(bmi).value}


def _measurement_response(row: MeasurementRow) -> dict:
    return {
        "id": row.id,
        "weight": row.weight,
        "height": row.height,
        "waist": row.waist,
        "hip": row.hip,
        "arms": row.arms,
        **_bmi_fields(row),
        "created_at": row.created_at.isoformat(),
    }


# ── Measurements ──────────────────────────────────────────────────────────────

@router.get("/measurements/latest")
async def latest_measurement(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Most recent measurement, or null when none recorded yet."""
    row = await Repository(session).get_latest_measurement(account.id)
    return _measurement_response(row) if row else None


@router.get("/measurements/history")
async def measurement_history(
    limit: int = Query(50, ge=1, le=500),
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    rows = await Repository(session).get_measurement_history(account.id, limit=limit)
    return [_measurement_response(r) for r in rows]


@router.post("/measurements", status_code=201)
async def record_measurement(
    body: MeasurementRequest,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Record a measurement. Free accounts past the trial keep at most three."""
    repo = Repository(session)
    now = datetime.now(timezone.utc)
    trial_active = entitlements.is_trial_active(account.created_at, account.is_premium, now)
    count = await repo.count_measurements(account.id)
    if not entitlements.can_record_measurement(count, trial_active):
        metrics.record_upgrade_required(GatedFeature.MEASUREMENTS.value)
        return JSONResponse(
            status_code=402,
            content=entitlements.upgrade_required_body(
                GatedFeature.MEASUREMENTS, entitlements.FREE_MEASUREMENT_LIMIT,
            ),
        )

    previous = await repo.get_latest_measurement(account.id)
    row = await repo.create_measurement(account.id, **body.model_dump())

    prefs = await repo.get_or_create_settings(account.id)
    draft = measurement_progress(previous.weight if previous else None, row.weight)
    if draft and prefs.measurement_reminders:
        await repo.create_notification(account.id, *draft)
    await session.commit()
    return _measurement_response(row)


# ── BMI & weight ──────────────────────────────────────────────────────────────

@router.get("/bmi/current")
async def current_bmi(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    row = await Repository(session).get_latest_measurement(account.id)
    if row is None:
        return {"bmi": None, "category": None}
    return {**_bmi_fields(row), "weight": row.weight, "height": row.height}


@router.get("/bmi/history")
async def bmi_history(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """BMI per measurement, oldest first (chart order)."""
    rows = await Repository(session).get_measurement_history(account.id)
    return [
        {"date": r.created_at.isoformat(), "weight": r.weight, **_bmi_fields(r)}
        for r in reversed(rows)
    ]


@router.get("/weight/history")
async def weight_history(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    rows = await Repository(session).get_measurement_history(account.id)
    progress = weight_progress([r.weight for r in rows])
    return {
        "start_weight": progress.start_weight,
        "current_weight": progress.current_weight,
        "goal_weight": progress.goal_weight,
        "progress": progress.progress,
        "history": [{"date": r.created_at.isoformat(), "weight": r.weight} for r in reversed(rows)],
    }


@router.get("/user/stats")
async def user_stats(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Dashboard summary: BMI, water, calorie goal and trial state."""
    repo = Repository(session)
    now = datetime.now(timezone.utc)
    latest = await repo.get_latest_measurement(account.id)
    prefs = await repo.get_or_create_settings(account.id)
    bmi = _bmi_fields(latest) if latest else {"bmi": None, "category": None}
    return {
        **bmi,
        "weight": latest.weight if latest else None,
        "water": {
            "current": await repo.get_today_water_total(account.id, now),
            "goal": await water_goal(repo, account.id),
        },
        "calorie_goal": calorie_goal(prefs.goal),
        "trial_active": entitlements.is_trial_active(account.created_at, account.is_premium, now),
        "days_remaining": None if account.is_premium else entitlements.days_remaining(account.created_at, now),
        "is_premium": account.is_premium,
    }
