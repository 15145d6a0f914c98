"""Water intake API — /api/v1/water endpoints."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from smallyfit.auth import require_account
from smallyfit.db.engine import get_session
from smallyfit.db.repository import Repository
from smallyfit.db.user_tables import AccountRow
from smallyfit.services.body_metrics import recommended_water_intake_ml
from smallyfit.services.notifications import water_goal_reached

router = APIRouter(prefix="/api/v1/water", tags=["water"])

_FALLBACK_GOAL_ML = 2000


class WaterDelta(BaseModel):
    # Negative amounts undo earlier logs
    amount: int = Field(..., ge=-5000, le=5000)


async def water_goal(repo: Repository, account_id: str) -> int:
    """Daily goal from the latest weight, else the configured default."""
    latest = await repo.get_latest_measurement(account_id)
    if latest is not None:
        return recommended_water_intake_ml(latest.weight)
    return settings.DEFAULT_WATER_GOAL_ML if settings.DEFAULT_WATER_GOAL_ML > 0 else _FALLBACK_GOAL_ML


@router.get("/today")
async def water_today(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    repo = Repository(session)
    return {
        "current": await repo.get_today_water_total(account.id),
        "goal": await water_goal(repo, account.id),
    }


@router.get("/history")
async def water_history(
    days: int = Query(30, ge=1, le=365),
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    return await Repository(session).get_water_history(account.id, days=days)


@router.post("")
async def log_water(
    body: WaterDelta,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Apply a signed delta to today's total. The total never drops below zero."""
    repo = Repository(session)
    now = datetime.now(timezone.utc)
    previous = await repo.get_today_water_total(account.id, now)
    current = await repo.adjust_water_total(account.id, body.amount, now)
    goal = await water_goal(repo, account.id)

    prefs = await repo.get_or_create_settings(account.id)
    draft = water_goal_reached(previous, current, goal)
    if draft and prefs.water_reminders:
        await repo.create_notification(account.id, *draft)
    await session.commit()
    return {"current": current, "goal": goal}
