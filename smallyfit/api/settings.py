"""Account settings API — /api/v1/settings."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from smallyfit.auth import require_account
from smallyfit.db.engine import get_session
from smallyfit.db.repository import Repository
from smallyfit.db.user_tables import AccountRow, SettingsRow
from smallyfit.services.body_metrics import Goal, calorie_goal

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


class Units(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"


class SettingsUpdate(BaseModel):
    dark_mode: Optional[bool] = None
    units: Optional[Units] = None
    notification_sound: Optional[bool] = None
    goal: Optional[Goal] = None


def _settings_response(prefs: SettingsRow) -> dict:
    return {
        "dark_mode": prefs.dark_mode,
        "units": prefs.units,
        "notification_sound": prefs.notification_sound,
        "water_reminders": prefs.water_reminders,
        "workout_reminders": prefs.workout_reminders,
        "measurement_reminders": prefs.measurement_reminders,
        "motivation_tips": prefs.motivation_tips,
        "goal": prefs.goal,
        "calorie_goal": calorie_goal(prefs.goal),
    }


@router.get("")
async def get_settings(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    prefs = await Repository(session).get_or_create_settings(account.id)
    await session.commit()
    return _settings_response(prefs)


@router.patch("")
async def update_settings(
    body: SettingsUpdate,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Partial update; omitted fields keep their value."""
    changes = {
        key: value.value if isinstance(value, Enum) else value
        for key, value in body.model_dump(exclude_none=True).items()
    }
    prefs = await Repository(session).update_settings(account.id, **changes)
    await session.commit()
    return _settings_response(prefs)
