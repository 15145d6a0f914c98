"""
SmallyFit Entitlement Gate
---
Free trial / premium logic. Single place for every freemium threshold; the
API enforces these server-side and exposes the same answers to the client
through GET /api/v1/subscription/me so the UI can show upsells.

Rules:
- Premium accounts are always entitled.
- Everyone else gets a 7-day trial counted in ceiling days since sign-up:
  any elapsed time in (0, 24h] is day 1, and day 7 is the last trial day.
- After the trial: max 3 measurements, max 2 foods per meal, 1 portion per item.

Gate functions never raise — a False answer means "show the upgrade prompt".
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from enum import Enum

TRIAL_DAYS = 7
FREE_MEASUREMENT_LIMIT = 3
FREE_MEAL_ITEM_LIMIT = 2
FREE_MAX_PORTIONS = 1

_DAY = timedelta(days=1)


class Plan(str, Enum):
    PREMIUM = "premium"
    TRIAL = "trial"
    FREE = "free"


class GatedFeature(str, Enum):
    MEASUREMENTS = "measurements"
    MEAL_ITEMS = "meal_items"
    PORTIONS = "portions"


def _as_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def elapsed_trial_days(created_at: datetime, now: datetime) -> int:
    elapsed = _as_utc(now) - _as_utc(created_at)
    if elapsed < timedelta(0):
        elapsed = timedelta(0)  # clock skew
    return math.ceil(elapsed / _DAY)


def is_trial_active(created_at: datetime, is_premium: bool, now: datetime) -> bool:
    if is_premium:
        return True
    return elapsed_trial_days(created_at, now) <= TRIAL_DAYS


def days_remaining(created_at: datetime, now: datetime) -> int:
    return max(0, TRIAL_DAYS - elapsed_trial_days(created_at, now))


def can_record_measurement(current_count: int, trial_active: bool) -> bool:
    return trial_active or current_count < FREE_MEASUREMENT_LIMIT


def can_add_food_to_meal(current_count: int, trial_active: bool) -> bool:
    return trial_active or current_count < FREE_MEAL_ITEM_LIMIT


def can_increase_quantity(requested_qty: int, trial_active: bool) -> bool:
    return trial_active or requested_qty <= FREE_MAX_PORTIONS


def plan_for(created_at: datetime, is_premium: bool, now: datetime) -> Plan:
    if is_premium:
        return Plan.PREMIUM
    if is_trial_active(created_at, False, now):
        return Plan.TRIAL
    return Plan.FREE


def entitlement_summary(
    created_at: datetime,
    is_premium: bool,
    now: datetime,
    measurement_count: int = 0,
) -> dict:
    """Everything the client needs to render plan status and upsells."""
    active = is_trial_active(created_at, is_premium, now)
    return {
        "plan": plan_for(created_at, is_premium, now).value,
        "is_premium": is_premium,
        "trial_active": active,
        "days_remaining": None if is_premium else days_remaining(created_at, now),
        "limits": None if active else {
            GatedFeature.MEASUREMENTS.value: FREE_MEASUREMENT_LIMIT,
            GatedFeature.MEAL_ITEMS.value: FREE_MEAL_ITEM_LIMIT,
            GatedFeature.PORTIONS.value: FREE_MAX_PORTIONS,
        },
        "usage": {GatedFeature.MEASUREMENTS.value: measurement_count},
        "can_record_measurement": can_record_measurement(measurement_count, active),
    }


def upgrade_required_body(feature: GatedFeature, limit: int) -> dict:
    """402 response body, same error envelope as every other API error."""
    return {
        "error": "upgrade_required",
        "message": "Your free trial has ended. Upgrade to premium to unlock this feature.",
        "feature": feature.value,
        "limit": limit,
    }
