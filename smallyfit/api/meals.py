"""Meal logging API — /api/v1/meals and /api/v1/meal-items.

Meals carry running nutrient totals. Adding an item snapshots the food's
scaled nutrients into the item; removing it subtracts that snapshot.
"""
from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from smallyfit.auth import require_account
from smallyfit.db.engine import get_session
from smallyfit.db.meal_tables import MealItemRow, MealRow
from smallyfit.db.repository import Repository, meal_totals
from smallyfit.db.user_tables import AccountRow
from smallyfit.middleware.metrics import metrics
from smallyfit.services.body_metrics import calorie_goal
from smallyfit.services.entitlements import upgrade_required_body
from smallyfit.services.meals import MealService
from smallyfit.services.nutrition import daily_totals

router = APIRouter(prefix="/api/v1", tags=["meals"])


# ── Schemas ───────────────────────────────────────────────────────────────────

class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class CreateMealRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    meal_type: MealType = MealType.SNACK
    date: Optional[dt.date] = None


class AddItemRequest(BaseModel):
    food_item_id: str
    quantity: float = Field(..., gt=0, le=5000, description="Amount in the food's serving unit")
    portions: int = Field(1, ge=1, le=20)


def _today() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


def _meal_response(meal: MealRow) -> dict:
    return {
        "id": meal.id,
        "name": meal.name,
        "meal_type": meal.meal_type,
        "date": meal.date.date().isoformat(),
        "total_calories": meal.total_calories,
        "total_protein": meal.total_protein,
        "total_carbs": meal.total_carbs,
        "total_fat": meal.total_fat,
        "version": meal.version,
    }


def _item_response(item: MealItemRow) -> dict:
    return {
        "id": item.id,
        "meal_id": item.meal_id,
        "food_item_id": item.food_item_id,
        "food_name": item.food_name,
        "quantity": item.quantity,
        "portions": item.portions,
        "calories": item.calories,
        "protein": item.protein,
        "carbs": item.carbs,
        "fat": item.fat,
    }


# ── Meals ─────────────────────────────────────────────────────────────────────

@router.get("/meals")
async def list_meals(
    date: Optional[dt.date] = Query(None, description="YYYY-MM-DD, defaults to today (UTC)"),
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    meals = await Repository(session).list_meals_by_date(account.id, date or _today())
    return [_meal_response(m) for m in meals]


@router.post("/meals", status_code=201)
async def create_meal(
    body: CreateMealRequest,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    meal = await Repository(session).create_meal(
        account.id, body.name, body.meal_type.value, body.date or _today(),
    )
    await session.commit()
    return _meal_response(meal)


# Declared before /meals/{meal_id} so "daily-summary" is not taken for an id
@router.get("/meals/daily-summary")
async def daily_summary(
    date: Optional[dt.date] = Query(None),
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Day totals across all meals vs the calorie goal from settings."""
    repo = Repository(session)
    day = date or _today()
    meals = await repo.list_meals_by_date(account.id, day)
    eaten = daily_totals(meal_totals(m) for m in meals)
    prefs = await repo.get_account_settings(account.id)
    goal = calorie_goal(prefs.goal if prefs else None)
    return {
        "date": day.isoformat(),
        "eaten": eaten.as_dict(),
        "calorie_goal": goal,
        "remaining_calories": max(0, goal - eaten.calories),
        "meal_count": len(meals),
    }


@router.get("/meals/{meal_id}")
async def get_meal(
    meal_id: str,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    service = MealService(session)
    meal = await service.get_owned_meal(account.id, meal_id)
    items = await service.repo.list_meal_items(meal.id)
    return {**_meal_response(meal), "items": [_item_response(i) for i in items]}


@router.delete("/meals/{meal_id}", status_code=204)
async def delete_meal(
    meal_id: str,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    await MealService(session).delete_meal(account.id, meal_id)
    return Response(status_code=204)


# ── Meal items ────────────────────────────────────────────────────────────────

@router.get("/meals/{meal_id}/items")
async def list_meal_items(
    meal_id: str,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    service = MealService(session)
    meal = await service.get_owned_meal(account.id, meal_id)
    return [_item_response(i) for i in await service.repo.list_meal_items(meal.id)]


@router.post("/meals/{meal_id}/items", status_code=201)
async def add_meal_item(
    meal_id: str,
    body: AddItemRequest,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Add a food to a meal. Free accounts past the trial get 2 items, 1 portion each."""
    outcome = await MealService(session).add_item(
        account, meal_id, body.food_item_id, body.quantity, body.portions,
    )
    if outcome.denied is not None:
        metrics.record_upgrade_required(outcome.denied.value)
        return JSONResponse(status_code=402, content=upgrade_required_body(outcome.denied, outcome.limit))
    return {"item": _item_response(outcome.item), "meal": _meal_response(outcome.meal)}


@router.delete("/meal-items/{item_id}", status_code=204)
async def delete_meal_item(
    item_id: str,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    await MealService(session).remove_item(account.id, item_id)
    return Response(status_code=204)
