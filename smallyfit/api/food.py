"""Food catalog API — /api/v1/food-items endpoints.

Food items are shared reference data; nutrients are stored per serving size
(usually 100 g or 100 ml).
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from smallyfit.auth import require_account
from smallyfit.db.engine import get_session
from smallyfit.db.repository import Repository
from smallyfit.db.user_tables import AccountRow
from smallyfit.errors import NotFoundError
from smallyfit.models import FoodProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/food-items", tags=["food"])


@router.get("")
async def search_food_items(
    q: str = Query("", max_length=200, description="Case-insensitive name substring"),
    limit: int = Query(20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
):
    """Search the catalog by name. An empty query lists foods alphabetically.

    Example: GET /api/v1/food-items?q=chick
    """
    foods = await Repository(session).search_food_items(q.strip(), limit=limit)
    return [f.model_dump(mode="json") for f in foods]


@router.get("/{food_id}")
async def get_food_item(food_id: str, session: AsyncSession = Depends(get_session)):
    food = await Repository(session).get_food_item_by_id(food_id)
    if food is None:
        raise NotFoundError("Food item", food_id)
    return food.model_dump(mode="json")


@router.post("", status_code=201)
async def create_food_item(
    body: FoodProfile,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Add a food to the shared catalog. Any client-sent id is ignored."""
    food = await Repository(session).create_food_item(body.model_copy(update={"id": None}))
    await session.commit()
    logger.info("Food item %s added by %s", food.id, account.id)
    return food.model_dump(mode="json")
