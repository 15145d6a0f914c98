"""Meal service — runs the nutrition aggregator against the persistence gateway.

Every add/remove is one unit of work: the item row and the meal's new totals
commit together, and the meal's version column turns a lost race into a
ConflictError instead of a silent overwrite.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from smallyfit.db.meal_tables import MealItemRow, MealRow
from smallyfit.db.repository import Repository, item_snapshot, meal_totals
from smallyfit.db.user_tables import AccountRow
from smallyfit.errors import ConflictError, NotFoundError, ensure_owner
from smallyfit.services import entitlements
from smallyfit.services.entitlements import GatedFeature
from smallyfit.services.nutrition import add_item_to_meal, remove_item_from_meal

logger = logging.getLogger(__name__)


@dataclass
class AddItemOutcome:
    """Either the stored item, or the gate that refused it."""
    meal: MealRow
    item: Optional[MealItemRow] = None
    denied: Optional[GatedFeature] = None
    limit: Optional[int] = None


class MealService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = Repository(session)

    async def get_owned_meal(self, account_id: str, meal_id: str) -> MealRow:
        meal = await self.repo.get_meal_by_id(meal_id)
        ensure_owner(meal, account_id, "Meal")
        return meal

    async def add_item(
        self,
        account: AccountRow,
        meal_id: str,
        food_item_id: str,
        quantity: float,
        portions: int = 1,
        now: datetime | None = None,
    ) -> AddItemOutcome:
        now = now or datetime.now(timezone.utc)
        meal = await self.get_owned_meal(account.id, meal_id)
        food = await self.repo.get_food_item_by_id(food_item_id)
        if food is None:
            raise NotFoundError("Food item", food_item_id)

        trial_active = entitlements.is_trial_active(account.created_at, account.is_premium, now)
        count = await self.repo.count_meal_items(meal.id)
        if not entitlements.can_add_food_to_meal(count, trial_active):
            return AddItemOutcome(meal, denied=GatedFeature.MEAL_ITEMS, limit=entitlements.FREE_MEAL_ITEM_LIMIT)
        if not entitlements.can_increase_quantity(portions, trial_active):
            return AddItemOutcome(meal, denied=GatedFeature.PORTIONS, limit=entitlements.FREE_MAX_PORTIONS)

        totals, snapshot = add_item_to_meal(meal_totals(meal), food, quantity * portions)
        try:
            item = await self.repo.create_meal_item(meal.id, snapshot, quantity, portions)
            await self.repo.update_meal_totals(meal, totals)
            await self.session.commit()
        except StaleDataError:
            await self._conflict(meal.id)
        logger.info("Added %s to meal %s (%d kcal)", food.name, meal.id, snapshot.calories)
        return AddItemOutcome(meal, item=item)

    async def remove_item(self, account_id: str, item_id: str) -> MealRow:
        item = await self.repo.get_meal_item(item_id)
        if item is None:
            raise NotFoundError("Meal item", item_id)
        meal = await self.get_owned_meal(account_id, item.meal_id)

        totals = remove_item_from_meal(meal_totals(meal), item_snapshot(item))
        try:
            await self.repo.delete_meal_item(item)
            await self.repo.update_meal_totals(meal, totals)
            await self.session.commit()
        except StaleDataError:
            await self._conflict(meal.id)
        return meal

    async def delete_meal(self, account_id: str, meal_id: str) -> None:
        meal = await self.get_owned_meal(account_id, meal_id)
        try:
            await self.repo.delete_meal(meal)
            await self.session.commit()
        except StaleDataError:
            await self._conflict(meal.id)

    async def _conflict(self, meal_id: str):
        await self.session.rollback()
        logger.warning("Concurrent update on meal %s", meal_id)
        raise ConflictError("Meal was modified by another request. Please retry.")
