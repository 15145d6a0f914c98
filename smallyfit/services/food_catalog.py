"""Common foods seeded into an empty catalog on first start.

Values are per 100 g (or 100 ml for drinks).
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from smallyfit.db.repository import Repository
from smallyfit.models import FoodProfile, Nutrients, ServingUnit

logger = logging.getLogger(__name__)

# name, category, calories, protein, carbs, fat, fiber, sugar, unit
COMMON_FOODS: list[tuple] = [
    ("Chicken breast", "protein", 165, 31.0, 0.0, 3.6, 0.0, 0.0, "g"),
    ("Salmon", "protein", 208, 20.0, 0.0, 13.0, 0.0, 0.0, "g"),
    ("Egg", "protein", 155, 13.0, 1.1, 11.0, 0.0, 1.1, "g"),
    ("Tofu", "protein", 76, 8.0, 1.9, 4.8, 0.3, 0.6, "g"),
    ("Greek yogurt", "dairy", 59, 10.0, 3.6, 0.4, 0.0, 3.2, "g"),
    ("Whole milk", "dairy", 61, 3.2, 4.8, 3.3, 0.0, 5.1, "ml"),
    ("Cheddar cheese", "dairy", 403, 25.0, 1.3, 33.0, 0.0, 0.5, "g"),
    ("White rice, cooked", "grain", 130, 2.7, 28.0, 0.3, 0.4, 0.1, "g"),
    ("Brown rice, cooked", "grain", 112, 2.3, 23.5, 0.8, 1.8, 0.4, "g"),
    ("Oats", "grain", 389, 16.9, 66.3, 6.9, 10.6, 0.0, "g"),
    ("Whole wheat bread", "grain", 247, 13.0, 41.0, 3.4, 7.0, 6.0, "g"),
    ("Pasta, cooked", "grain", 131, 5.0, 25.0, 1.1, 1.8, 0.6, "g"),
    ("Banana", "fruit", 89, 1.1, 22.8, 0.3, 2.6, 12.2, "g"),
    ("Apple", "fruit", 52, 0.3, 13.8, 0.2, 2.4, 10.4, "g"),
    ("Orange juice", "fruit", 45, 0.7, 10.4, 0.2, 0.2, 8.4, "ml"),
    ("Broccoli", "vegetable", 34, 2.8, 6.6, 0.4, 2.6, 1.7, "g"),
    ("Spinach", "vegetable", 23, 2.9, 3.6, 0.4, 2.2, 0.4, "g"),
    ("Sweet potato", "vegetable", 86, 1.6, 20.1, 0.1, 3.0, 4.2, "g"),
    ("Avocado", "fat", 160, 2.0, 8.5, 14.7, 6.7, 0.7, "g"),
    ("Olive oil", "fat", 884, 0.0, 0.0, 100.0, 0.0, 0.0, "ml"),
    ("Almonds", "fat", 579, 21.2, 21.6, 49.9, 12.5, 4.4, "g"),
    ("Black beans, cooked", "legume", 132, 8.9, 23.7, 0.5, 8.7, 0.3, "g"),
]


def catalog_profiles() -> list[FoodProfile]:
    return [
        FoodProfile(
            name=name,
            category=category,
            nutrients_per_serving=Nutrients(
                calories=cal, protein=protein, carbs=carbs, fat=fat, fiber=fiber, sugar=sugar,
            ),
            serving_size=100,
            serving_unit=ServingUnit(unit),
        )
        for name, category, cal, protein, carbs, fat, fiber, sugar, unit in COMMON_FOODS
    ]


async def seed_food_items(session: AsyncSession) -> int:
    """Insert the common foods if the catalog is empty. Returns rows added."""
    repo = Repository(session)
    if await repo.count_food_items():
        return 0
    profiles = catalog_profiles()
    for food in profiles:
        await repo.create_food_item(food)
    await session.commit()
    logger.info("Seeded %d food items", len(profiles))
    return len(profiles)
