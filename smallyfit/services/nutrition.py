"""Meal nutrition aggregation.

A meal keeps running totals of its items instead of recomputing on read.
Adding a food snapshots its scaled nutrients; removing it subtracts exactly
that snapshot, floored at zero per nutrient.

Rounding: calories to the nearest integer, macros to one decimal (half-up).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from smallyfit.models import FoodProfile
from smallyfit.services.rounding import round_half_up, round_int


@dataclass(frozen=True)
class MacroTotals:
    calories: int = 0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    def as_dict(self) -> dict:
        return {"calories": self.calories, "protein": self.protein, "carbs": self.carbs, "fat": self.fat}


@dataclass(frozen=True)
class ItemSnapshot:
    """Nutrient contribution of one meal item, frozen at add time."""
    food_item_id: Optional[str]
    food_name: str
    quantity: float
    calories: int
    protein: float
    carbs: float
    fat: float


def scale_nutrient(per_serving_value: float, serving_size: float, quantity: float) -> float:
    return per_serving_value * (quantity / serving_size)


def snapshot_for(food: FoodProfile, quantity: float) -> ItemSnapshot:
    n = food.nutrients_per_serving
    size = food.serving_size
    return ItemSnapshot(
        food_item_id=food.id,
        food_name=food.name,
        quantity=quantity,
        calories=round_int(scale_nutrient(n.calories, size, quantity)),
        protein=round_half_up(scale_nutrient(n.protein, size, quantity), 1),
        carbs=round_half_up(scale_nutrient(n.carbs, size, quantity), 1),
        fat=round_half_up(scale_nutrient(n.fat, size, quantity), 1),
    )


def add_item_to_meal(
    meal: MacroTotals, food: FoodProfile, quantity: float
) -> tuple[MacroTotals, ItemSnapshot]:
    """Return the meal totals with the new item added, plus the item snapshot."""
    item = snapshot_for(food, quantity)
    updated = MacroTotals(
        calories=meal.calories + item.calories,
        protein=round_half_up(meal.protein + item.protein, 1),
        carbs=round_half_up(meal.carbs + item.carbs, 1),
        fat=round_half_up(meal.fat + item.fat, 1),
    )
    return updated, item


def remove_item_from_meal(meal: MacroTotals, item: ItemSnapshot | MacroTotals) -> MacroTotals:
    """Subtract a stored contribution. Never goes below zero."""
    return MacroTotals(
        calories=max(0, meal.calories - item.calories),
        protein=max(0.0, round_half_up(meal.protein - item.protein, 1)),
        carbs=max(0.0, round_half_up(meal.carbs - item.carbs, 1)),
        fat=max(0.0, round_half_up(meal.fat - item.fat, 1)),
    )


def daily_totals(meals: Iterable[MacroTotals]) -> MacroTotals:
    """Field-wise sum over a day's meals; all zeros for no meals."""
    calories = 0
    protein = carbs = fat = 0.0
    for meal in meals:
        calories += meal.calories
        protein += meal.protein
        carbs += meal.carbs
        fat += meal.fat
    return MacroTotals(
        calories=calories,
        protein=round_half_up(protein, 1),
        carbs=round_half_up(carbs, 1),
        fat=round_half_up(fat, 1),
    )
