"""Food data models — the tagged record every food search/selection flow uses."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ServingUnit(str, Enum):
    GRAMS = "g"
    MILLILITERS = "ml"


class Nutrients(BaseModel):
    """Nutrient values for one serving."""
    calories: float = Field(..., ge=0)
    protein: float = Field(0, ge=0)
    carbs: float = Field(0, ge=0)
    fat: float = Field(0, ge=0)
    fiber: float = Field(0, ge=0)
    sugar: float = Field(0, ge=0)


class FoodProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = Field(None, max_length=50)
    nutrients_per_serving: Nutrients
    serving_size: float = Field(100, gt=0)
    serving_unit: ServingUnit = ServingUnit.GRAMS
