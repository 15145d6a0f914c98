"""Body metrics — BMI, water goal, calorie goal and weight progress.

Pure functions only. Inputs are assumed validated at the API boundary
(positive weight/height); nothing here guards against zero or negative values.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from smallyfit.services.rounding import round_half_up, round_int

WATER_ML_PER_KG = 35


class BMICategory(str, Enum):
    UNDERWEIGHT = "underweight"
    HEALTHY = "healthy"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


class Goal(str, Enum):
    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


CALORIE_GOALS: dict[Goal, int] = {
    Goal.LOSE: 1500,
    Goal.MAINTAIN: 2000,
    Goal.GAIN: 2500,
}


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """BMI = weight (kg) / height (m)^2."""
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def categorize_bmi(bmi: float) -> BMICategory:
    # Strict less-than: 25.0 is already overweight
    if bmi < 18.5:
        return BMICategory.UNDERWEIGHT
    if bmi < 25.0:
        return BMICategory.HEALTHY
    if bmi < 30.0:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


def recommended_water_intake_ml(weight_kg: float) -> int:
    return round_int(weight_kg * WATER_ML_PER_KG)


def calorie_goal(goal: Goal | str | None) -> int:
    """Daily calorie target for a nutrition goal. Unknown/missing → maintain."""
    try:
        return CALORIE_GOALS[Goal(goal)]
    except ValueError:
        return CALORIE_GOALS[Goal.MAINTAIN]


@dataclass(frozen=True)
class WeightProgress:
    start_weight: Optional[float]
    current_weight: Optional[float]
    goal_weight: Optional[float]
    progress: int  # percent, 0-100


def weight_progress(weights_newest_first: Sequence[float]) -> WeightProgress:
    """Progress from the first recorded weight towards a derived goal weight.

    The goal is 90% of the starting weight if the user has been losing weight,
    110% otherwise.
    """
    if not weights_newest_first:
        return WeightProgress(None, None, None, 0)

    start = weights_newest_first[-1]
    current = weights_newest_first[0]
    goal = start * 0.9 if start > current else start * 1.1

    total = abs(goal - start)
    moved = abs(current - start)
    progress = min(100, round_int(moved / total * 100)) if total else 0
    return WeightProgress(
        start_weight=start,
        current_weight=current,
        goal_weight=round_half_up(goal, 1),
        progress=progress,
    )
