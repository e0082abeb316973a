"""
Deterministic nutrition score (0-10) for one serving.

Each nutrient scores 10 at or below its healthy threshold and falls
linearly to 0 at its ceiling. The overall score is the mean.
"""

from typing import Dict, Tuple

from goindia.models.food import NutrientScore, NutritionEstimate

# nutrient -> (healthy threshold, ceiling) per serving
THRESHOLDS: Dict[str, Tuple[float, float]] = {
    "calories": (300.0, 1000.0),
    "fat": (10.0, 45.0),
    "sodium": (400.0, 2000.0),
    "sugar": (5.0, 40.0),
}


def nutrient_score(value: float, threshold: float, ceiling: float) -> float:
    if value <= threshold:
        return 10.0
    if value >= ceiling:
        return 0.0
    return round(10.0 * (ceiling - value) / (ceiling - threshold), 1)


def score_nutrition(estimate: NutritionEstimate) -> Tuple[float, Dict[str, NutrientScore]]:
    values = {
        "calories": estimate.calories,
        "fat": estimate.fat_g,
        "sodium": estimate.sodium_mg,
        "sugar": estimate.sugar_g,
    }
    breakdown = {
        name: NutrientScore(value=value, score=nutrient_score(value, *THRESHOLDS[name]))
        for name, value in values.items()
    }
    overall = round(sum(s.score for s in breakdown.values()) / len(breakdown), 1)
    return overall, breakdown
