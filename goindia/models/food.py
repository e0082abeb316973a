"""
goindia/models/food.py

Nutrition inputs and food score output.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class NutritionEstimate(BaseModel):
    dish_label: str
    calories: float = Field(ge=0)
    fat_g: float = Field(ge=0)
    sodium_mg: float = Field(ge=0)
    sugar_g: float = Field(ge=0)
    detected_method: Optional[str] = None


class NutrientScore(BaseModel):
    value: float
    score: float


class FoodAdvice(BaseModel):
    explanation: str
    suggestions: List[str] = []


class FoodScore(BaseModel):
    dish_label: str
    score: float
    breakdown: Dict[str, NutrientScore]
    explanation: str
    suggestions: List[str] = []
