"""
Pydantic models for the structured JSON returned by the inference service.

Each top-level schema corresponds to one AI operation's expected response.
Used by response_mapper.py to validate payloads before they reach callers.

Strings the model produces about conditions (triggered conditions,
alternative names) are display text only. They are never matched back
against the rule store.
"""

from datetime import datetime
from enum import Enum
from typing import Any, NewType

from pydantic import BaseModel, field_validator

DisplayText = NewType("DisplayText", str)


class RiskLevel(str, Enum):
    SAFE = "SAFE"
    MODERATE = "MODERATE"
    RISKY = "RISKY"
    UNKNOWN = "UNKNOWN"


_RISK_LEVELS = {
    "SAFE": RiskLevel.SAFE,
    "MODERATE": RiskLevel.MODERATE,
    "RISKY": RiskLevel.RISKY,
}


def map_risk_level(value: Any) -> RiskLevel:
    """Exact match on SAFE/MODERATE/RISKY; anything else is UNKNOWN."""
    if isinstance(value, RiskLevel):
        return value
    if not isinstance(value, str):
        return RiskLevel.UNKNOWN
    return _RISK_LEVELS.get(value, RiskLevel.UNKNOWN)


# --- Food Risk Analysis (analyze_food_image) ---


class NutrientInfo(BaseModel):
    calories: float  # kcal
    carbs: float  # g
    protein: float  # g
    fat: float  # g
    sugar: float  # g
    sodium: float  # mg


class AlternativeFood(BaseModel):
    name: DisplayText
    reason: str


class AnalysisResult(BaseModel):
    food_name: str
    risk_level: RiskLevel
    risk_reason: str
    triggered_conditions: list[DisplayText]
    detailed_analysis: str
    portion_recommendation: str
    alternatives: list[AlternativeFood] = []
    nutrients: NutrientInfo

    @field_validator("risk_level", mode="before")
    @classmethod
    def _normalize_risk_level(cls, value):
        return map_risk_level(value)


# --- Care Plan (generate_diet_plan) ---


class DailyMealPlan(BaseModel):
    breakfast: str
    lunch: str
    dinner: str
    snacks: str


class Exercise(BaseModel):
    name: str
    duration_or_reps: str
    benefit: str


class WorkoutPlan(BaseModel):
    frequency: str
    avg_duration: str
    focus: str
    exercises: list[Exercise]
    precautions: list[str]


class DietPlanSchema(BaseModel):
    summary: str
    meals: DailyMealPlan
    workout: WorkoutPlan
    guidelines: list[str]
    lifestyle: list[str]


class AiDietPlan(DietPlanSchema):
    generated_at: datetime  # stamped locally, not by the model


# --- Recipe Generation (generate_recipes) ---


class MacroEstimate(BaseModel):
    calories: float
    protein: float
    carbs: float
    fat: float


class Recipe(BaseModel):
    name: str
    description: str
    ingredients: list[str]
    missing_ingredients: list[str]
    instructions: list[str]
    health_benefits: str
    macros_estimate: MacroEstimate


class ChefResponse(BaseModel):
    identified_ingredients: list[str]
    breakfast: Recipe
    lunch: Recipe
    dinner: Recipe
