"""Nutrition domain models."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MacroProfile:
    """Calories and macronutrients for a reference or consumed amount."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float = 0.0
    sugar_g: float = 0.0


ZERO_PROFILE = MacroProfile(0, 0.0, 0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class HealthScore:
    """Goal-relative health rating of a recipe."""

    value: int
    label: str
    breakdown: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class IngredientNutrition:
    """Scaled nutrition for a single mapped ingredient."""

    ingredient_id: str
    food_id: str
    grams: float
    profile: MacroProfile
    confidence: float


@dataclass(frozen=True)
class NutritionResult:
    """Recipe-level nutrition computed from mapped ingredients."""

    recipe_id: str
    goal: str
    totals: MacroProfile
    score: HealthScore
    ingredients: list[IngredientNutrition]
    unmapped_ingredient_ids: list[str]
    provisional: bool
    provisional_reasons: list[str]
    low_confidence_share: float
    computed_at: datetime
