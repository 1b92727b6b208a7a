"""Nutrition scaling and recipe-level aggregation."""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from recipe_nutrition.domain.errors import NotFoundError, ValidationError
from recipe_nutrition.domain.foods import FoodRecord
from recipe_nutrition.domain.nutrition import (
    IngredientNutrition,
    MacroProfile,
    NutritionResult,
)
from recipe_nutrition.domain.recipes import Ingredient, IngredientFoodMap, Recipe
from recipe_nutrition.services.catalog import FoodRepository
from recipe_nutrition.services.rounding import round_half_up
from recipe_nutrition.services.scoring import HealthScorer
from recipe_nutrition.services.servings import resolve_grams

LOW_CONFIDENCE_THRESHOLD = 0.5
PROVISIONAL_LOW_CONFIDENCE_SHARE = 0.30

_logger = logging.getLogger(__name__)


class RecipeRepository(Protocol):
    """Persistence interface for recipes, ingredient maps and results."""

    def get_recipe_with_ingredients(self, recipe_id: str) -> Recipe | None:
        """Return a recipe with ingredients and their current food maps."""

    def get_ingredient(self, ingredient_id: str) -> Ingredient | None:
        """Return a single ingredient, if present."""

    def upsert_ingredient_food_map(
        self, ingredient_id: str, food_id: str, confidence: float, mapped_by: str
    ) -> IngredientFoodMap:
        """Create or refresh the map between an ingredient and a food."""

    def upsert_nutrition_result(self, result: NutritionResult) -> None:
        """Atomically replace the stored nutrition of a recipe."""


def scale_per_100g(profile: MacroProfile, grams: float) -> MacroProfile:
    """Scale a per-100g profile to an amount in grams.

    Calories are rounded to whole numbers and the other fields to one
    decimal, half away from zero.
    """
    if not math.isfinite(grams) or grams < 0:
        raise ValidationError(f"grams must be a non-negative number, got {grams}")
    factor = grams / 100
    return _rounded(
        MacroProfile(
            calories=profile.calories * factor,
            protein_g=profile.protein_g * factor,
            carbs_g=profile.carbs_g * factor,
            fat_g=profile.fat_g * factor,
            fiber_g=profile.fiber_g * factor,
            sugar_g=profile.sugar_g * factor,
        )
    )


def sum_profiles(profiles: Iterable[MacroProfile]) -> MacroProfile:
    """Sum profiles independently of their order."""
    items = list(profiles)
    return _rounded(
        MacroProfile(
            calories=math.fsum(p.calories for p in items),
            protein_g=math.fsum(p.protein_g for p in items),
            carbs_g=math.fsum(p.carbs_g for p in items),
            fat_g=math.fsum(p.fat_g for p in items),
            fiber_g=math.fsum(p.fiber_g for p in items),
            sugar_g=math.fsum(p.sugar_g for p in items),
        )
    )


def _rounded(profile: MacroProfile) -> MacroProfile:
    return MacroProfile(
        calories=round_half_up(profile.calories),
        protein_g=round_half_up(profile.protein_g, 1),
        carbs_g=round_half_up(profile.carbs_g, 1),
        fat_g=round_half_up(profile.fat_g, 1),
        fiber_g=round_half_up(profile.fiber_g, 1),
        sugar_g=round_half_up(profile.sugar_g, 1),
    )


@dataclass
class RecipeNutritionService:
    """Computes and stores recipe nutrition from mapped ingredients."""

    recipe_repository: RecipeRepository
    food_repository: FoodRepository
    scorer: HealthScorer = field(default_factory=HealthScorer)
    default_goal: str = "general"

    def compute_recipe_nutrition(
        self, recipe_id: str, goal: str | None = None
    ) -> NutritionResult:
        """Recompute nutrition for a recipe and replace the stored result.

        Everything is computed before the single upsert, so a failure leaves
        any previously stored result untouched.
        """
        resolved_goal = goal or self.default_goal
        if resolved_goal not in self.scorer.strategies:
            raise ValidationError(
                f"unknown goal {resolved_goal!r}",
                details=[f"expected one of {self.scorer.goals()}"],
            )
        recipe = self.recipe_repository.get_recipe_with_ingredients(recipe_id)
        if recipe is None:
            raise NotFoundError("recipe", recipe_id)

        result = self.build_result(recipe, resolved_goal)
        self.recipe_repository.upsert_nutrition_result(result)
        _logger.info(
            "Recipe nutrition computed: recipe_id=%s goal=%s calories=%s score=%s",
            recipe_id,
            resolved_goal,
            result.totals.calories,
            result.score.value,
        )
        return result

    def build_result(self, recipe: Recipe, goal: str) -> NutritionResult:
        """Scale and sum the mapped ingredients of a recipe without storing."""
        foods: dict[str, FoodRecord | None] = {}
        items: list[IngredientNutrition] = []
        skipped: list[str] = []
        for ingredient in recipe.ingredients:
            item = self._scale_ingredient(ingredient, foods)
            if item is None:
                skipped.append(ingredient.id)
            else:
                items.append(item)

        totals = sum_profiles(item.profile for item in items)
        low_share = _low_confidence_share(items)
        reasons: list[str] = []
        if skipped:
            plural = "s" if len(skipped) > 1 else ""
            reasons.append(f"{len(skipped)} unmapped ingredient{plural}")
            _logger.warning(
                "Partial recipe nutrition: recipe_id=%s skipped=%s of %s",
                recipe.id,
                len(skipped),
                len(recipe.ingredients),
            )
        if low_share >= PROVISIONAL_LOW_CONFIDENCE_SHARE:
            reasons.append(f"{round(low_share * 100)}% from low-confidence mappings")

        return NutritionResult(
            recipe_id=recipe.id,
            goal=goal,
            totals=totals,
            score=self.scorer.score(totals, goal),
            ingredients=items,
            unmapped_ingredient_ids=skipped,
            provisional=bool(reasons),
            provisional_reasons=reasons,
            low_confidence_share=round_half_up(low_share, 3),
            computed_at=datetime.now(tz=UTC),
        )

    def _scale_ingredient(
        self, ingredient: Ingredient, foods: dict[str, FoodRecord | None]
    ) -> IngredientNutrition | None:
        mapping = ingredient.food_map
        if mapping is None:
            return None
        if mapping.food_id not in foods:
            foods[mapping.food_id] = self.food_repository.get_food(mapping.food_id)
        food = foods[mapping.food_id]
        if food is None:
            _logger.warning(
                "Mapped food missing: ingredient_id=%s food_id=%s",
                ingredient.id,
                mapping.food_id,
            )
            return None
        grams = resolve_grams(ingredient.quantity, ingredient.unit, food)
        if grams is None:
            _logger.warning(
                "No gram conversion: ingredient_id=%s unit=%s food_id=%s",
                ingredient.id,
                ingredient.unit,
                food.id,
            )
            return None
        return IngredientNutrition(
            ingredient_id=ingredient.id,
            food_id=food.id,
            grams=grams,
            profile=scale_per_100g(food.per_100g, grams),
            confidence=mapping.confidence,
        )


def _low_confidence_share(items: list[IngredientNutrition]) -> float:
    total = math.fsum(item.profile.calories for item in items)
    if total <= 0:
        return 0.0
    low = math.fsum(
        item.profile.calories
        for item in items
        if item.confidence < LOW_CONFIDENCE_THRESHOLD
    )
    return low / total
