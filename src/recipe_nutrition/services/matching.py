"""Alias-based matching of ingredient text to catalog foods."""

import logging
import math
from dataclasses import dataclass, field

from recipe_nutrition.domain.errors import NotFoundError, ValidationError
from recipe_nutrition.domain.foods import FoodMatch, FoodRecord
from recipe_nutrition.domain.recipes import IngredientFoodMap
from recipe_nutrition.services.cache import Cache
from recipe_nutrition.services.catalog import FoodRepository
from recipe_nutrition.services.nutrition import RecipeRepository
from recipe_nutrition.services.servings import canonical_unit, parse_quantity
from recipe_nutrition.services.text import normalize

EXACT_CONFIDENCE = 1.0
REDUCED_CONFIDENCE = 0.8

_ARTICLES = frozenset({"a", "an"})
_MEASURE_QUALIFIERS = frozenset({"heaping", "heaped", "level", "scant", "rounded"})

_logger = logging.getLogger(__name__)


def reduce_ingredient_text(text: str) -> str:
    """Strip leading quantities and units and trailing notes.

    "2 tbsp extra virgin olive oil (cold pressed)" becomes
    "extra virgin olive oil". The last word is always kept.
    """
    head = text.split(",", 1)[0]
    tokens = normalize(head).split()
    index = 0
    while index < len(tokens) - 1:
        token = tokens[index]
        if (
            parse_quantity(token) is not None
            or canonical_unit(token) is not None
            or token in _MEASURE_QUALIFIERS
            or (token in _ARTICLES and index == 0)
            or (token == "of" and index > 0)
        ):
            index += 1
            continue
        break
    return " ".join(tokens[index:])


def pick_candidate(candidates: list[FoodRecord]) -> FoodRecord | None:
    """Prefer the most popular food, then the smallest id."""
    if not candidates:
        return None
    return min(candidates, key=lambda food: (-food.popularity, food.id))


@dataclass
class FoodMatcher:
    """Resolves free-text ingredients through the alias table. Read-only."""

    repository: FoodRepository
    cache: Cache
    alias_ttl_seconds: int = 60

    def match(self, ingredient_text: str) -> FoodMatch | None:
        """Return the matched food, or None when the text needs manual mapping."""
        key = normalize(ingredient_text)
        if not key:
            return None
        food = pick_candidate(self._candidates(key))
        if food is not None:
            return FoodMatch(
                food_id=food.id,
                confidence=EXACT_CONFIDENCE,
                alias=key,
                strategy="exact",
            )

        reduced = reduce_ingredient_text(ingredient_text)
        if reduced and reduced != key:
            food = pick_candidate(self._candidates(reduced))
            if food is not None:
                return FoodMatch(
                    food_id=food.id,
                    confidence=REDUCED_CONFIDENCE,
                    alias=reduced,
                    strategy="reduced",
                )
        _logger.debug("No food match: text=%s", ingredient_text)
        return None

    def _candidates(self, alias_key: str) -> list[FoodRecord]:
        cache_key = f"alias:{alias_key}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached
        foods = self.repository.find_aliases(alias_key)
        self.cache.set(cache_key, foods, ttl_seconds=self.alias_ttl_seconds)
        return foods


@dataclass
class AutoMapSummary:
    """Outcome of auto-mapping a recipe's ingredients."""

    mapped: int = 0
    skipped: int = 0
    unmatched_ingredient_ids: list[str] = field(default_factory=list)


@dataclass
class IngredientMappingService:
    """Maps recipe ingredients to foods, automatically or by hand."""

    matcher: FoodMatcher
    recipe_repository: RecipeRepository
    food_repository: FoodRepository

    def auto_map(self, recipe_id: str) -> AutoMapSummary:
        """Match every unmapped ingredient of a recipe and store the maps."""
        recipe = self.recipe_repository.get_recipe_with_ingredients(recipe_id)
        if recipe is None:
            raise NotFoundError("recipe", recipe_id)
        summary = AutoMapSummary()
        for ingredient in recipe.ingredients:
            if ingredient.food_map is not None:
                summary.skipped += 1
                continue
            match = self.matcher.match(ingredient.name)
            if match is None:
                summary.unmatched_ingredient_ids.append(ingredient.id)
                continue
            self.recipe_repository.upsert_ingredient_food_map(
                ingredient.id, match.food_id, match.confidence, mapped_by="auto"
            )
            summary.mapped += 1
        _logger.info(
            "Auto-map done: recipe_id=%s mapped=%s unmatched=%s skipped=%s",
            recipe_id,
            summary.mapped,
            len(summary.unmatched_ingredient_ids),
            summary.skipped,
        )
        return summary

    def map_ingredient(
        self, ingredient_id: str, food_id: str, confidence: float = 1.0
    ) -> IngredientFoodMap:
        """Store a confirmed mapping for an ingredient."""
        if not math.isfinite(confidence) or not 0.0 <= confidence <= 1.0:
            raise ValidationError(
                f"confidence must be within [0, 1], got {confidence}"
            )
        if self.recipe_repository.get_ingredient(ingredient_id) is None:
            raise NotFoundError("ingredient", ingredient_id)
        if self.food_repository.get_food(food_id) is None:
            raise NotFoundError("food", food_id)
        return self.recipe_repository.upsert_ingredient_food_map(
            ingredient_id, food_id, confidence, mapped_by="manual"
        )
