"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

import pytest

from recipe_nutrition.config import Settings
from recipe_nutrition.domain.foods import FoodPage, FoodRecord, FoodUnit
from recipe_nutrition.domain.nutrition import NutritionResult
from recipe_nutrition.domain.recipes import Ingredient, IngredientFoodMap, Recipe
from recipe_nutrition.services.cache import InMemoryCache
from recipe_nutrition.services.catalog import FoodRepository
from recipe_nutrition.services.matching import FoodMatcher
from recipe_nutrition.services.nutrition import RecipeRepository


def make_food(
    food_id: str,
    name: str,
    kcal: float = 100.0,
    protein: float = 10.0,
    carbs: float = 10.0,
    fat: float = 2.0,
    units: tuple[FoodUnit, ...] = (),
    **extra: object,
) -> FoodRecord:
    """Build a food record with sensible defaults."""
    values: dict[str, object] = {
        "brand": None,
        "category_id": None,
        "source": "template",
        "verification": "verified",
    }
    values.update(extra)
    return FoodRecord(
        id=food_id,
        name=name,
        kcal_100g=kcal,
        protein_100g=protein,
        carbs_100g=carbs,
        fat_100g=fat,
        units=units,
        **values,
    )


@dataclass
class InMemoryFoodRepository(FoodRepository):
    """In-memory food repository for tests."""

    foods: dict[str, FoodRecord] = field(default_factory=dict)
    aliases: list[tuple[str, str]] = field(default_factory=list)
    alias_lookups: list[str] = field(default_factory=list)

    def add(self, food: FoodRecord, *aliases: str) -> FoodRecord:
        self.foods[food.id] = food
        for alias in aliases:
            self.create_alias(food.id, alias)
        return food

    def get_food(self, food_id: str) -> FoodRecord | None:
        return self.foods.get(food_id)

    def find_aliases(self, alias_key: str) -> list[FoodRecord]:
        self.alias_lookups.append(alias_key)
        ids = [food_id for food_id, alias in self.aliases if alias == alias_key]
        return [self.foods[food_id] for food_id in ids if food_id in self.foods]

    def create_unit(self, food_id: str, label: str, grams: float) -> None:
        food = self.foods[food_id]
        self.foods[food_id] = replace(
            food, units=(*food.units, FoodUnit(label=label, grams=grams))
        )

    def create_alias(self, food_id: str, alias: str) -> bool:
        if (food_id, alias) in self.aliases:
            return False
        self.aliases.append((food_id, alias))
        return True

    def list_foods_paged(self, page_size: int, cursor: str | None) -> FoodPage:
        ids = sorted(
            food_id for food_id in self.foods if cursor is None or food_id > cursor
        )
        page = [self.foods[food_id] for food_id in ids[:page_size]]
        next_cursor = page[-1].id if len(page) == page_size else None
        return FoodPage(items=page, next_cursor=next_cursor)

    def upsert_food(self, food: FoodRecord) -> bool:
        existing = self.foods.get(food.id)
        units = existing.units if existing else ()
        self.foods[food.id] = replace(food, units=units)
        return existing is None


@dataclass
class InMemoryRecipeRepository(RecipeRepository):
    """In-memory recipe repository for tests."""

    recipes: dict[str, Recipe] = field(default_factory=dict)
    maps: dict[str, IngredientFoodMap] = field(default_factory=dict)
    results: dict[str, NutritionResult] = field(default_factory=dict)
    writes: int = 0

    def add(self, recipe: Recipe) -> Recipe:
        self.recipes[recipe.id] = recipe
        for ingredient in recipe.ingredients:
            if ingredient.food_map is not None:
                self.maps[ingredient.id] = ingredient.food_map
        return recipe

    def get_recipe_with_ingredients(self, recipe_id: str) -> Recipe | None:
        recipe = self.recipes.get(recipe_id)
        if recipe is None:
            return None
        return replace(
            recipe,
            ingredients=[
                replace(ingredient, food_map=self.maps.get(ingredient.id))
                for ingredient in recipe.ingredients
            ],
        )

    def get_ingredient(self, ingredient_id: str) -> Ingredient | None:
        for recipe in self.recipes.values():
            for ingredient in recipe.ingredients:
                if ingredient.id == ingredient_id:
                    return replace(ingredient, food_map=self.maps.get(ingredient_id))
        return None

    def upsert_ingredient_food_map(
        self, ingredient_id: str, food_id: str, confidence: float, mapped_by: str
    ) -> IngredientFoodMap:
        mapping = IngredientFoodMap(
            ingredient_id=ingredient_id,
            food_id=food_id,
            confidence=confidence,
            mapped_by=mapped_by,
            updated_at=datetime.now(tz=UTC),
        )
        self.maps[ingredient_id] = mapping
        return mapping

    def upsert_nutrition_result(self, result: NutritionResult) -> None:
        self.writes += 1
        self.results[result.recipe_id] = result


def mapped(
    ingredient_id: str,
    name: str,
    food_id: str,
    quantity: float | None = None,
    unit: str | None = None,
    confidence: float = 1.0,
    recipe_id: str = "recipe-1",
) -> Ingredient:
    """Build an ingredient that is already mapped to a food."""
    return Ingredient(
        id=ingredient_id,
        recipe_id=recipe_id,
        name=name,
        quantity=quantity,
        unit=unit,
        food_map=IngredientFoodMap(
            ingredient_id=ingredient_id,
            food_id=food_id,
            confidence=confidence,
            mapped_by="manual",
        ),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()


@pytest.fixture
def recipe_repository() -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository()


@pytest.fixture
def food_matcher(food_repository: InMemoryFoodRepository) -> FoodMatcher:
    return FoodMatcher(repository=food_repository, cache=InMemoryCache())
