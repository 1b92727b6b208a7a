"""Domain models for recipes and ingredient mappings."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class IngredientFoodMap:
    """Link between an ingredient and the food it was mapped to."""

    ingredient_id: str
    food_id: str
    confidence: float
    mapped_by: str
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Ingredient:
    """Raw ingredient line of a recipe."""

    id: str
    recipe_id: str
    name: str
    quantity: float | None = None
    unit: str | None = None
    position: int = 0
    food_map: IngredientFoodMap | None = None


@dataclass(frozen=True)
class Recipe:
    """Recipe with its ingredients."""

    id: str
    title: str
    author_id: str | None = None
    ingredients: list[Ingredient] = field(default_factory=list)
