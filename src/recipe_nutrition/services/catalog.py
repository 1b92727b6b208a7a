"""Services for reading and extending the food catalog."""

import logging
import math
from dataclasses import dataclass
from typing import Protocol

from recipe_nutrition.domain.errors import NotFoundError, ValidationError
from recipe_nutrition.domain.foods import FoodPage, FoodRecord, ServingOption
from recipe_nutrition.services.servings import derive_serving_options

_logger = logging.getLogger(__name__)


class FoodRepository(Protocol):
    """Persistence interface for food records, units and aliases."""

    def get_food(self, food_id: str) -> FoodRecord | None:
        """Return a food with its units, if present."""

    def find_aliases(self, alias_key: str) -> list[FoodRecord]:
        """Return every food that has the given normalized alias."""

    def create_unit(self, food_id: str, label: str, grams: float) -> None:
        """Create a serving unit for a food."""

    def create_alias(self, food_id: str, alias: str) -> bool:
        """Create an alias unless it exists; return whether a row was written."""

    def list_foods_paged(self, page_size: int, cursor: str | None) -> FoodPage:
        """Return foods ordered by id, starting after the cursor."""

    def upsert_food(self, food: FoodRecord) -> bool:
        """Insert or update a food; return True when it was created."""


@dataclass
class CatalogService:
    """Application service for catalog lookups and unit contributions."""

    repository: FoodRepository

    def get_food(self, food_id: str) -> FoodRecord:
        """Return a food or raise when it does not exist."""
        food = self.repository.get_food(food_id)
        if food is None:
            raise NotFoundError("food", food_id)
        return food

    def serving_options(self, food_id: str) -> list[ServingOption]:
        """Return the serving options available for a food."""
        food = self.get_food(food_id)
        return derive_serving_options(
            units=food.units,
            density_gml=food.density_gml,
            category_id=food.category_id,
        )

    def add_unit(self, food_id: str, label: str, grams: float) -> None:
        """Validate and store a contributed serving unit."""
        cleaned = label.strip()
        if not cleaned:
            raise ValidationError("unit label must not be empty")
        if not math.isfinite(grams) or grams <= 0:
            raise ValidationError(f"unit grams must be positive, got {grams}")
        food = self.get_food(food_id)
        if any(unit.label == cleaned for unit in food.units):
            _logger.info("Unit already present: food_id=%s label=%s", food_id, cleaned)
            return
        self.repository.create_unit(food_id, cleaned, grams)
