"""Tests for the catalog service."""

import pytest

from recipe_nutrition.domain.errors import NotFoundError, ValidationError
from recipe_nutrition.domain.foods import FoodUnit
from recipe_nutrition.services.catalog import CatalogService
from tests.conftest import InMemoryFoodRepository, make_food


def test_get_food_missing_raises(food_repository: InMemoryFoodRepository) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        CatalogService(food_repository).get_food("nope")
    assert str(excinfo.value) == "food not found: nope"


def test_serving_options_use_units_and_density(
    food_repository: InMemoryFoodRepository,
) -> None:
    food_repository.add(
        make_food(
            "oil", "Olive Oil", category_id="oil", units=(FoodUnit("1 tbsp", 13.5),)
        )
    )

    options = CatalogService(food_repository).serving_options("oil")

    assert [o.label for o in options] == ["1 tbsp", "1 tsp", "1 cup", "1 ml"]


def test_add_unit_stores_trimmed_label(food_repository: InMemoryFoodRepository) -> None:
    food_repository.add(make_food("egg", "Egg"))
    service = CatalogService(food_repository)

    service.add_unit("egg", "  1 large ", 50)
    service.add_unit("egg", "1 large", 55)

    assert food_repository.foods["egg"].units == (FoodUnit("1 large", 50),)


@pytest.mark.parametrize(
    ("label", "grams"), [("", 10), ("   ", 10), ("1 slice", 0), ("1 slice", -3)]
)
def test_add_unit_validates_input(
    food_repository: InMemoryFoodRepository, label: str, grams: float
) -> None:
    food_repository.add(make_food("bread", "Bread"))
    with pytest.raises(ValidationError):
        CatalogService(food_repository).add_unit("bread", label, grams)


def test_add_unit_unknown_food(food_repository: InMemoryFoodRepository) -> None:
    with pytest.raises(NotFoundError):
        CatalogService(food_repository).add_unit("ghost", "1 cup", 100)
