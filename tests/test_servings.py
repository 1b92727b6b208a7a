"""Tests for serving derivation and gram resolution."""

import pytest

from recipe_nutrition.domain.errors import ValidationError
from recipe_nutrition.domain.foods import FoodUnit
from recipe_nutrition.services.servings import (
    VOLUME_ML,
    canonical_unit,
    derive_serving_options,
    parse_quantity,
    resolve_grams,
)
from tests.conftest import make_food


def test_declared_units_come_first_then_generic_volumes() -> None:
    options = derive_serving_options(
        units=[FoodUnit(label="1 tbsp", grams=13.5)],
        density_gml=0.91,
        category_id="oil",
    )

    assert [(o.label, o.grams) for o in options] == [
        ("1 tbsp", 13.5),
        ("1 tsp", 4.49),
        ("1 cup", 218.4),
        ("1 ml", 0.91),
    ]


@pytest.mark.parametrize("density", [0.36, 0.91, 1.0, 1.2])
def test_generic_grams_follow_density(density: float) -> None:
    options = derive_serving_options(units=[], density_gml=density, category_id=None)
    grams = {o.label: o.grams for o in options}

    for key in ("tsp", "tbsp", "cup", "ml"):
        assert grams[f"1 {key}"] == pytest.approx(VOLUME_ML[key] * density, abs=0.006)


def test_generic_options_omitted_without_density() -> None:
    options = derive_serving_options(
        units=[FoodUnit(label="1 slice", grams=30)],
        density_gml=None,
        category_id="mystery",
    )
    assert [o.label for o in options] == ["1 slice"]


def test_category_default_density_is_used() -> None:
    options = derive_serving_options(units=[], density_gml=None, category_id="flour")
    grams = {o.label: o.grams for o in options}
    assert grams["1 cup"] == 127.2


def test_non_positive_and_duplicate_units_are_dropped() -> None:
    options = derive_serving_options(
        units=[
            FoodUnit(label="1 slice", grams=0),
            FoodUnit(label="1 piece", grams=20),
            FoodUnit(label="1 piece", grams=25),
        ],
        density_gml=None,
        category_id=None,
    )
    assert [(o.label, o.grams) for o in options] == [("1 piece", 20)]


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("2", 2.0),
        ("1.5", 1.5),
        ("1/2", 0.5),
        ("½", 0.5),
        ("2½", 2.5),
        ("2-3", 2.5),
        ("1/0", None),
        ("abc", None),
        ("", None),
    ],
)
def test_parse_quantity(token: str, expected: float | None) -> None:
    assert parse_quantity(token) == expected


def test_canonical_unit() -> None:
    assert canonical_unit("Tablespoons") == "tbsp"
    assert canonical_unit("tbsp.") == "tbsp"
    assert canonical_unit("handful") is None
    assert canonical_unit(None) is None


def test_resolve_mass_units() -> None:
    food = make_food("f", "Flour")
    assert resolve_grams(200, "g", food) == 200
    assert resolve_grams(2, "oz", food) == pytest.approx(56.699, abs=0.001)
    assert resolve_grams(0.5, "kg", food) == 500


def test_resolve_volume_through_declared_unit() -> None:
    food = make_food(
        "f", "Flour", category_id="flour", units=(FoodUnit("1 cup", 125),)
    )
    assert resolve_grams(2, "cups", food) == 250


def test_resolve_fractional_and_annotated_labels() -> None:
    oats = make_food("o", "Oats", category_id="oats", units=(FoodUnit("1/2 cup", 40),))
    cheese = make_food("c", "Mozzarella", units=(FoodUnit("1 cup, shredded", 112),))

    assert resolve_grams(1, "cup", oats) == 80
    assert resolve_grams(0.5, "cup", cheese) == 56


def test_resolve_volume_through_millilitres() -> None:
    milk = make_food("m", "Milk", density_gml=1.0)
    assert resolve_grams(1, "l", milk) == pytest.approx(1000)


def test_resolve_count_and_custom_labels() -> None:
    egg = make_food("e", "Egg", units=(FoodUnit("1 large", 50),))
    herbs = make_food("h", "Basil", units=(FoodUnit("1 handful", 30),))

    assert resolve_grams(2, "large", egg) == 100
    assert resolve_grams(2, "handful", herbs) == 60


def test_resolve_falls_back_to_first_declared_unit() -> None:
    egg = make_food("e", "Egg", units=(FoodUnit("1 large", 50),))

    assert resolve_grams(3, "jar", egg) == 150
    assert resolve_grams(None, None, egg) == 50


def test_resolve_returns_none_without_any_conversion() -> None:
    food = make_food("x", "Mystery")
    assert resolve_grams(1, "cup", food) is None


def test_resolve_rejects_negative_quantity() -> None:
    with pytest.raises(ValidationError):
        resolve_grams(-1, "g", make_food("f", "Flour"))
