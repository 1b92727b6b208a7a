"""Serving-size derivation and unit-to-gram resolution."""

import logging
import math
import re
from collections.abc import Iterable

from recipe_nutrition.domain.errors import ValidationError
from recipe_nutrition.domain.foods import FoodRecord, FoodUnit, ServingOption
from recipe_nutrition.services.rounding import round_half_up

_logger = logging.getLogger(__name__)

MASS_GRAMS: dict[str, float] = {
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.349523125,
    "lb": 453.59237,
}

VOLUME_ML: dict[str, float] = {
    "ml": 1.0,
    "l": 1000.0,
    "tsp": 4.92892159375,
    "tbsp": 14.78676478125,
    "floz": 29.5735295625,
    "cup": 240.0,
}

# Grams per millilitre when a food has no density of its own.
CATEGORY_DEFAULTS: dict[str, float] = {
    "oil": 0.91,
    "flour": 0.53,
    "starch": 0.80,
    "powder": 0.55,
    "whey": 0.50,
    "sugar": 0.85,
    "rice": 0.85,
    "rice_uncooked": 0.85,
    "oats": 0.36,
    "grain": 0.80,
    "liquid": 1.00,
    "beverage": 1.00,
    "dairy": 1.03,
    "cheese": 1.10,
    "protein": 1.05,
    "meat": 1.00,
    "vegetable": 0.95,
    "veg": 0.95,
    "fruit": 0.95,
    "nut": 0.55,
    "nut_butter": 1.08,
    "seed": 0.60,
    "legume": 0.90,
    "condiment": 1.10,
}

GENERIC_VOLUME_UNITS = ("tsp", "tbsp", "cup", "ml")

UNIT_ALIASES: dict[str, str] = {
    "g": "g", "gr": "g", "gram": "g", "grams": "g",
    "kg": "kg", "kilogram": "kg", "kilograms": "kg",
    "oz": "oz", "ounce": "oz", "ounces": "oz",
    "lb": "lb", "lbs": "lb", "pound": "lb", "pounds": "lb",
    "ml": "ml", "milliliter": "ml", "milliliters": "ml",
    "millilitre": "ml", "millilitres": "ml",
    "l": "l", "liter": "l", "liters": "l", "litre": "l", "litres": "l",
    "tsp": "tsp", "tsps": "tsp", "teaspoon": "tsp", "teaspoons": "tsp",
    "tbsp": "tbsp", "tbsps": "tbsp", "tbs": "tbsp",
    "tablespoon": "tbsp", "tablespoons": "tbsp",
    "floz": "floz",
    "cup": "cup", "cups": "cup",
    "piece": "piece", "pieces": "piece",
    "slice": "slice", "slices": "slice",
    "scoop": "scoop", "scoops": "scoop",
    "clove": "clove", "cloves": "clove",
    "can": "can", "cans": "can",
    "stick": "stick", "sticks": "stick",
    "bar": "bar", "bars": "bar",
    "egg": "egg", "eggs": "egg",
    "pinch": "pinch", "pinches": "pinch",
    "dash": "dash", "dashes": "dash",
    "small": "small", "medium": "medium", "large": "large",
    "whole": "whole",
}  # fmt: skip

UNICODE_FRACTIONS: dict[str, float] = {
    "½": 0.5,
    "¼": 0.25,
    "¾": 0.75,
    "⅓": 1 / 3,
    "⅔": 2 / 3,
    "⅛": 0.125,
    "⅜": 0.375,
    "⅝": 0.625,
    "⅞": 0.875,
}

_DECIMAL = re.compile(r"^\d+(?:\.\d+)?$")
_FRACTION = re.compile(r"^(\d+)/(\d+)$")
_RANGE = re.compile(r"^(\d+(?:\.\d+)?)[-–](\d+(?:\.\d+)?)$")
_LABEL_SPLIT = re.compile(r"[\s,]+")


def canonical_unit(token: str | None) -> str | None:
    """Map a unit token such as "Tablespoons" to its canonical key."""
    if not token:
        return None
    return UNIT_ALIASES.get(token.strip().lower().rstrip("."))


def parse_quantity(token: str) -> float | None:
    """Parse "2", "1.5", "1/2", "½", "2½" or "2-3" into a number."""
    value = token.strip()
    if not value:
        return None
    fraction = 0.0
    if value[-1] in UNICODE_FRACTIONS:
        fraction = UNICODE_FRACTIONS[value[-1]]
        value = value[:-1]
        if not value:
            return fraction
    if _DECIMAL.match(value):
        return float(value) + fraction
    if fraction:
        return None
    match = _FRACTION.match(value)
    if match:
        denominator = int(match.group(2))
        return int(match.group(1)) / denominator if denominator else None
    match = _RANGE.match(value)
    if match:
        return (float(match.group(1)) + float(match.group(2))) / 2
    return None


def category_density(category_id: str | None) -> float | None:
    """Return the configured default density for a category, if any."""
    if not category_id:
        return None
    return CATEGORY_DEFAULTS.get(category_id.lower())


def resolve_density(density_gml: float | None, category_id: str | None) -> float | None:
    """Prefer the food's own density, falling back to its category default."""
    if density_gml is not None and density_gml > 0:
        return density_gml
    return category_density(category_id)


def derive_serving_options(
    units: Iterable[FoodUnit],
    density_gml: float | None,
    category_id: str | None,
    include_generic: bool = True,
) -> list[ServingOption]:
    """Return declared units followed by density-derived volumetric servings.

    Declared units are food-specific and win over generic options with the
    same label. Generic teaspoon, tablespoon, cup and millilitre options are
    only produced when a density is known; nothing is guessed otherwise.
    Options whose grams are not positive are dropped.
    """
    options: list[ServingOption] = []
    seen: set[str] = set()
    for unit in units:
        if not _positive(unit.grams):
            _logger.warning("Dropping non-positive unit: label=%s", unit.label)
            continue
        if unit.label in seen:
            continue
        seen.add(unit.label)
        options.append(ServingOption(label=unit.label, grams=unit.grams))

    density = resolve_density(density_gml, category_id) if include_generic else None
    if density is None:
        return options
    for key in GENERIC_VOLUME_UNITS:
        label = f"1 {key}"
        grams = round_half_up(VOLUME_ML[key] * density, 2)
        if label in seen or not _positive(grams):
            continue
        seen.add(label)
        options.append(ServingOption(label=label, grams=grams))
    return options


def resolve_grams(
    quantity: float | None, unit: str | None, food: FoodRecord
) -> float | None:
    """Convert an ingredient quantity and unit into grams of a food.

    Mass units convert directly. Volume and count units are matched against
    the food's serving options; volumes can also go through the derived
    millilitre option. An unrecognized or missing unit falls back to the
    first declared unit. Returns None when no conversion applies.
    """
    amount = 1.0 if quantity is None else float(quantity)
    if not math.isfinite(amount) or amount < 0:
        raise ValidationError(
            f"quantity must be a non-negative number, got {quantity}"
        )

    key = canonical_unit(unit)
    if key in MASS_GRAMS:
        return amount * MASS_GRAMS[key]

    options = derive_serving_options(food.units, food.density_gml, food.category_id)
    if key is not None:
        per_unit = _grams_per_unit(key, options)
        if per_unit is None and key in VOLUME_ML:
            per_ml = _grams_per_unit("ml", options)
            if per_ml is not None:
                per_unit = VOLUME_ML[key] * per_ml
        if per_unit is not None:
            return amount * per_unit
    elif unit:
        per_unit = _grams_per_label(unit, options)
        if per_unit is not None:
            return amount * per_unit

    declared = [u for u in food.units if _positive(u.grams)]
    if declared:
        _logger.debug(
            "Unit fallback: food_id=%s unit=%s label=%s",
            food.id,
            unit,
            declared[0].label,
        )
        return amount * declared[0].grams
    return None


def _grams_per_unit(key: str, options: list[ServingOption]) -> float | None:
    for option in options:
        count, label_unit = _parse_label(option.label)
        if count and canonical_unit(label_unit) == key:
            return option.grams / count
    return None


def _grams_per_label(unit: str, options: list[ServingOption]) -> float | None:
    wanted = unit.strip().lower()
    for option in options:
        count, label_unit = _parse_label(option.label)
        if count and label_unit == wanted:
            return option.grams / count
    return None


def _parse_label(label: str) -> tuple[float | None, str]:
    """Split a label like "1 cup, diced" into (1.0, "cup")."""
    tokens = [token for token in _LABEL_SPLIT.split(label.lower()) if token]
    if not tokens:
        return None, ""
    count = parse_quantity(tokens[0])
    if count is None:
        return 1.0, tokens[0]
    return count, tokens[1] if len(tokens) > 1 else ""


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0
