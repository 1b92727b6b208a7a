"""Domain models for the food catalog."""

from dataclasses import dataclass

from recipe_nutrition.domain.nutrition import MacroProfile


@dataclass(frozen=True)
class FoodUnit:
    """A named serving unit and the grams it represents for one food."""

    label: str
    grams: float


@dataclass(frozen=True)
class FoodRecord:
    """Catalog entry with a per-100g macro profile."""

    id: str
    name: str
    brand: str | None
    category_id: str | None
    source: str
    verification: str
    kcal_100g: float
    protein_100g: float
    carbs_100g: float
    fat_100g: float
    fiber_100g: float = 0.0
    sugar_100g: float = 0.0
    density_gml: float | None = None
    popularity: int = 0
    units: tuple[FoodUnit, ...] = ()

    @property
    def per_100g(self) -> MacroProfile:
        """Return the per-100g macro profile."""
        return MacroProfile(
            calories=self.kcal_100g,
            protein_g=self.protein_100g,
            carbs_g=self.carbs_100g,
            fat_g=self.fat_100g,
            fiber_g=self.fiber_100g,
            sugar_g=self.sugar_100g,
        )


@dataclass(frozen=True)
class ServingOption:
    """A selectable serving and its mass in grams."""

    label: str
    grams: float


@dataclass(frozen=True)
class FoodPage:
    """One page of foods from a keyset-paginated listing."""

    items: list[FoodRecord]
    next_cursor: str | None


@dataclass(frozen=True)
class FoodMatch:
    """Result of resolving ingredient text to a food."""

    food_id: str
    confidence: float
    alias: str
    strategy: str
