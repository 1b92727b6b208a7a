"""Supabase implementation of the food catalog store."""

from dataclasses import dataclass

from supabase import Client

from recipe_nutrition.domain.foods import FoodPage, FoodRecord, FoodUnit
from recipe_nutrition.services.catalog import FoodRepository


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase-backed repository for foods, units and aliases."""

    client: Client

    def get_food(self, food_id: str) -> FoodRecord | None:
        """Return a food with its units, if present."""
        response = (
            self.client.table("foods")
            .select("*")
            .eq("id", food_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._with_units(response.data)[0]

    def find_aliases(self, alias_key: str) -> list[FoodRecord]:
        """Return every food carrying the alias."""
        alias_response = (
            self.client.table("food_aliases")
            .select("food_id")
            .eq("alias", alias_key)
            .execute()
        )
        food_ids = sorted({str(row["food_id"]) for row in alias_response.data or []})
        if not food_ids:
            return []
        foods_response = (
            self.client.table("foods").select("*").in_("id", food_ids).execute()
        )
        return self._with_units(foods_response.data or [])

    def create_unit(self, food_id: str, label: str, grams: float) -> None:
        """Create a serving unit for a food."""
        response = (
            self.client.table("food_units")
            .insert({"food_id": food_id, "label": label, "grams": grams})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food unit")

    def create_alias(self, food_id: str, alias: str) -> bool:
        """Create an alias, skipping duplicates."""
        response = (
            self.client.table("food_aliases")
            .upsert(
                {"food_id": food_id, "alias": alias},
                on_conflict="food_id,alias",
                ignore_duplicates=True,
            )
            .execute()
        )
        return bool(response.data)

    def list_foods_paged(self, page_size: int, cursor: str | None) -> FoodPage:
        """Return one keyset page of foods ordered by id."""
        query = self.client.table("foods").select("*").order("id")
        if cursor is not None:
            query = query.gt("id", cursor)
        response = query.limit(page_size).execute()
        items = self._with_units(response.data or [])
        next_cursor = items[-1].id if len(items) >= page_size else None
        return FoodPage(items=items, next_cursor=next_cursor)

    def upsert_food(self, food: FoodRecord) -> bool:
        """Insert or update a food row; return True when it was created."""
        existing = (
            self.client.table("foods")
            .select("id")
            .eq("id", food.id)
            .limit(1)
            .execute()
        )
        response = (
            self.client.table("foods")
            .upsert(_food_payload(food), on_conflict="id")
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to upsert food")
        return not existing.data

    def _with_units(self, rows: list[dict[str, object]]) -> list[FoodRecord]:
        if not rows:
            return []
        food_ids = [str(row["id"]) for row in rows]
        units_response = (
            self.client.table("food_units")
            .select("*")
            .in_("food_id", food_ids)
            .order("id")
            .execute()
        )
        units: dict[str, list[FoodUnit]] = {}
        for row in units_response.data or []:
            units.setdefault(str(row["food_id"]), []).append(_parse_unit(row))
        return [_parse_food(row, units.get(str(row["id"]), [])) for row in rows]


def _food_payload(food: FoodRecord) -> dict[str, object]:
    return {
        "id": food.id,
        "name": food.name,
        "brand": food.brand,
        "category_id": food.category_id,
        "source": food.source,
        "verification": food.verification,
        "kcal_100g": food.kcal_100g,
        "protein_100g": food.protein_100g,
        "carbs_100g": food.carbs_100g,
        "fat_100g": food.fat_100g,
        "fiber_100g": food.fiber_100g,
        "sugar_100g": food.sugar_100g,
        "density_gml": food.density_gml,
        "popularity": food.popularity,
    }


def _parse_unit(row: dict[str, object]) -> FoodUnit:
    """Parse a food unit row."""
    return FoodUnit(label=str(row.get("label", "")), grams=float(row.get("grams", 0)))


def _parse_food(row: dict[str, object], units: list[FoodUnit]) -> FoodRecord:
    """Parse a food row into a domain model."""
    density_raw = row.get("density_gml")
    return FoodRecord(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        brand=row.get("brand"),
        category_id=row.get("category_id"),
        source=str(row.get("source") or "community"),
        verification=str(row.get("verification") or "unverified"),
        kcal_100g=float(row.get("kcal_100g") or 0.0),
        protein_100g=float(row.get("protein_100g") or 0.0),
        carbs_100g=float(row.get("carbs_100g") or 0.0),
        fat_100g=float(row.get("fat_100g") or 0.0),
        fiber_100g=float(row.get("fiber_100g") or 0.0),
        sugar_100g=float(row.get("sugar_100g") or 0.0),
        density_gml=float(density_raw) if density_raw is not None else None,
        popularity=int(row.get("popularity") or 0),
        units=tuple(units),
    )
