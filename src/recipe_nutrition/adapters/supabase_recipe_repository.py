"""Supabase implementation of the recipe store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from recipe_nutrition.domain.nutrition import NutritionResult
from recipe_nutrition.domain.recipes import Ingredient, IngredientFoodMap, Recipe
from recipe_nutrition.services.nutrition import RecipeRepository


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase-backed repository for recipes, ingredient maps and results."""

    client: Client

    def get_recipe_with_ingredients(self, recipe_id: str) -> Recipe | None:
        """Return a recipe with ordered ingredients and their latest maps."""
        recipe_response = (
            self.client.table("recipes")
            .select("*")
            .eq("id", recipe_id)
            .limit(1)
            .execute()
        )
        if not recipe_response.data:
            return None
        row = recipe_response.data[0]
        ingredients_response = (
            self.client.table("ingredients")
            .select("*")
            .eq("recipe_id", recipe_id)
            .order("position")
            .execute()
        )
        rows = ingredients_response.data or []
        maps = self._latest_maps([str(item["id"]) for item in rows])
        return Recipe(
            id=str(row["id"]),
            title=str(row.get("title", "")),
            author_id=row.get("author_id"),
            ingredients=[
                _parse_ingredient(item, maps.get(str(item["id"]))) for item in rows
            ],
        )

    def get_ingredient(self, ingredient_id: str) -> Ingredient | None:
        """Return an ingredient with its latest map, if present."""
        response = (
            self.client.table("ingredients")
            .select("*")
            .eq("id", ingredient_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        maps = self._latest_maps([ingredient_id])
        return _parse_ingredient(response.data[0], maps.get(ingredient_id))

    def upsert_ingredient_food_map(
        self, ingredient_id: str, food_id: str, confidence: float, mapped_by: str
    ) -> IngredientFoodMap:
        """Create or refresh a map and mark it as the most recent one."""
        response = (
            self.client.table("ingredient_food_maps")
            .upsert(
                {
                    "ingredient_id": ingredient_id,
                    "food_id": food_id,
                    "confidence": confidence,
                    "mapped_by": mapped_by,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="ingredient_id,food_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to upsert ingredient food map")
        return _parse_map(response.data[0])

    def upsert_nutrition_result(self, result: NutritionResult) -> None:
        """Replace the stored nutrition of a recipe in one write."""
        response = (
            self.client.table("recipe_nutrition")
            .upsert(_result_payload(result), on_conflict="recipe_id")
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to upsert recipe nutrition")

    def _latest_maps(self, ingredient_ids: list[str]) -> dict[str, IngredientFoodMap]:
        if not ingredient_ids:
            return {}
        response = (
            self.client.table("ingredient_food_maps")
            .select("*")
            .in_("ingredient_id", ingredient_ids)
            .order("updated_at", desc=True)
            .execute()
        )
        latest: dict[str, IngredientFoodMap] = {}
        for row in response.data or []:
            mapping = _parse_map(row)
            latest.setdefault(mapping.ingredient_id, mapping)
        return latest


def _result_payload(result: NutritionResult) -> dict[str, object]:
    totals = result.totals
    return {
        "recipe_id": result.recipe_id,
        "goal": result.goal,
        "calories": totals.calories,
        "protein_g": totals.protein_g,
        "carbs_g": totals.carbs_g,
        "fat_g": totals.fat_g,
        "fiber_g": totals.fiber_g,
        "sugar_g": totals.sugar_g,
        "health_score": result.score.value,
        "health_label": result.score.label,
        "score_breakdown": result.score.breakdown,
        "per_ingredient": [
            {
                "ingredient_id": item.ingredient_id,
                "food_id": item.food_id,
                "grams": item.grams,
                "calories": item.profile.calories,
                "protein_g": item.profile.protein_g,
                "carbs_g": item.profile.carbs_g,
                "fat_g": item.profile.fat_g,
                "confidence": item.confidence,
            }
            for item in result.ingredients
        ],
        "unmapped_ingredient_ids": result.unmapped_ingredient_ids,
        "provisional": result.provisional,
        "provisional_reasons": result.provisional_reasons,
        "low_confidence_share": result.low_confidence_share,
        "computed_at": result.computed_at.isoformat(),
    }


def _parse_map(row: dict[str, object]) -> IngredientFoodMap:
    """Parse an ingredient map row."""
    updated_raw = row.get("updated_at")
    updated_at = (
        datetime.fromisoformat(updated_raw)
        if isinstance(updated_raw, str) and updated_raw
        else None
    )
    return IngredientFoodMap(
        ingredient_id=str(row["ingredient_id"]),
        food_id=str(row["food_id"]),
        confidence=float(row.get("confidence") or 0.0),
        mapped_by=str(row.get("mapped_by") or "auto"),
        updated_at=updated_at,
    )


def _parse_ingredient(
    row: dict[str, object], food_map: IngredientFoodMap | None
) -> Ingredient:
    """Parse an ingredient row into a domain model."""
    quantity_raw = row.get("quantity")
    return Ingredient(
        id=str(row["id"]),
        recipe_id=str(row["recipe_id"]),
        name=str(row.get("name", "")),
        quantity=float(quantity_raw) if quantity_raw is not None else None,
        unit=row.get("unit"),
        position=int(row.get("position") or 0),
        food_map=food_map,
    )
