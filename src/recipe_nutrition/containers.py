"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from recipe_nutrition.adapters.supabase_food_repository import SupabaseFoodRepository
from recipe_nutrition.adapters.supabase_recipe_repository import (
    SupabaseRecipeRepository,
)
from recipe_nutrition.config import Settings
from recipe_nutrition.services.aliases import AliasBackfillService
from recipe_nutrition.services.cache import InMemoryCache
from recipe_nutrition.services.catalog import CatalogService
from recipe_nutrition.services.curated import CuratedSeedService
from recipe_nutrition.services.matching import FoodMatcher, IngredientMappingService
from recipe_nutrition.services.nutrition import RecipeNutritionService
from recipe_nutrition.services.scoring import HealthScorer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog_service: CatalogService
    food_matcher: FoodMatcher
    mapping_service: IngredientMappingService
    nutrition_service: RecipeNutritionService
    backfill_service: AliasBackfillService
    seed_service: CuratedSeedService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodRepository(supabase_client)
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    food_matcher = FoodMatcher(
        repository=food_repository,
        cache=InMemoryCache(max_entries=resolved_settings.alias_cache_max_entries),
        alias_ttl_seconds=resolved_settings.alias_cache_ttl_seconds,
    )
    return AppContainer(
        settings=resolved_settings,
        catalog_service=CatalogService(food_repository),
        food_matcher=food_matcher,
        mapping_service=IngredientMappingService(
            matcher=food_matcher,
            recipe_repository=recipe_repository,
            food_repository=food_repository,
        ),
        nutrition_service=RecipeNutritionService(
            recipe_repository=recipe_repository,
            food_repository=food_repository,
            scorer=HealthScorer(),
            default_goal=resolved_settings.default_goal,
        ),
        backfill_service=AliasBackfillService(
            food_repository, page_size=resolved_settings.backfill_page_size
        ),
        seed_service=CuratedSeedService(food_repository),
    )
