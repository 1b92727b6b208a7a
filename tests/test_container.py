"""Tests for container wiring."""

from recipe_nutrition.adapters.supabase_food_repository import SupabaseFoodRepository
from recipe_nutrition.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.nutrition_service.default_goal == "general"
    assert container.food_matcher.alias_ttl_seconds == 60
    assert container.backfill_service.page_size == 500
    assert isinstance(container.catalog_service.repository, SupabaseFoodRepository)
