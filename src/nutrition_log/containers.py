"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from nutrition_log.adapters.supabase_food_log_repository import (
    SupabaseFoodLogRepository,
)
from nutrition_log.adapters.supabase_meal_catalog import SupabaseMealCatalog
from nutrition_log.config import Settings
from nutrition_log.services.bulk import BulkLogProcessor
from nutrition_log.services.food_logs import FoodLogService
from nutrition_log.services.nutrition import NutritionService
from nutrition_log.services.trends import TrendService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    food_log_service: FoodLogService
    bulk_log_processor: BulkLogProcessor
    nutrition_service: NutritionService
    trend_service: TrendService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    repository = SupabaseFoodLogRepository(supabase_client)
    catalog = SupabaseMealCatalog(supabase_client)
    timezone = resolved_settings.zone
    nutrition_service = NutritionService(
        repository=repository, catalog=catalog, timezone=timezone
    )
    return AppContainer(
        settings=resolved_settings,
        food_log_service=FoodLogService(
            repository=repository, catalog=catalog, timezone=timezone
        ),
        bulk_log_processor=BulkLogProcessor(
            repository=repository, catalog=catalog, timezone=timezone
        ),
        nutrition_service=nutrition_service,
        trend_service=TrendService(nutrition_service=nutrition_service),
    )
