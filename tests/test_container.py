"""Tests for container wiring."""

from nutrition_log.adapters.supabase_food_log_repository import (
    SupabaseFoodLogRepository,
)
from nutrition_log.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(
        container.food_log_service.repository, SupabaseFoodLogRepository
    )
    assert container.bulk_log_processor.repository is (
        container.food_log_service.repository
    )
    assert container.trend_service.nutrition_service is container.nutrition_service
    assert str(container.nutrition_service.timezone) == "UTC"
