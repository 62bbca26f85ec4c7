"""Meal catalog lookups used to join nutrition facts onto entries."""

import logging
from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from nutrition_log.domain.food_logs import FoodLogEntry, FoodLogView
from nutrition_log.domain.nutrition import MealFacts

_logger = logging.getLogger(__name__)


class MealCatalog(Protocol):
    """Read-only lookup of meal nutrition facts."""

    def get_meal(self, meal_id: UUID) -> MealFacts | None:
        """Return facts for a meal, or None when it does not exist."""

    def get_meals(self, meal_ids: Iterable[UUID]) -> dict[UUID, MealFacts]:
        """Return facts for every known meal among ``meal_ids``."""


def join_meals(catalog: MealCatalog, entries: list[FoodLogEntry]) -> list[FoodLogView]:
    """Attach live catalog facts to entries with a single batch lookup."""
    if not entries:
        return []
    meals = catalog.get_meals({entry.meal_id for entry in entries})
    views = []
    for entry in entries:
        meal = meals.get(entry.meal_id)
        if meal is None:
            _logger.warning(
                "Meal %s referenced by food log %s is missing from the catalog",
                entry.meal_id,
                entry.id,
            )
        views.append(FoodLogView(entry=entry, meal=meal))
    return views
