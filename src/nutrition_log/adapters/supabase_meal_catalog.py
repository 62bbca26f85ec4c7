"""Supabase-backed meal catalog lookups."""

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from nutrition_log.domain.nutrition import MealFacts
from nutrition_log.errors import StorageError
from nutrition_log.services.catalog import MealCatalog

_COLUMNS = "id, name, calories, protein, fat, carbs, serving_size, emoji"


@dataclass
class SupabaseMealCatalog(MealCatalog):
    """Reads meal nutrition facts from the ``meals`` table."""

    client: Client

    def get_meal(self, meal_id: UUID) -> MealFacts | None:
        """Return facts for a meal, or None when it does not exist."""
        return self.get_meals([meal_id]).get(meal_id)

    def get_meals(self, meal_ids: Iterable[UUID]) -> dict[UUID, MealFacts]:
        """Return facts for every known meal among ``meal_ids``."""
        ids = sorted({str(meal_id) for meal_id in meal_ids})
        if not ids:
            return {}
        try:
            response = (
                self.client.table("meals").select(_COLUMNS).in_("id", ids).execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise StorageError(f"Failed to look up meals: {exc}") from exc
        meals = [_parse_meal(row) for row in response.data or []]
        return {meal.id: meal for meal in meals}


def _optional_float(value: object) -> float | None:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _parse_meal(row: dict[str, object]) -> MealFacts:
    return MealFacts(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        calories=_optional_float(row.get("calories")),
        protein_g=_optional_float(row.get("protein")),
        fat_g=_optional_float(row.get("fat")),
        carbs_g=_optional_float(row.get("carbs")),
        serving_size=row.get("serving_size"),
        emoji=row.get("emoji"),
    )
