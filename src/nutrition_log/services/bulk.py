"""Bulk meal logging with a single existence lookup."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_log.domain.days import start_of_day, utc_now
from nutrition_log.domain.food_logs import (
    BulkLogItem,
    BulkLogResult,
    FoodLogChanges,
    FoodLogEntry,
    FoodLogView,
    NewFoodLog,
    clean_notes,
    validate_bulk_items,
)
from nutrition_log.domain.nutrition import ZERO_MACROS, MealFacts, MealType
from nutrition_log.errors import NotFoundError, PartialBatchFailure, StorageError
from nutrition_log.services.catalog import MealCatalog
from nutrition_log.services.food_logs import FoodLogRepository

_logger = logging.getLogger(__name__)


@dataclass
class BulkLogProcessor:
    """Logs up to 20 meals sharing a user, meal type and day.

    Existing entries are found with one query, updated concurrently, and the
    remaining meals are inserted in one batch.
    """

    repository: FoodLogRepository
    catalog: MealCatalog
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo("UTC"))
    clock: Callable[[], datetime] = utc_now

    async def process_bulk(  # noqa: PLR0913
        self,
        user_id: UUID,
        meal_type: MealType,
        items: list[BulkLogItem],
        log_date: datetime | None = None,
        logged_at: datetime | None = None,
        notes: str | None = None,
    ) -> BulkLogResult:
        """Create or update an entry for every item and total the nutrition."""
        validate_bulk_items(items, notes)
        now = self.clock()
        day = start_of_day(log_date or now, self.timezone)
        recorded_at = logged_at or now
        batch_notes = clean_notes(notes)

        # Later duplicates of a meal win, matching single-item replacement.
        by_meal = {item.meal_id: item for item in items}
        meals = await asyncio.to_thread(self.catalog.get_meals, list(by_meal))
        missing = [meal_id for meal_id in by_meal if meal_id not in meals]
        if missing:
            raise NotFoundError(
                "Meals not found: " + ", ".join(str(meal_id) for meal_id in missing)
            )

        existing = await asyncio.to_thread(
            self.repository.find_entries_for_meals,
            user_id,
            meal_type,
            day,
            list(by_meal),
        )
        existing_by_meal = {entry.meal_id: entry for entry in existing}
        to_update = [
            (item, existing_by_meal[meal_id])
            for meal_id, item in by_meal.items()
            if meal_id in existing_by_meal
        ]
        to_create = [
            item for meal_id, item in by_meal.items() if meal_id not in existing_by_meal
        ]

        updated = await self._update_existing(to_update, batch_notes)
        created = await self._create_missing(
            to_create, user_id, meal_type, day, recorded_at, batch_notes
        )

        created_views = _with_meals(created, meals)
        updated_views = _with_meals(updated, meals)
        totals = ZERO_MACROS
        for view in [*created_views, *updated_views]:
            totals = totals + view.macros

        result = BulkLogResult(
            created_logs=created_views,
            updated_logs=updated_views,
            totals=totals,
            meal_type=meal_type,
            log_date=day,
            logged_at=recorded_at,
        )
        _logger.info("Bulk log for user %s: %s", user_id, result.message)
        return result

    async def _update_existing(
        self,
        pairs: list[tuple[BulkLogItem, FoodLogEntry]],
        batch_notes: str | None,
    ) -> list[FoodLogEntry]:
        if not pairs:
            return []
        outcomes = await asyncio.gather(
            *(self._update_one(item, entry, batch_notes) for item, entry in pairs),
            return_exceptions=True,
        )
        updated: list[FoodLogEntry] = []
        failures: dict[UUID, str] = {}
        for (item, _), outcome in zip(pairs, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                failures[item.meal_id] = str(outcome) or type(outcome).__name__
            else:
                updated.append(outcome)
        if failures:
            _logger.error(
                "Bulk update failed for %s of %s meals", len(failures), len(pairs)
            )
            raise PartialBatchFailure(failures, updated=updated)
        return updated

    async def _update_one(
        self, item: BulkLogItem, entry: FoodLogEntry, batch_notes: str | None
    ) -> FoodLogEntry:
        changes = FoodLogChanges(
            quantity=item.quantity,
            notes=clean_notes(item.notes) or batch_notes,
        )
        try:
            updated = await asyncio.to_thread(
                self.repository.update_entry, entry.id, changes
            )
        except StorageError as exc:
            raise StorageError(
                f"Failed to update food log for meal {item.meal_id}: {exc.message}"
            ) from exc
        if updated is None:
            raise StorageError(f"Failed to update food log for meal {item.meal_id}")
        return updated

    async def _create_missing(  # noqa: PLR0913
        self,
        items: list[BulkLogItem],
        user_id: UUID,
        meal_type: MealType,
        day: datetime,
        logged_at: datetime,
        batch_notes: str | None,
    ) -> list[FoodLogEntry]:
        if not items:
            return []
        payload = [
            NewFoodLog(
                user_id=user_id,
                meal_id=item.meal_id,
                meal_type=meal_type,
                quantity=item.quantity,
                log_date=day,
                logged_at=logged_at,
                notes=clean_notes(item.notes) or batch_notes,
            )
            for item in items
        ]
        return await asyncio.to_thread(self.repository.create_entries, payload)


def _with_meals(
    entries: list[FoodLogEntry], meals: dict[UUID, MealFacts]
) -> list[FoodLogView]:
    return [
        FoodLogView(entry=entry, meal=meals.get(entry.meal_id)) for entry in entries
    ]
