"""Food log service: deduplicated logging and entry maintenance."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_log.domain.days import start_of_day, utc_now
from nutrition_log.domain.food_logs import (
    FoodLogChanges,
    FoodLogEntry,
    FoodLogPage,
    FoodLogQuery,
    FoodLogView,
    NewFoodLog,
    clean_notes,
    validate_notes,
    validate_quantity,
)
from nutrition_log.domain.nutrition import MealType
from nutrition_log.errors import NotFoundError, ValidationError
from nutrition_log.services.catalog import MealCatalog, join_meals

_logger = logging.getLogger(__name__)


class FoodLogRepository(Protocol):
    """Persistence interface for food log entries."""

    def get_entry(self, entry_id: UUID) -> FoodLogEntry | None:
        """Return an entry by id, if present."""

    def find_entry(
        self,
        user_id: UUID,
        meal_id: UUID,
        log_date: datetime,
        meal_type: MealType | None,
    ) -> FoodLogEntry | None:
        """Return the entry for a tuple; meal type is skipped when None."""

    def find_entries_for_meals(
        self,
        user_id: UUID,
        meal_type: MealType,
        log_date: datetime,
        meal_ids: list[UUID],
    ) -> list[FoodLogEntry]:
        """Return existing entries for any of the meals in one query."""

    def upsert_entry(self, entry: NewFoodLog) -> tuple[FoodLogEntry, bool]:
        """Atomically insert the entry or replace quantity/notes of its twin.

        Returns the stored entry and whether it was newly created.
        """

    def create_entries(self, entries: list[NewFoodLog]) -> list[FoodLogEntry]:
        """Insert entries in one batch and return them."""

    def update_entry(
        self, entry_id: UUID, changes: FoodLogChanges
    ) -> FoodLogEntry | None:
        """Apply changes to an entry and return it, or None when absent."""

    def delete_entry(self, entry_id: UUID) -> bool:
        """Delete an entry and report whether it existed."""

    def list_entries(
        self, query: FoodLogQuery, offset: int, limit: int
    ) -> tuple[list[FoodLogEntry], int]:
        """Return a page of entries, newest log date first, and the total."""

    def list_entries_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodLogEntry]:
        """Return entries with start <= log_date < end, oldest first."""

    def list_user_entries(self, user_id: UUID) -> list[FoodLogEntry]:
        """Return every entry for a user."""


@dataclass
class FoodLogService:
    """Logs meals without duplicating entries and maintains existing ones."""

    repository: FoodLogRepository
    catalog: MealCatalog
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo("UTC"))
    clock: Callable[[], datetime] = utc_now

    async def log_meal(  # noqa: PLR0913
        self,
        user_id: UUID,
        meal_id: UUID,
        meal_type: MealType | None,
        quantity: float,
        log_date: datetime | None = None,
        logged_at: datetime | None = None,
        notes: str | None = None,
    ) -> tuple[FoodLogView, bool]:
        """Log a meal, replacing the quantity of an existing entry for the day.

        Returns the stored entry joined with its meal and whether it was new.
        Without a meal type only an existing entry can be updated.
        """
        validate_quantity(quantity)
        validate_notes(notes)
        now = self.clock()
        day = start_of_day(log_date or now, self.timezone)
        meal = await asyncio.to_thread(self.catalog.get_meal, meal_id)
        if meal is None:
            raise NotFoundError(f"Meal {meal_id} not found")

        if meal_type is None:
            entry = await self._merge_without_meal_type(
                user_id, meal_id, day, quantity, notes
            )
            return FoodLogView(entry=entry, meal=meal), False

        entry, created = await asyncio.to_thread(
            self.repository.upsert_entry,
            NewFoodLog(
                user_id=user_id,
                meal_id=meal_id,
                meal_type=meal_type,
                quantity=quantity,
                log_date=day,
                logged_at=logged_at or now,
                notes=clean_notes(notes),
            ),
        )
        if created:
            _logger.info("Created food log %s for meal %s", entry.id, meal_id)
        else:
            _logger.info(
                "Merged food log %s for meal %s (quantity=%s)",
                entry.id,
                meal_id,
                quantity,
            )
        return FoodLogView(entry=entry, meal=meal), created

    async def _merge_without_meal_type(
        self,
        user_id: UUID,
        meal_id: UUID,
        day: datetime,
        quantity: float,
        notes: str | None,
    ) -> FoodLogEntry:
        existing = await asyncio.to_thread(
            self.repository.find_entry, user_id, meal_id, day, None
        )
        if existing is None:
            raise ValidationError("Meal type is required")
        updated = await asyncio.to_thread(
            self.repository.update_entry,
            existing.id,
            FoodLogChanges(quantity=quantity, notes=clean_notes(notes)),
        )
        if updated is None:
            raise NotFoundError(f"Food log {existing.id} not found")
        return updated

    def get_entry(self, entry_id: UUID) -> FoodLogView:
        """Return an entry with its meal facts."""
        entry = self.repository.get_entry(entry_id)
        if entry is None:
            raise NotFoundError("Food log not found")
        return join_meals(self.catalog, [entry])[0]

    def update_entry(self, entry_id: UUID, changes: FoodLogChanges) -> FoodLogView:
        """Apply an explicit update, keeping entries unique per meal and day."""
        if changes.quantity is not None:
            validate_quantity(changes.quantity)
        validate_notes(changes.notes)
        if changes.log_date is not None:
            changes = replace(
                changes, log_date=start_of_day(changes.log_date, self.timezone)
            )
        if changes.notes is not None:
            changes = replace(changes, notes=changes.notes.strip())

        current = self.repository.get_entry(entry_id)
        if current is None:
            raise NotFoundError("Food log not found")
        if changes.is_empty():
            return join_meals(self.catalog, [current])[0]
        if (
            changes.meal_id is not None
            and self.catalog.get_meal(changes.meal_id) is None
        ):
            raise NotFoundError(f"Meal {changes.meal_id} not found")
        self._ensure_no_collision(current, changes)

        updated = self.repository.update_entry(entry_id, changes)
        if updated is None:
            raise NotFoundError("Food log not found")
        return join_meals(self.catalog, [updated])[0]

    def _ensure_no_collision(
        self, current: FoodLogEntry, changes: FoodLogChanges
    ) -> None:
        if all(
            value is None
            for value in (changes.meal_id, changes.meal_type, changes.log_date)
        ):
            return
        twin = self.repository.find_entry(
            current.user_id,
            changes.meal_id or current.meal_id,
            changes.log_date or current.log_date,
            changes.meal_type or current.meal_type,
        )
        if twin is not None and twin.id != current.id:
            raise ValidationError(
                "Another food log already exists for this meal, day and meal type"
            )

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry by id."""
        if not self.repository.delete_entry(entry_id):
            raise NotFoundError("Food log not found")
        _logger.info("Deleted food log %s", entry_id)

    def list_for_user(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 200,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> FoodLogPage:
        """Return a user's entries, newest log date first."""
        return self.search(
            FoodLogQuery(user_id=user_id, start=start, end=end), page, limit
        )

    def list_by_meal_type(
        self, user_id: UUID, meal_type: MealType, page: int = 1, limit: int = 10
    ) -> FoodLogPage:
        """Return a user's entries for one meal type."""
        return self.search(
            FoodLogQuery(user_id=user_id, meal_type=meal_type), page, limit
        )

    def search(
        self, query: FoodLogQuery, page: int = 1, limit: int = 10
    ) -> FoodLogPage:
        """Return entries matching the filters."""
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive")
        if query.start and query.end and query.start > query.end:
            raise ValidationError("Start date must be before end date")
        entries, total = self.repository.list_entries(
            query, offset=(page - 1) * limit, limit=limit
        )
        return FoodLogPage(
            items=join_meals(self.catalog, entries),
            total=total,
            page=page,
            limit=limit,
        )

    def recent(self, user_id: UUID, limit: int = 5) -> list[FoodLogView]:
        """Return the most recent entries for a user."""
        return self.search(FoodLogQuery(user_id=user_id), page=1, limit=limit).items
