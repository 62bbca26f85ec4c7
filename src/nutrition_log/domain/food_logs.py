"""Domain models and input rules for food log entries."""

import math
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from nutrition_log.domain.nutrition import (
    ZERO_MACROS,
    MacroProfile,
    MealFacts,
    MealType,
)
from nutrition_log.errors import ValidationError

MIN_QUANTITY = 0.1
MAX_QUANTITY = 100.0
MAX_NOTES_LENGTH = 500
MAX_BULK_ITEMS = 20


@dataclass(frozen=True)
class FoodLogEntry:
    """One logged occurrence of a meal for a user on a log day."""

    id: UUID
    user_id: UUID
    meal_id: UUID
    meal_type: MealType
    quantity: float
    log_date: datetime
    logged_at: datetime
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class NewFoodLog:
    """Values for an entry that has not been stored yet."""

    user_id: UUID
    meal_id: UUID
    meal_type: MealType
    quantity: float
    log_date: datetime
    logged_at: datetime
    notes: str | None = None


@dataclass(frozen=True)
class FoodLogChanges:
    """Partial update of an entry; ``None`` leaves a field unchanged."""

    meal_id: UUID | None = None
    meal_type: MealType | None = None
    quantity: float | None = None
    log_date: datetime | None = None
    logged_at: datetime | None = None
    notes: str | None = None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.meal_id,
                self.meal_type,
                self.quantity,
                self.log_date,
                self.logged_at,
                self.notes,
            )
        )


@dataclass(frozen=True)
class FoodLogQuery:
    """Filters for listing entries."""

    user_id: UUID | None = None
    meal_type: MealType | None = None
    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True)
class FoodLogView:
    """An entry joined with the catalog facts of its meal."""

    entry: FoodLogEntry
    meal: MealFacts | None

    @property
    def macros(self) -> MacroProfile:
        if self.meal is None:
            return ZERO_MACROS
        return self.meal.portion(self.entry.quantity)


@dataclass(frozen=True)
class FoodLogPage:
    """A page of entries."""

    items: list[FoodLogView]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass(frozen=True)
class BulkLogItem:
    """One meal in a bulk submission."""

    meal_id: UUID
    quantity: float
    notes: str | None = None


@dataclass(frozen=True)
class BulkLogResult:
    """Outcome of a bulk submission."""

    created_logs: list[FoodLogView]
    updated_logs: list[FoodLogView]
    totals: MacroProfile
    meal_type: MealType
    log_date: datetime
    logged_at: datetime

    @property
    def all_logs(self) -> list[FoodLogView]:
        return [*self.created_logs, *self.updated_logs]

    @property
    def new_items_count(self) -> int:
        return len(self.created_logs)

    @property
    def updated_items_count(self) -> int:
        return len(self.updated_logs)

    @property
    def total_items(self) -> int:
        return self.new_items_count + self.updated_items_count

    @property
    def message(self) -> str:
        return (
            f"Successfully processed {self.total_items} food items "
            f"({self.new_items_count} new, {self.updated_items_count} updated)"
        )


def validate_quantity(quantity: float, label: str = "Quantity") -> None:
    """Reject quantities outside [0.1, 100] servings."""
    if (
        isinstance(quantity, bool)
        or not isinstance(quantity, int | float)
        or math.isnan(quantity)
        or not MIN_QUANTITY <= quantity <= MAX_QUANTITY
    ):
        raise ValidationError(f"{label} must be between 0.1 and 100")


def validate_notes(notes: str | None, label: str = "Notes") -> None:
    """Reject notes longer than 500 characters."""
    if notes is not None and len(notes) > MAX_NOTES_LENGTH:
        raise ValidationError(f"{label} cannot exceed 500 characters")


def validate_bulk_items(items: list[BulkLogItem], notes: str | None) -> None:
    """Validate a whole bulk submission before anything is written."""
    if not items:
        raise ValidationError("At least one food item is required")
    if len(items) > MAX_BULK_ITEMS:
        raise ValidationError("Cannot log more than 20 items at once")
    for position, item in enumerate(items, start=1):
        validate_quantity(item.quantity, label=f"Item {position}: quantity")
        validate_notes(item.notes, label=f"Item {position}: notes")
    validate_notes(notes, label="General notes")


def clean_notes(notes: str | None) -> str | None:
    """Trim notes, treating blank text as absent."""
    if notes is None:
        return None
    stripped = notes.strip()
    return stripped or None
