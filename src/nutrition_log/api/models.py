"""Pydantic models for food log request payloads."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from nutrition_log.domain.food_logs import (
    MAX_BULK_ITEMS,
    MAX_NOTES_LENGTH,
    MAX_QUANTITY,
    MIN_QUANTITY,
)
from nutrition_log.domain.nutrition import MealType


class CreateFoodLogRequest(BaseModel):
    """Single meal log payload."""

    model_config = ConfigDict(populate_by_name=True)

    user: UUID
    meal: UUID
    meal_type: MealType = Field(alias="mealType")
    quantity: float = Field(ge=MIN_QUANTITY, le=MAX_QUANTITY)
    log_date: int | None = Field(default=None, ge=0, alias="logDate")
    logged_at: int | None = Field(default=None, ge=0, alias="loggedAt")
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)


class BulkFoodLogItemRequest(BaseModel):
    """One meal inside a bulk payload."""

    meal: UUID
    quantity: float = Field(ge=MIN_QUANTITY, le=MAX_QUANTITY)
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)


class BulkFoodLogRequest(BaseModel):
    """Bulk meal log payload."""

    model_config = ConfigDict(populate_by_name=True)

    user: UUID
    meal_type: MealType = Field(alias="mealType")
    items: list[BulkFoodLogItemRequest] = Field(
        min_length=1, max_length=MAX_BULK_ITEMS
    )
    log_date: int | None = Field(default=None, ge=0, alias="logDate")
    logged_at: int | None = Field(default=None, ge=0, alias="loggedAt")
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)


class UpdateFoodLogRequest(BaseModel):
    """Partial update payload."""

    model_config = ConfigDict(populate_by_name=True)

    meal: UUID | None = None
    meal_type: MealType | None = Field(default=None, alias="mealType")
    quantity: float | None = Field(default=None, ge=MIN_QUANTITY, le=MAX_QUANTITY)
    log_date: int | None = Field(default=None, ge=0, alias="logDate")
    logged_at: int | None = Field(default=None, ge=0, alias="loggedAt")
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)
