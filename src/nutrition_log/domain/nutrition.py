"""Nutrition domain models."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from uuid import UUID


class MealType(StrEnum):
    """Closed set of meal slots an entry can be logged under."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class MealFacts:
    """Per-serving nutrition facts of a catalog meal.

    Any macro may be unknown; aggregation treats unknown values as zero.
    """

    id: UUID
    name: str
    calories: float | None
    protein_g: float | None
    fat_g: float | None
    carbs_g: float | None
    serving_size: str | None = None
    emoji: str | None = None

    def portion(self, quantity: float) -> "MacroProfile":
        """Return the macros for ``quantity`` servings."""
        return MacroProfile(
            calories=(self.calories or 0.0) * quantity,
            protein_g=(self.protein_g or 0.0) * quantity,
            fat_g=(self.fat_g or 0.0) * quantity,
            carbs_g=(self.carbs_g or 0.0) * quantity,
        )


@dataclass(frozen=True)
class MacroProfile:
    """Macronutrient totals."""

    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float

    def __add__(self, other: "MacroProfile") -> "MacroProfile":
        return MacroProfile(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            fat_g=self.fat_g + other.fat_g,
            carbs_g=self.carbs_g + other.carbs_g,
        )


ZERO_MACROS = MacroProfile(0.0, 0.0, 0.0, 0.0)


@dataclass
class MealTypeBreakdown:
    """Totals for one meal type within a day."""

    calories: float = 0.0
    protein_g: float = 0.0
    fat_g: float = 0.0
    carbs_g: float = 0.0
    items: int = 0

    def add(self, macros: MacroProfile) -> None:
        self.calories += macros.calories
        self.protein_g += macros.protein_g
        self.fat_g += macros.fat_g
        self.carbs_g += macros.carbs_g
        self.items += 1


def _empty_breakdown() -> dict[MealType, MealTypeBreakdown]:
    return {meal_type: MealTypeBreakdown() for meal_type in MealType}


@dataclass
class DailyNutritionSummary:
    """Nutrition totals for one user and one calendar day."""

    day: date
    total_calories: float = 0.0
    total_protein_g: float = 0.0
    total_fat_g: float = 0.0
    total_carbs_g: float = 0.0
    meal_breakdown: dict[MealType, MealTypeBreakdown] = field(
        default_factory=_empty_breakdown
    )
    total_items: int = 0

    def add(self, meal_type: MealType, macros: MacroProfile) -> None:
        """Add one entry's contribution to the totals and its meal bucket."""
        self.total_calories += macros.calories
        self.total_protein_g += macros.protein_g
        self.total_fat_g += macros.fat_g
        self.total_carbs_g += macros.carbs_g
        self.total_items += 1
        self.meal_breakdown[meal_type].add(macros)


@dataclass(frozen=True)
class FoodLogStats:
    """Lifetime counters for a user's food log."""

    total_logs: int
    totals: MacroProfile
    average_quantity: float
    meal_type_counts: dict[MealType, int]
