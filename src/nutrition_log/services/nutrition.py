"""Nutrition roll-ups computed from food logs and live meal facts."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_log.domain.days import day_window, range_window, utc_now
from nutrition_log.domain.food_logs import FoodLogView
from nutrition_log.domain.nutrition import (
    ZERO_MACROS,
    DailyNutritionSummary,
    FoodLogStats,
    MealType,
)
from nutrition_log.errors import ValidationError
from nutrition_log.services.catalog import MealCatalog, join_meals
from nutrition_log.services.food_logs import FoodLogRepository


@dataclass
class NutritionService:
    """Service for daily and range nutrition summaries."""

    repository: FoodLogRepository
    catalog: MealCatalog
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo("UTC"))
    clock: Callable[[], datetime] = utc_now

    def daily_summary(
        self, user_id: UUID, when: datetime | None = None
    ) -> DailyNutritionSummary:
        """Return totals and per-meal-type breakdown for the day of ``when``.

        Defaults to the current day.
        """
        start, end = day_window(when or self.clock(), self.timezone)
        entries = self.repository.list_entries_between(user_id, start, end)
        summary = DailyNutritionSummary(day=start.date())
        for view in join_meals(self.catalog, entries):
            summary.add(view.entry.meal_type, view.macros)
        return summary

    def range_summary(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[DailyNutritionSummary]:
        """Return one summary per day with entries, oldest day first."""
        if start > end:
            raise ValidationError("Start date must be before end date")
        window_start, window_end = range_window(start, end, self.timezone)
        entries = self.repository.list_entries_between(
            user_id, window_start, window_end
        )
        return _aggregate_days(join_meals(self.catalog, entries), self.timezone)

    def stats(self, user_id: UUID) -> FoodLogStats:
        """Return lifetime counters for a user's food log."""
        views = join_meals(self.catalog, self.repository.list_user_entries(user_id))
        totals = ZERO_MACROS
        counts = dict.fromkeys(MealType, 0)
        quantity = 0.0
        for view in views:
            totals = totals + view.macros
            counts[view.entry.meal_type] += 1
            quantity += view.entry.quantity
        return FoodLogStats(
            total_logs=len(views),
            totals=totals,
            average_quantity=quantity / len(views) if views else 0.0,
            meal_type_counts=counts,
        )


def _aggregate_days(
    views: list[FoodLogView], tz: ZoneInfo
) -> list[DailyNutritionSummary]:
    daily: dict[date, DailyNutritionSummary] = {}
    for view in views:
        day = view.entry.log_date.astimezone(tz).date()
        summary = daily.get(day)
        if summary is None:
            summary = daily[day] = DailyNutritionSummary(day=day)
        summary.add(view.entry.meal_type, view.macros)
    return [daily[day] for day in sorted(daily)]
