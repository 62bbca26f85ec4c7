"""Weekly and monthly nutrition trends."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from nutrition_log.domain.days import subtract_months, utc_now
from nutrition_log.domain.nutrition import DailyNutritionSummary
from nutrition_log.errors import ValidationError
from nutrition_log.services.nutrition import NutritionService


@dataclass
class TrendService:
    """Range summaries over windows ending now."""

    nutrition_service: NutritionService
    clock: Callable[[], datetime] = utc_now

    def weekly_window(self, weeks: int) -> tuple[datetime, datetime]:
        """Return the window covering the last ``weeks`` weeks."""
        _require_positive(weeks, "Weeks")
        now = self.clock()
        return now - timedelta(days=weeks * 7), now

    def monthly_window(self, months: int) -> tuple[datetime, datetime]:
        """Return the window covering the last ``months`` calendar months."""
        _require_positive(months, "Months")
        now = self.clock().astimezone(self.nutrition_service.timezone)
        return subtract_months(now, months), now

    def weekly_trend(
        self, user_id: UUID, weeks: int = 4
    ) -> list[DailyNutritionSummary]:
        """Return daily summaries for the last ``weeks`` weeks."""
        start, end = self.weekly_window(weeks)
        return self.nutrition_service.range_summary(user_id, start, end)

    def monthly_trend(
        self, user_id: UUID, months: int = 6
    ) -> list[DailyNutritionSummary]:
        """Return daily summaries for the last ``months`` calendar months."""
        start, end = self.monthly_window(months)
        return self.nutrition_service.range_summary(user_id, start, end)


def _require_positive(value: int, label: str) -> None:
    if value < 1:
        raise ValidationError(f"{label} must be a positive integer")
