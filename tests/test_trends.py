"""Tests for weekly and monthly trend windows."""

from datetime import UTC, date, datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from nutrition_log.errors import ValidationError
from nutrition_log.services.nutrition import NutritionService
from nutrition_log.services.trends import TrendService
from tests.conftest import NOW, OATMEAL, fixed_clock, new_log


def test_monthly_window_moves_back_calendar_months(nutrition_service) -> None:
    trends = TrendService(nutrition_service=nutrition_service, clock=fixed_clock)

    start, end = trends.monthly_window(1)

    assert start == datetime(2024, 2, 15, 12, 30, tzinfo=UTC)
    assert end == NOW


def test_monthly_window_clamps_to_month_end(nutrition_service) -> None:
    trends = TrendService(
        nutrition_service=nutrition_service,
        clock=lambda: datetime(2024, 3, 31, 9, 0, tzinfo=UTC),
    )

    start, _ = trends.monthly_window(1)

    assert start.date() == date(2024, 2, 29)


def test_monthly_window_crosses_year_boundary(nutrition_service) -> None:
    trends = TrendService(
        nutrition_service=nutrition_service,
        clock=lambda: datetime(2024, 1, 10, tzinfo=UTC),
    )

    start, _ = trends.monthly_window(6)

    assert start.date() == date(2023, 7, 10)


def test_monthly_window_uses_service_timezone(repository, catalog) -> None:
    zone = ZoneInfo("Pacific/Auckland")
    service = NutritionService(repository=repository, catalog=catalog, timezone=zone)
    trends = TrendService(
        nutrition_service=service,
        clock=lambda: datetime(2024, 3, 31, 12, 0, tzinfo=UTC),
    )

    start, _ = trends.monthly_window(1)

    assert start.astimezone(zone).date() == date(2024, 3, 1)


def test_weekly_window_spans_whole_weeks(nutrition_service) -> None:
    trends = TrendService(nutrition_service=nutrition_service, clock=fixed_clock)

    start, end = trends.weekly_window(2)

    assert (end - start).days == 14


@pytest.mark.parametrize("value", [0, -3])
def test_trend_windows_require_positive_values(nutrition_service, value) -> None:
    trends = TrendService(nutrition_service=nutrition_service, clock=fixed_clock)

    with pytest.raises(ValidationError, match="Weeks must be a positive integer"):
        trends.weekly_window(value)
    with pytest.raises(ValidationError, match="Months must be a positive integer"):
        trends.monthly_window(value)


def test_weekly_trend_summarises_window(nutrition_service, repository) -> None:
    user_id = uuid4()
    repository.add(
        new_log(user_id, OATMEAL, log_date=datetime(2024, 3, 1, tzinfo=UTC))
    )
    repository.add(
        new_log(user_id, OATMEAL, log_date=datetime(2024, 2, 1, tzinfo=UTC))
    )
    trends = TrendService(nutrition_service=nutrition_service, clock=fixed_clock)

    summaries = trends.weekly_trend(user_id, weeks=4)

    assert [summary.day for summary in summaries] == [date(2024, 3, 1)]
