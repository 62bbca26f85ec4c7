"""Tests for calendar-day helpers."""

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest

from nutrition_log.domain.days import (
    day_window,
    from_epoch_ms,
    range_window,
    start_of_day,
    subtract_months,
    to_epoch_ms,
)
from nutrition_log.errors import ValidationError


def test_start_of_day_in_local_timezone() -> None:
    berlin = ZoneInfo("Europe/Berlin")
    moment = datetime(2024, 3, 14, 23, 30, tzinfo=UTC)

    start = start_of_day(moment, berlin)

    assert start.date() == date(2024, 3, 15)
    assert start == datetime(2024, 3, 14, 23, 0, tzinfo=UTC)


def test_day_window_is_half_open() -> None:
    start, end = day_window(datetime(2024, 3, 15, 18, 0, tzinfo=UTC), ZoneInfo("UTC"))

    assert start == datetime(2024, 3, 15, tzinfo=UTC)
    assert end == datetime(2024, 3, 16, tzinfo=UTC)


def test_range_window_covers_last_day() -> None:
    start, end = range_window(
        datetime(2024, 3, 10, 8, 0, tzinfo=UTC),
        datetime(2024, 3, 12, 8, 0, tzinfo=UTC),
        ZoneInfo("UTC"),
    )

    assert start == datetime(2024, 3, 10, tzinfo=UTC)
    assert end == datetime(2024, 3, 13, tzinfo=UTC)


def test_subtract_months_clamps_day() -> None:
    assert subtract_months(datetime(2023, 5, 31, tzinfo=UTC), 3).date() == date(
        2023, 2, 28
    )
    assert subtract_months(datetime(2024, 3, 15, tzinfo=UTC), 1).date() == date(
        2024, 2, 15
    )


def test_epoch_millisecond_conversion() -> None:
    moment = datetime(2024, 3, 15, 12, 30, tzinfo=UTC)

    assert to_epoch_ms(moment) == 1_710_505_800_000
    assert from_epoch_ms(1_710_505_800_000) == moment


def test_from_epoch_ms_rejects_dates_past_year_9999() -> None:
    with pytest.raises(ValidationError, match="Invalid date"):
        from_epoch_ms(10**18)
