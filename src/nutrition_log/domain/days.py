"""Calendar-day helpers shared by logging and reporting."""

import calendar
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

from nutrition_log.errors import ValidationError

MONTHS_PER_YEAR = 12


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(tz=UTC)


def start_of_day(moment: datetime, tz: ZoneInfo) -> datetime:
    """Return midnight of the local calendar day containing ``moment``."""
    return moment.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)


def day_window(moment: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the half-open [start, next start) window of a local day."""
    start = start_of_day(moment, tz)
    return start, start + timedelta(days=1)


def range_window(
    start: datetime, end: datetime, tz: ZoneInfo
) -> tuple[datetime, datetime]:
    """Return a window covering every local day from ``start`` through ``end``."""
    return start_of_day(start, tz), day_window(end, tz)[1]


def subtract_months(moment: datetime, months: int) -> datetime:
    """Move back by calendar months, clamping to the target month's last day."""
    index = moment.year * MONTHS_PER_YEAR + (moment.month - 1) - months
    year, month_index = divmod(index, MONTHS_PER_YEAR)
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def from_epoch_ms(value: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    try:
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    except (ValueError, OverflowError, OSError) as exc:
        raise ValidationError("Invalid date") from exc


def to_epoch_ms(value: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return round(value.timestamp() * 1000)
