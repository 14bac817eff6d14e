"""
Calendar helpers for the ledger.

The ledger's "day" is a calendar date in ``configs.Ledger.Timezone``; all
stored timestamps stay in UTC.

- local_today / ledger_clock: today's date in the ledger timezone
- parse_date_range / parse_date_start / parse_date_end: YYYY-MM-DD in a
  timezone to UTC datetimes, for consumption record filters
"""

from collections.abc import Callable
from datetime import date, datetime, timezone as dt_timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from wordbank.configs import configs

Clock = Callable[[], date]


def _zone(tz: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz)
    except ZoneInfoNotFoundError as e:
        raise ValueError(f"Invalid timezone: {tz}") from e


def local_today(tz: str | None = None) -> date:
    """Today's calendar date in ``tz`` (defaults to the ledger timezone)."""
    return datetime.now(_zone(tz or configs.Ledger.Timezone)).date()


def ledger_clock() -> date:
    return local_today()


def parse_date_range(
    start_date: str,
    end_date: str,
    tz: str | None = None,
) -> tuple[datetime, datetime]:
    """
    Parse date range with timezone handling.

    Args:
        start_date: Start date in YYYY-MM-DD format
        end_date: End date in YYYY-MM-DD format
        tz: Timezone name (IANA format), defaults to the ledger timezone

    Returns:
        Tuple of (start_utc, end_utc)

    Raises:
        ValueError: If timezone or a date is invalid
    """
    return parse_date_start(start_date, tz), parse_date_end(end_date, tz)


def parse_date_start(date_str: str, tz: str | None = None) -> datetime:
    """UTC datetime at the start of ``date_str`` in ``tz``."""
    zone = _zone(tz or configs.Ledger.Timezone)
    local = datetime.strptime(date_str, "%Y-%m-%d").replace(tzinfo=zone)
    return local.astimezone(dt_timezone.utc)


def parse_date_end(date_str: str, tz: str | None = None) -> datetime:
    """UTC datetime at the end (23:59:59.999999) of ``date_str`` in ``tz``."""
    zone = _zone(tz or configs.Ledger.Timezone)
    local = datetime.strptime(date_str, "%Y-%m-%d").replace(
        hour=23, minute=59, second=59, microsecond=999999, tzinfo=zone
    )
    return local.astimezone(dt_timezone.utc)
