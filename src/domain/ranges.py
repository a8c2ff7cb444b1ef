import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from src.domain.exceptions import ConfigurationException
from src.domain.models import RangeDescriptor

DEFAULT_RANGE_DAYS = 30
MIN_RANGE_DAYS = 7
MAX_RANGE_DAYS = 90
SECONDS_PER_DAY = 24 * 60 * 60


def parse_timestamp(value: str) -> datetime:
    """
    Parses an ISO-8601 timestamp, normalising a trailing 'Z' and treating naive values as UTC.

    Raises:
        ConfigurationException: If the value is not a valid ISO-8601 timestamp.
    """
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise ConfigurationException(f"Invalid timestamp '{value}': {e}") from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def coerce_range_days(range_days: Optional[Union[int, float, str]]) -> int:
    """
    Turns a user supplied day count into a whole number of days in [7, 90].
    Anything non-numeric, non-finite or not positive falls back to the default of 30.
    """
    try:
        numeric = float(range_days) if range_days is not None else math.nan
    except (TypeError, ValueError):
        numeric = math.nan

    if not math.isfinite(numeric) or numeric <= 0:
        return DEFAULT_RANGE_DAYS
    return min(MAX_RANGE_DAYS, max(MIN_RANGE_DAYS, math.floor(numeric)))


def resolve_range(
    since: Optional[str] = None,
    until: Optional[str] = None,
    range_days: Optional[Union[int, float, str]] = None,
    now: Optional[datetime] = None,
) -> RangeDescriptor:
    """
    Resolves request parameters into one canonical RangeDescriptor.

    Explicit bounds win when both are present and are used verbatim. Otherwise the
    window is the last `range_days` days (clamped) ending now.

    Raises:
        ConfigurationException: If explicit bounds are unparseable or `since` is after `until`.
    """
    if since and until:
        since_dt = parse_timestamp(since)
        until_dt = parse_timestamp(until)
        if since_dt > until_dt:
            raise ConfigurationException(f"'since' ({since}) must not be after 'until' ({until}).")
        return RangeDescriptor(
            since=since_dt,
            until=until_dt,
            label=f"{since.strip()[:10]} → {until.strip()[:10]}",
        )

    days = coerce_range_days(range_days)
    until_dt = now or datetime.now(timezone.utc)
    return RangeDescriptor(
        since=until_dt - timedelta(days=days),
        until=until_dt,
        label=f"Last {days} days",
    )


def range_day_count(range_descriptor: RangeDescriptor) -> int:
    """Whole days covered by a range, rounded half-up, never less than 1."""
    diff = abs((range_descriptor.until - range_descriptor.since).total_seconds())
    return max(1, math.floor(diff / SECONDS_PER_DAY + 0.5))
