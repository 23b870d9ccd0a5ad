from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple


def _to_millis(value: datetime) -> datetime:
    # BSON dates carry millisecond precision.
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form the store round-trips."""
    return _to_millis(datetime.now(timezone.utc).replace(tzinfo=None))


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return _to_millis(value)


def day_range(start: date, end: date) -> Tuple[datetime, datetime]:
    """
    Bounds covering whole days from `start` through `end`.

    The upper bound is midnight after `end`, to be used as an exclusive
    limit so records at any time on `end` are included.
    """
    lower = datetime.combine(start, time.min)
    upper = datetime.combine(end, time.min) + timedelta(days=1)
    return lower, upper


def month_label(year: int, month: int) -> str:
    return f"{year}-{month:02d}"
