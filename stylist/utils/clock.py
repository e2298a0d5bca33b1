# stylist/utils/clock.py
# Time helpers shared by tokens and the user store

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Naive UTC now, truncated to milliseconds like BSON dates."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return truncate_to_millis(now)


def truncate_to_millis(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def to_timestamp(value: datetime) -> float:
    """Seconds since the epoch for a naive UTC datetime."""
    return value.replace(tzinfo=timezone.utc).timestamp()
