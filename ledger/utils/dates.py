from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ledger.core.config import settings


def local_zone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def local_now() -> datetime:
    """Current wall-clock time in the configured zone, without tzinfo."""
    return datetime.now(local_zone()).replace(tzinfo=None)


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """
    Dates are kept as naive local wall-clock times. Aware values are moved
    into the configured zone first, so the stored date (and the year used
    for numbering) is the local one.
    """
    if value is not None and value.tzinfo is not None:
        return value.astimezone(local_zone()).replace(tzinfo=None)
    return value
