from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import pytz


def utc_now() -> datetime:
    """Current time as an aware UTC datetime.

    Note: Wrapped so services can take it as an injectable clock.
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (as returned by MySQL DATETIME) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz_name: str) -> datetime:
    return ensure_utc(value).astimezone(pytz.timezone(tz_name))


def to_db(value: Optional[datetime]) -> Optional[datetime]:
    """Naive UTC datetime for DATETIME columns."""
    if value is None:
        return None
    return ensure_utc(value).replace(tzinfo=None)
