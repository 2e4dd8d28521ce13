# app/utils/timeutils.py
"""Timestamps are stored as naive UTC; reports render them in REPORT_TIMEZONE."""

from datetime import datetime, timezone
from typing import Optional

import pytz

from app.config import settings

BR_DATETIME = "%d/%m/%Y, %H:%M:%S"
BR_DATETIME_SHORT = "%d/%m/%Y %H:%M"


def utcnow() -> datetime:
    """Current UTC time as a naive datetime for database storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_local(dt: Optional[datetime], tz_name: str = None) -> Optional[datetime]:
    if dt is None:
        return None
    tz = pytz.timezone(tz_name or settings.REPORT_TIMEZONE)
    return pytz.utc.localize(dt).astimezone(tz)


def format_local(dt: Optional[datetime], fmt: str = BR_DATETIME, tz_name: str = None) -> Optional[str]:
    """Render a stored UTC timestamp in the report time zone, or None."""
    local = to_local(dt, tz_name)
    return local.strftime(fmt) if local else None
