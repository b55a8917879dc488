"""Timezone helpers — every stored datetime is UTC."""
from datetime import datetime

import pytz


def to_utc(value: datetime, tz_name: str) -> datetime:
    """Interpret a naive datetime in ``tz_name`` and convert it to UTC.

    Aware datetimes keep their own offset and are only converted.
    """
    if value.tzinfo is None:
        value = pytz.timezone(tz_name).localize(value)
    return value.astimezone(pytz.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive values read back from drivers that drop tzinfo (SQLite)."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)
