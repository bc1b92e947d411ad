"""
Helper utilities
"""
import math
from datetime import date, datetime, timezone
from typing import Optional

import pytz


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safely divide two numbers"""
    try:
        return numerator / denominator if denominator != 0 else default
    except (TypeError, ZeroDivisionError):
        return default


def round_1(value: Optional[float]) -> Optional[float]:
    """Round to one decimal place, halves up (2.25 -> 2.3), passing None through"""
    if value is None:
        return None
    return math.floor(value * 10 + 0.5) / 10


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def today_in_timezone(tz_name: str) -> date:
    """Current calendar date in the given time zone"""
    return datetime.now(pytz.timezone(tz_name)).date()


def local_date(value: datetime, tz_name: str) -> date:
    """Calendar date of a timestamp in the given time zone (naive means UTC)"""
    return as_utc(value).astimezone(pytz.timezone(tz_name)).date()
