"""
Calendar-day utilities for the progression rules

All game rules compare calendar days, never clock times:
- "now" comes from now_utc() only, and an operation fetches it once and
  passes it down so every comparison inside one transaction agrees
- timestamps are truncated to a date in the farm timezone (FARM_TIMEZONE)
- a missing timestamp means "never happened" and is NEVER days ago
"""

import logging
import math
from datetime import date, datetime
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo

from src import config

logger = logging.getLogger(__name__)

# Sentinel for "never happened"; compares greater than any finite day threshold
NEVER: float = math.inf

DaysSince = Union[int, float]


@lru_cache(maxsize=8)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def get_farm_timezone() -> ZoneInfo:
    """Timezone used to cut timestamps into calendar days"""
    return _zone(config.FARM_TIMEZONE)


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(ZoneInfo("UTC"))


def to_farm_date(value: Union[date, datetime]) -> date:
    """Truncate a timestamp to its calendar day on the farm clock"""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=ZoneInfo("UTC"))
        return value.astimezone(get_farm_timezone()).date()
    return value


def today(now: Optional[datetime] = None) -> date:
    """Current calendar day, time-of-day discarded"""
    return to_farm_date(now or now_utc())


def is_today(value: Optional[Union[date, datetime]], now: Optional[datetime] = None) -> bool:
    """True iff value falls on today's calendar day. None is never today."""
    if value is None:
        return False
    return to_farm_date(value) == today(now)


def days_since(value: Optional[Union[date, datetime]], now: Optional[datetime] = None) -> DaysSince:
    """
    Whole calendar days between value and today

    Args:
        value: Past timestamp or date, None if it never happened
        now: Reference moment (defaults to now_utc())

    Returns:
        0 for today, 1 for yesterday, ... or NEVER when value is None
    """
    if value is None:
        return NEVER
    return (today(now) - to_farm_date(value)).days
