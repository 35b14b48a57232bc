"""
Check-in Streak Tracking

A streak counts consecutive calendar days with a check-in. Continuation only
looks at the gap since the previous check-in:
- gap of 0 or 1 day: streak continues (+1)
- anything else, including no previous check-in: streak restarts at 1

The same-day case never reaches here in practice because the progression
engine refuses a second check-in on the same day.
"""

from datetime import datetime
from typing import Dict, Optional
import logging

from src.utils.datetime_helpers import days_since

logger = logging.getLogger(__name__)

MAX_CONSECUTIVE_GAP_DAYS = 1


def calculate_next_streak(
    last_check_in: Optional[datetime],
    previous_streak: int,
    now: Optional[datetime] = None
) -> Dict[str, int]:
    """
    Streak after a check-in at `now`

    Returns:
        {
            'current_streak': int,
            'old_streak': int,
            'days_since_last': int | float (NEVER when no previous check-in),
            'continued': bool
        }
    """
    gap = days_since(last_check_in, now)
    continued = gap <= MAX_CONSECUTIVE_GAP_DAYS
    new_streak = previous_streak + 1 if continued else 1

    if not continued and previous_streak > 0:
        logger.debug(f"Streak reset after {gap} days away. Was {previous_streak}")

    return {
        "current_streak": new_streak,
        "old_streak": previous_streak,
        "days_since_last": gap,
        "continued": continued,
    }
