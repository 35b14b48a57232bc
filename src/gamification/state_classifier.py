"""
Animal State Classifier

Maps check-in history to one of three non-punitive states:
- checked in today or yesterday: thriving with a streak of 3+, else neutral
- missed up to 3 days: neutral (a short lapse is not punished)
- longer, or never checked in: resting

Pure and idempotent: depends only on (last_check_in, streak) and today, so it
is safe to run on every render and every periodic tick.
"""

from datetime import datetime
from typing import Optional

from src.models.farm import AnimalState
from src.utils.datetime_helpers import days_since

THRIVING_STREAK = 3
RESTING_AFTER_DAYS = 3


def state_for_streak(streak: int) -> AnimalState:
    """State of an animal seen today or yesterday"""
    if streak >= THRIVING_STREAK:
        return AnimalState.THRIVING
    return AnimalState.NEUTRAL


def classify_state(
    last_check_in: Optional[datetime],
    streak: int,
    now: Optional[datetime] = None
) -> AnimalState:
    """Derive an animal's emotional state from its check-in history"""
    days_missed = days_since(last_check_in, now)

    if days_missed in (0, 1):
        return state_for_streak(streak)
    if days_missed <= RESTING_AFTER_DAYS:
        return AnimalState.NEUTRAL
    # Resting, never negative
    return AnimalState.RESTING
