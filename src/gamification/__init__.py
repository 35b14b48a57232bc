"""
Progression rules for the habit farm

This module holds the pure game logic:
- Leveling from cumulative XP (fixed threshold table)
- Check-in streak continuation
- Emotional state classification (thriving / neutral / resting)
- The check-in transition and its rewards
"""

from src.gamification.xp_system import calculate_level_from_xp, get_level_progress, LEVEL_THRESHOLDS
from src.gamification.streak_system import calculate_next_streak
from src.gamification.state_classifier import classify_state
from src.gamification.progression import (
    apply_check_in,
    can_check_in,
    reconcile_level,
    refresh_animal_state,
    COIN_REWARD_PER_CHECK_IN,
    XP_PER_CHECK_IN,
    BONUS_XP_FOR_STREAK,
)

__all__ = [
    "calculate_level_from_xp",
    "get_level_progress",
    "LEVEL_THRESHOLDS",
    "calculate_next_streak",
    "classify_state",
    "apply_check_in",
    "can_check_in",
    "reconcile_level",
    "refresh_animal_state",
    "COIN_REWARD_PER_CHECK_IN",
    "XP_PER_CHECK_IN",
    "BONUS_XP_FOR_STREAK",
]
