"""
XP and Leveling System

Level is a derived view of cumulative experience through a fixed threshold
table. Index i holds the minimum XP for level i+1, so level 1 starts at 0 XP
and the table length caps the level.

Leveling Curve:
- Level 1: 0 XP
- Level 2: 10 XP
- Level 3: 25 XP
- ...
- Level 10 (max): 725 XP

The table is configuration data, not user state: a snapshot saved under one
table must be loaded under the same table for stored levels to stay valid.
"""

from typing import Dict, Sequence
import logging

logger = logging.getLogger(__name__)

LEVEL_THRESHOLDS: tuple[int, ...] = (0, 10, 25, 50, 100, 175, 275, 400, 550, 725)
MAX_LEVEL: int = len(LEVEL_THRESHOLDS)


def calculate_level_from_xp(experience: int, thresholds: Sequence[int] = LEVEL_THRESHOLDS) -> int:
    """
    Calculate level from cumulative experience

    Scans from the highest threshold down and returns the first level whose
    minimum is met. Monotonic in experience; calculate_level_from_xp(0) == 1.
    """
    for index in range(len(thresholds) - 1, -1, -1):
        if experience >= thresholds[index]:
            return index + 1
    return 1


def get_level_progress(experience: int, thresholds: Sequence[int] = LEVEL_THRESHOLDS) -> Dict[str, int]:
    """
    Progress toward the next level

    Returns:
        {
            'current_level': int,
            'xp_in_current_level': int,
            'xp_to_next_level': int (0 at max level),
            'is_max_level': bool
        }
    """
    level = calculate_level_from_xp(experience, thresholds)
    level_floor = thresholds[level - 1]
    is_max_level = level >= len(thresholds)

    if is_max_level:
        xp_to_next_level = 0
    else:
        xp_to_next_level = thresholds[level] - experience

    return {
        "current_level": level,
        "xp_in_current_level": experience - level_floor,
        "xp_to_next_level": xp_to_next_level,
        "is_max_level": is_max_level,
    }
