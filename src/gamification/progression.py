"""
Progression Engine

Turns a check-in into the animal's next snapshot and a reward. Everything here
is pure: it takes an Animal and a reference moment and returns new values.
Committing them (and crediting coins) is the farm service's job.

Check-in rules:
- at most one check-in per calendar day; a repeat returns a zero reward
- streak continues if the previous check-in was today or yesterday
- every check-in earns COIN_REWARD_PER_CHECK_IN coins and XP_PER_CHECK_IN XP
- BONUS_XP_FOR_STREAK is added once the new streak reaches STREAK_BONUS_THRESHOLD
- state follows the new streak directly (thriving at 3+, else neutral)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging

from src.gamification.state_classifier import classify_state, state_for_streak
from src.gamification.streak_system import calculate_next_streak
from src.gamification.xp_system import calculate_level_from_xp
from src.models.farm import Animal, CheckInResult
from src.utils.datetime_helpers import is_today, now_utc

logger = logging.getLogger(__name__)

COIN_REWARD_PER_CHECK_IN = 5
XP_PER_CHECK_IN = 10
BONUS_XP_FOR_STREAK = 5
STREAK_BONUS_THRESHOLD = 3


@dataclass(frozen=True)
class CheckInOutcome:
    """Result of applying a check-in: the animal to commit and the reward"""
    animal: Animal
    result: CheckInResult
    applied: bool


def can_check_in(animal: Animal, now: Optional[datetime] = None) -> bool:
    """An animal may check in once per calendar day; never-checked-in is always eligible"""
    return not is_today(animal.last_check_in, now)


def calculate_check_in_xp(new_streak: int) -> int:
    """XP for one check-in given the streak it produces"""
    xp = XP_PER_CHECK_IN
    if new_streak >= STREAK_BONUS_THRESHOLD:
        xp += BONUS_XP_FOR_STREAK
    return xp


def apply_check_in(animal: Animal, now: Optional[datetime] = None) -> CheckInOutcome:
    """
    Compute the check-in transition for one animal

    Args:
        animal: Current animal snapshot
        now: Moment of the check-in (defaults to now_utc()); used both for the
             eligibility gate and as the new last_check_in

    Returns:
        CheckInOutcome; when not eligible, applied is False and the animal is
        returned unchanged with a zero reward
    """
    now = now or now_utc()

    if not can_check_in(animal, now):
        logger.debug(f"Animal {animal.id} already checked in today, no reward")
        return CheckInOutcome(animal=animal, result=CheckInResult.nothing(), applied=False)

    streak_info = calculate_next_streak(animal.last_check_in, animal.check_in_streak, now)
    new_streak = streak_info["current_streak"]

    xp_earned = calculate_check_in_xp(new_streak)
    new_experience = animal.experience + xp_earned
    new_level = calculate_level_from_xp(new_experience)
    leveled_up = new_level > animal.level

    updated = animal.model_copy(update={
        "last_check_in": now,
        "check_in_streak": new_streak,
        "experience": new_experience,
        "level": new_level,
        # Just checked in, so days missed is 0 and only the streak matters
        "state": state_for_streak(new_streak),
    })

    result = CheckInResult(
        coins_earned=COIN_REWARD_PER_CHECK_IN,
        xp_earned=xp_earned,
        leveled_up=leveled_up,
    )

    if leveled_up:
        logger.info(f"Animal {animal.id} leveled up from {animal.level} to {new_level}!")

    return CheckInOutcome(animal=updated, result=result, applied=True)


def refresh_animal_state(animal: Animal, now: Optional[datetime] = None) -> Animal:
    """Reclassify state from elapsed time; experience, level, streak untouched"""
    new_state = classify_state(animal.last_check_in, animal.check_in_streak, now)
    if new_state == animal.state:
        return animal
    return animal.model_copy(update={"state": new_state})


def reconcile_level(animal: Animal) -> Animal:
    """Re-derive level from experience; returns the same object when they agree"""
    derived_level = calculate_level_from_xp(animal.experience)
    if derived_level == animal.level:
        return animal

    logger.warning(
        f"Animal {animal.id} stored level {animal.level} but {animal.experience} XP "
        f"means level {derived_level}, using {derived_level}"
    )
    return animal.model_copy(update={"level": derived_level})
