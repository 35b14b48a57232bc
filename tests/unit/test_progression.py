"""Unit tests for the check-in transition (src/gamification/progression.py)"""
from datetime import datetime, timedelta, timezone

from src.gamification.progression import (
    BONUS_XP_FOR_STREAK,
    COIN_REWARD_PER_CHECK_IN,
    XP_PER_CHECK_IN,
    apply_check_in,
    calculate_check_in_xp,
    can_check_in,
    reconcile_level,
    refresh_animal_state,
)
from src.models.farm import AnimalState

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# Eligibility
# ============================================================================

def test_never_checked_in_is_eligible(animal_factory):
    assert can_check_in(animal_factory(), NOW) is True


def test_checked_in_today_is_not_eligible(animal_factory):
    animal = animal_factory(last_check_in=NOW - timedelta(hours=3))

    assert can_check_in(animal, NOW) is False


def test_checked_in_yesterday_is_eligible(animal_factory):
    animal = animal_factory(last_check_in=NOW - timedelta(days=1))

    assert can_check_in(animal, NOW) is True


# ============================================================================
# Rewards
# ============================================================================

def test_check_in_xp_bonus_starts_at_streak_3():
    assert calculate_check_in_xp(1) == XP_PER_CHECK_IN
    assert calculate_check_in_xp(2) == XP_PER_CHECK_IN
    assert calculate_check_in_xp(3) == XP_PER_CHECK_IN + BONUS_XP_FOR_STREAK
    assert calculate_check_in_xp(30) == 15


def test_first_check_in(animal_factory):
    outcome = apply_check_in(animal_factory(), NOW)

    assert outcome.applied is True
    assert outcome.result.coins_earned == COIN_REWARD_PER_CHECK_IN
    assert outcome.result.xp_earned == 10
    assert outcome.result.leveled_up is True  # 0 -> 10 XP crosses the level 2 threshold
    assert outcome.animal.check_in_streak == 1
    assert outcome.animal.experience == 10
    assert outcome.animal.level == 2
    assert outcome.animal.state == AnimalState.NEUTRAL
    assert outcome.animal.last_check_in == NOW


def test_streak_reaching_three_becomes_thriving(animal_factory):
    """Prior streak 2, checked in yesterday: streak 3, 15 XP, thriving"""
    animal = animal_factory(
        last_check_in=NOW - timedelta(days=1),
        check_in_streak=2,
        experience=30,
        level=3,
    )

    outcome = apply_check_in(animal, NOW)

    assert outcome.animal.check_in_streak == 3
    assert outcome.result.xp_earned == 15
    assert outcome.animal.experience == 45
    assert outcome.animal.state == AnimalState.THRIVING


def test_long_gap_resets_streak_without_bonus(animal_factory):
    """Last check-in 5 days ago with streak 4: streak 1, base XP only, neutral"""
    animal = animal_factory(
        last_check_in=NOW - timedelta(days=5),
        check_in_streak=4,
        experience=60,
        level=4,
        state=AnimalState.RESTING,
    )

    outcome = apply_check_in(animal, NOW)

    assert outcome.animal.check_in_streak == 1
    assert outcome.result.xp_earned == 10
    assert outcome.animal.state == AnimalState.NEUTRAL


def test_crossing_threshold_levels_up_once(animal_factory):
    """8 XP -> 18 XP crosses the 10 XP threshold"""
    animal = animal_factory(experience=8, level=1, last_check_in=NOW - timedelta(days=3))

    outcome = apply_check_in(animal, NOW)

    assert outcome.animal.experience == 18
    assert outcome.animal.level == 2
    assert outcome.result.leveled_up is True


def test_no_level_up_inside_level(animal_factory):
    animal = animal_factory(experience=11, level=2, last_check_in=NOW - timedelta(days=1), check_in_streak=1)

    outcome = apply_check_in(animal, NOW)

    assert outcome.animal.level == 2
    assert outcome.result.leveled_up is False


def test_second_check_in_same_day_is_noop(animal_factory):
    first = apply_check_in(animal_factory(), NOW)
    second = apply_check_in(first.animal, NOW + timedelta(hours=5))

    assert second.applied is False
    assert second.result.coins_earned == 0
    assert second.result.xp_earned == 0
    assert second.result.leveled_up is False
    assert second.animal == first.animal


def test_apply_check_in_does_not_mutate_input(animal_factory):
    animal = animal_factory()

    apply_check_in(animal, NOW)

    assert animal.experience == 0
    assert animal.last_check_in is None


# ============================================================================
# Refresh
# ============================================================================

def test_refresh_only_touches_state(animal_factory):
    animal = animal_factory(
        last_check_in=NOW - timedelta(days=6),
        check_in_streak=5,
        experience=120,
        level=5,
        state=AnimalState.THRIVING,
    )

    refreshed = refresh_animal_state(animal, NOW)

    assert refreshed.state == AnimalState.RESTING
    assert refreshed.check_in_streak == 5
    assert refreshed.experience == 120
    assert refreshed.level == 5


def test_refresh_returns_same_object_when_unchanged(animal_factory):
    animal = animal_factory(last_check_in=NOW, check_in_streak=1, state=AnimalState.NEUTRAL)

    assert refresh_animal_state(animal, NOW) is animal


# ============================================================================
# Level reconciliation
# ============================================================================

def test_reconcile_level_keeps_consistent_animal(animal_factory):
    animal = animal_factory(experience=30, level=3)

    assert reconcile_level(animal) is animal


def test_reconcile_level_follows_experience(animal_factory):
    inflated = animal_factory(experience=0, level=5)
    deflated = animal_factory(experience=120, level=1)

    assert reconcile_level(inflated).level == 1
    assert reconcile_level(deflated).level == 5
