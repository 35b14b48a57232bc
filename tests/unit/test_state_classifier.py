"""Unit tests for State Classifier (src/gamification/state_classifier.py)"""
import pytest
from datetime import datetime, timedelta, timezone

from src.gamification.state_classifier import classify_state
from src.models.farm import AnimalState

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def ago(days: int) -> datetime:
    return NOW - timedelta(days=days)


# ============================================================================
# Recent Check-ins
# ============================================================================

@pytest.mark.parametrize("days", [0, 1])
def test_recent_check_in_with_streak_is_thriving(days):
    assert classify_state(ago(days), 3, NOW) == AnimalState.THRIVING


@pytest.mark.parametrize("days", [0, 1])
def test_recent_check_in_short_streak_is_neutral(days):
    assert classify_state(ago(days), 2, NOW) == AnimalState.NEUTRAL


# ============================================================================
# Lapses
# ============================================================================

@pytest.mark.parametrize("days", [2, 3])
def test_short_lapse_is_neutral_even_with_long_streak(days):
    """A short lapse is not punished, but thriving needs a recent check-in"""
    assert classify_state(ago(days), 10, NOW) == AnimalState.NEUTRAL


@pytest.mark.parametrize("days", [4, 5, 30])
def test_long_lapse_is_resting(days):
    assert classify_state(ago(days), 10, NOW) == AnimalState.RESTING


def test_never_checked_in_is_resting():
    """No check-in means unbounded days missed"""
    assert classify_state(None, 0, NOW) == AnimalState.RESTING


# ============================================================================
# Purity
# ============================================================================

def test_classify_is_repeatable():
    """Identical inputs give identical output"""
    results = {classify_state(ago(1), 4, NOW) for _ in range(10)}

    assert results == {AnimalState.THRIVING}


def test_day_boundary_not_hours():
    """Yesterday at 00:01 is still 'yesterday' at 23:59 today"""
    late_today = datetime(2024, 1, 15, 23, 59, tzinfo=timezone.utc)
    early_yesterday = datetime(2024, 1, 14, 0, 1, tzinfo=timezone.utc)

    assert classify_state(early_yesterday, 3, late_today) == AnimalState.THRIVING
