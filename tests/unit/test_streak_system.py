"""Unit tests for Streak System (src/gamification/streak_system.py)"""
from datetime import datetime, timedelta, timezone

from src.gamification.streak_system import calculate_next_streak
from src.utils.datetime_helpers import NEVER

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def test_first_check_in_starts_streak():
    result = calculate_next_streak(None, 0, NOW)

    assert result["current_streak"] == 1
    assert result["continued"] is False
    assert result["days_since_last"] == NEVER


def test_consecutive_day_increments_streak():
    result = calculate_next_streak(NOW - timedelta(days=1), 5, NOW)

    assert result["current_streak"] == 6
    assert result["old_streak"] == 5
    assert result["continued"] is True


def test_two_day_gap_resets_streak():
    result = calculate_next_streak(NOW - timedelta(days=2), 5, NOW)

    assert result["current_streak"] == 1
    assert result["continued"] is False
    assert result["days_since_last"] == 2


def test_late_night_then_early_morning_is_consecutive():
    """Only calendar days count: 23:50 then 00:10 continues the streak"""
    last = datetime(2024, 1, 14, 23, 50, tzinfo=timezone.utc)
    now = datetime(2024, 1, 15, 0, 10, tzinfo=timezone.utc)

    assert calculate_next_streak(last, 2, now)["current_streak"] == 3
