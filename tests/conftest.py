"""Global test fixtures and utilities for habit farm tests"""
import pytest
from datetime import datetime, timedelta, timezone
from itertools import count

from src.db.repository import FarmRepository
from src.db.snapshot_store import SnapshotStore
from src.models.farm import Animal, AnimalState, AnimalType, Habit
from src.services.farm_service import FarmService


# ============================================================================
# Time Fixtures
# ============================================================================

FROZEN_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable "now" for deterministic day arithmetic"""

    def __init__(self, now: datetime = FROZEN_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now = self.now + timedelta(days=days, hours=hours)


@pytest.fixture
def frozen_now():
    """Fixed reference moment (midday UTC)"""
    return FROZEN_NOW


@pytest.fixture
def clock():
    return FakeClock()


# ============================================================================
# Entity Fixtures
# ============================================================================

@pytest.fixture
def animal_factory():
    """Factory for animals with sensible defaults"""
    ids = count(1)

    def _create(**overrides):
        n = next(ids)
        fields = {
            "id": f"animal_{n}",
            "type": AnimalType.CAT,
            "name": f"Kitty {n}",
            "habit_id": f"habit_{n}",
            "state": AnimalState.NEUTRAL,
            "level": 1,
            "experience": 0,
            "last_check_in": None,
            "check_in_streak": 0,
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return Animal(**fields)

    return _create


@pytest.fixture
def habit_for():
    """Build the paired habit for an animal"""
    def _create(animal: Animal, description: str = "Drink water"):
        return Habit(
            id=animal.habit_id,
            description=description,
            animal_id=animal.id,
            created_at=animal.created_at,
        )

    return _create


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def repository():
    return FarmRepository()


@pytest.fixture
def farm_service(repository, clock):
    """FarmService over an empty in-memory repository with a fake clock"""
    ids = count(1)
    return FarmService(repository, clock=clock, id_factory=lambda: f"id_{next(ids)}")


@pytest.fixture
def snapshot_store(tmp_path):
    return SnapshotStore(path=tmp_path / "cozy-habit-farm-storage.json")
