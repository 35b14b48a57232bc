"""
FarmService - Habit Farm Business Logic

Entry point for every operation the surrounding application performs:
creating companions, checking in, periodic state refresh and the coin
balance. Game rules come from src.gamification; the repository only stores
and notifies.
"""

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, Optional
from uuid import uuid4

from src.db.repository import FarmRepository, SnapshotListener
from src.exceptions import ValidationError
from src.gamification import (
    apply_check_in,
    can_check_in as animal_can_check_in,
    get_level_progress,
    refresh_animal_state,
)
from src.models.farm import (
    Animal,
    AnimalState,
    AnimalType,
    CheckInResult,
    Habit,
    User,
)
from src.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)


class KeyedLocks:
    """One lock per key, so mutations of the same animal never interleave"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks[key]
        with lock:
            yield


def _new_id() -> str:
    return uuid4().hex


class FarmService:
    """
    Service for farm progression.

    Responsibilities:
    - User lifecycle (create once, onboarding flag)
    - Creating animal + habit pairs
    - Daily check-ins with streak, XP, level and coin rewards
    - Periodic state reclassification
    - Coin balance (credit, all-or-nothing spend)

    Mutations of one animal are serialized by a per-animal lock and the coin
    balance by a user lock (always taken after the animal lock), so a
    check-in and a refresh tick for the same animal cannot interleave.
    """

    def __init__(
        self,
        repository: FarmRepository,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = _new_id,
    ):
        """
        Initialize FarmService.

        Args:
            repository: Entity repository holding the current snapshot
            clock: Source of "now"; called once per operation
            id_factory: Generator for fresh entity identifiers
        """
        self.repository = repository
        self._clock = clock
        self._new_id = id_factory
        self._animal_locks = KeyedLocks()
        self._user_lock = threading.Lock()
        logger.debug("FarmService initialized")

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Subscribe to committed snapshots (see FarmRepository.subscribe)"""
        return self.repository.subscribe(listener)

    # ------------------------------------------------------------------
    # User
    # ------------------------------------------------------------------

    def initialize_user(self) -> User:
        """Create the user if absent; an existing user is never overwritten"""
        with self._user_lock:
            existing = self.repository.user
            if existing is not None:
                logger.debug(f"User {existing.id} already initialized")
                return existing

            user = User(id=self._new_id(), coins=0, created_at=self._clock())
            self.repository.commit(user=user)
            logger.info(f"Created user {user.id}")
            return user

    def complete_onboarding(self) -> None:
        """Mark onboarding as done"""
        with self._user_lock:
            user = self.repository.user
            if user is None:
                logger.warning("complete_onboarding called before initialize_user")
                return
            if user.has_completed_onboarding:
                return
            self.repository.commit(user=user.model_copy(update={"has_completed_onboarding": True}))
            logger.info(f"User {user.id} completed onboarding")

    # ------------------------------------------------------------------
    # Animals & habits
    # ------------------------------------------------------------------

    def create_animal_and_habit(self, animal_type: AnimalType, name: str, description: str) -> Animal:
        """
        Create an animal and its habit together

        Args:
            animal_type: Species from the AnimalType enumeration
            name: Display name chosen by the user
            description: Free-text habit description

        Returns:
            The new animal (level 1, 0 XP, neutral, never checked in)

        Raises:
            ValidationError: Unknown type or blank name/description
        """
        try:
            animal_type = AnimalType(animal_type)
        except ValueError:
            raise ValidationError("Unknown animal type", field="animal_type", value=animal_type)
        if not name or not name.strip():
            raise ValidationError("Name must not be empty", field="name", value=name)
        if not description or not description.strip():
            raise ValidationError("Habit description must not be empty", field="description", value=description)

        animal_id = self._new_id()
        habit_id = self._new_id()
        now = self._clock()

        animal = Animal(
            id=animal_id,
            type=animal_type,
            name=name.strip(),
            habit_id=habit_id,
            state=AnimalState.NEUTRAL,
            level=1,
            experience=0,
            last_check_in=None,
            check_in_streak=0,
            created_at=now,
        )
        habit = Habit(
            id=habit_id,
            description=description.strip(),
            animal_id=animal_id,
            created_at=now,
        )

        with self._animal_locks.hold(animal_id):
            self.repository.commit(animals=[animal], habits=[habit])

        logger.info(f"Created {animal_type.value} '{animal.name}' ({animal_id}) for habit '{habit.description}'")
        return animal

    def get_animal_by_id(self, animal_id: str) -> Optional[Animal]:
        return self.repository.get_animal_by_id(animal_id)

    def get_habit_by_animal_id(self, animal_id: str) -> Optional[Habit]:
        return self.repository.get_habit_by_animal_id(animal_id)

    # ------------------------------------------------------------------
    # Check-ins
    # ------------------------------------------------------------------

    def can_check_in(self, animal_id: str) -> bool:
        """False for unknown animals and for animals already checked in today"""
        animal = self.repository.get_animal_by_id(animal_id)
        if animal is None:
            return False
        return animal_can_check_in(animal, self._clock())

    def check_in(self, animal_id: str) -> CheckInResult:
        """
        Check in an animal's habit for today

        Returns:
            CheckInResult with coins, XP and level-up flag; a zero reward with
            no mutation when the animal is unknown or already checked in today
        """
        # Locks exist only for known animals; animals are never removed
        if self.repository.get_animal_by_id(animal_id) is None:
            logger.debug(f"Check-in for unknown animal {animal_id}")
            return CheckInResult.nothing()

        with self._animal_locks.hold(animal_id):
            animal = self.repository.get_animal_by_id(animal_id)
            outcome = apply_check_in(animal, self._clock())
            if not outcome.applied:
                return outcome.result

            with self._user_lock:
                user = self.repository.user
                credited_user = None
                if user is not None:
                    credited_user = user.model_copy(
                        update={"coins": user.coins + outcome.result.coins_earned}
                    )
                else:
                    logger.warning(f"Check-in for {animal_id} with no user, coins not credited")

                self.repository.commit(user=credited_user, animals=[outcome.animal])

        logger.info(
            f"Animal {animal_id} checked in: +{outcome.result.coins_earned} coins, "
            f"+{outcome.result.xp_earned} XP, streak {outcome.animal.check_in_streak}, "
            f"state {outcome.animal.state.value}"
        )
        return outcome.result

    def refresh_states(self) -> int:
        """
        Reclassify every animal's state from elapsed time

        Experience, level, streak and coins are untouched. Each animal is
        reclassified under its own lock.

        Returns:
            Number of animals whose state changed
        """
        now = self._clock()
        changed = 0

        for animal_id in [animal.id for animal in self.repository.animals]:
            with self._animal_locks.hold(animal_id):
                animal = self.repository.get_animal_by_id(animal_id)
                if animal is None:
                    continue
                refreshed = refresh_animal_state(animal, now)
                if refreshed is animal:
                    continue
                self.repository.commit(animals=[refreshed])
                changed += 1
                logger.debug(f"Animal {animal_id} is now {refreshed.state.value} (was {animal.state.value})")

        if changed:
            logger.info(f"Refreshed states: {changed} animals changed")
        return changed

    # ------------------------------------------------------------------
    # Coins
    # ------------------------------------------------------------------

    def add_coins(self, amount: int) -> None:
        """Credit coins to the user"""
        self._check_amount(amount)
        with self._user_lock:
            user = self.repository.user
            if user is None:
                logger.warning("add_coins called before initialize_user")
                return
            self.repository.commit(user=user.model_copy(update={"coins": user.coins + amount}))
        logger.info(f"Added {amount} coins to user {user.id}")

    def spend_coins(self, amount: int) -> bool:
        """
        Debit coins if the balance covers the whole amount

        Returns:
            True if spent; False (balance unchanged) otherwise
        """
        self._check_amount(amount)
        with self._user_lock:
            user = self.repository.user
            if user is None or user.coins < amount:
                logger.debug(f"Spend of {amount} coins refused")
                return False
            self.repository.commit(user=user.model_copy(update={"coins": user.coins - amount}))
        logger.info(f"User {user.id} spent {amount} coins")
        return True

    @staticmethod
    def _check_amount(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise ValidationError("Amount must be a non-negative integer", field="amount", value=amount)

    # ------------------------------------------------------------------
    # Overview
    # ------------------------------------------------------------------

    def get_farm_overview(self) -> Dict[str, Any]:
        """
        Everything the presentation layer needs in one read

        Returns:
            {
                'user': User | None,
                'animals': [
                    {'animal': Animal, 'habit': Habit, 'progress': dict, 'can_check_in': bool},
                    ...
                ]
            }
        """
        now = self._clock()
        snapshot = self.repository.snapshot()
        habits = {habit.id: habit for habit in snapshot.habits}

        animals = []
        for animal in sorted(snapshot.animals, key=lambda a: a.created_at):
            animals.append({
                "animal": animal,
                "habit": habits.get(animal.habit_id),
                "progress": get_level_progress(animal.experience),
                "can_check_in": animal_can_check_in(animal, now),
            })

        return {"user": snapshot.user, "animals": animals}
