"""Farm entity repository

Owns the authoritative user, animals and habits. Reads are plain lookups;
writes go through commit(), which applies a set of entity replacements as one
transaction and then notifies subscribers with the new snapshot. No game
rules live here.
"""
import logging
import threading
from typing import Callable, Dict, Iterable, List, Optional

from src.exceptions import IntegrityError
from src.models.farm import Animal, FarmSnapshot, Habit, User

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[FarmSnapshot], None]


def verify_integrity(animals: Iterable[Animal], habits: Iterable[Habit]) -> None:
    """
    Check the 1:1 animal/habit pairing

    Raises:
        IntegrityError: An animal points at a missing habit, a habit points at
            a missing animal, or the two back-references disagree
    """
    animals_by_id = {animal.id: animal for animal in animals}
    habits_by_id = {habit.id: habit for habit in habits}

    for animal in animals_by_id.values():
        habit = habits_by_id.get(animal.habit_id)
        if habit is None:
            raise IntegrityError(
                f"Animal {animal.id} references missing habit {animal.habit_id}",
                animal_id=animal.id,
                habit_id=animal.habit_id,
                operation="verify_integrity",
            )
        if habit.animal_id != animal.id:
            raise IntegrityError(
                f"Habit {habit.id} belongs to {habit.animal_id}, not {animal.id}",
                animal_id=animal.id,
                habit_id=habit.id,
                operation="verify_integrity",
            )

    for habit in habits_by_id.values():
        if habit.animal_id not in animals_by_id:
            raise IntegrityError(
                f"Habit {habit.id} references missing animal {habit.animal_id}",
                animal_id=habit.animal_id,
                habit_id=habit.id,
                operation="verify_integrity",
            )


class FarmRepository:
    """In-memory store of farm entities with snapshot notifications"""

    def __init__(self, snapshot: Optional[FarmSnapshot] = None):
        self._lock = threading.RLock()
        self._listeners: List[SnapshotListener] = []
        self._user: Optional[User] = None
        self._animals: Dict[str, Animal] = {}
        self._habits: Dict[str, Habit] = {}
        if snapshot is not None:
            self.load(snapshot)

    # ------------------------------------------------------------------
    # Loading & snapshots
    # ------------------------------------------------------------------

    def load(self, snapshot: FarmSnapshot) -> None:
        """Replace all state with a persisted snapshot after checking integrity"""
        verify_integrity(snapshot.animals, snapshot.habits)
        with self._lock:
            self._user = snapshot.user
            self._animals = {animal.id: animal for animal in snapshot.animals}
            self._habits = {habit.id: habit for habit in snapshot.habits}
        logger.info(f"Repository loaded with {len(self._animals)} animals")

    def snapshot(self) -> FarmSnapshot:
        """Current state as one immutable snapshot"""
        with self._lock:
            return FarmSnapshot(
                user=self._user,
                animals=list(self._animals.values()),
                habits=list(self._habits.values()),
                decorations=[],
            )

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        Register a listener called with the new snapshot after every commit

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, snapshot: FarmSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                # A failing listener never rolls back a committed transaction
                logger.error(f"Snapshot listener {listener!r} failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def commit(
        self,
        user: Optional[User] = None,
        animals: Iterable[Animal] = (),
        habits: Iterable[Habit] = (),
    ) -> FarmSnapshot:
        """
        Apply entity replacements atomically and notify subscribers

        Args:
            user: New user snapshot, if it changed
            animals: Animals to insert or replace (by id)
            habits: Habits to insert or replace (by id)

        Returns:
            The committed snapshot

        Raises:
            IntegrityError: The result would break the animal/habit pairing;
                nothing is applied in that case
        """
        animals = list(animals)
        habits = list(habits)

        with self._lock:
            new_animals = dict(self._animals)
            new_animals.update({animal.id: animal for animal in animals})
            new_habits = dict(self._habits)
            new_habits.update({habit.id: habit for habit in habits})

            if animals or habits:
                verify_integrity(new_animals.values(), new_habits.values())

            if user is not None:
                self._user = user
            self._animals = new_animals
            self._habits = new_habits

            snapshot = self.snapshot()
            self._notify(snapshot)
            return snapshot

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def animals(self) -> List[Animal]:
        with self._lock:
            return list(self._animals.values())

    @property
    def habits(self) -> List[Habit]:
        with self._lock:
            return list(self._habits.values())

    def get_animal_by_id(self, animal_id: str) -> Optional[Animal]:
        return self._animals.get(animal_id)

    def get_habit_by_id(self, habit_id: str) -> Optional[Habit]:
        return self._habits.get(habit_id)

    def get_habit_by_animal_id(self, animal_id: str) -> Optional[Habit]:
        animal = self._animals.get(animal_id)
        if animal is None:
            return None
        return self._habits.get(animal.habit_id)

    def get_animal_for_habit(self, habit: Habit) -> Animal:
        """
        Owning animal of a habit

        Raises:
            IntegrityError: The habit's owner does not exist
        """
        animal = self._animals.get(habit.animal_id)
        if animal is None:
            raise IntegrityError(
                f"Habit {habit.id} references missing animal {habit.animal_id}",
                animal_id=habit.animal_id,
                habit_id=habit.id,
                operation="get_animal_for_habit",
            )
        return animal
