"""Farm entity models: user, animal companions, habits and the persisted snapshot"""
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.utils.datetime_helpers import get_farm_timezone


class AnimalState(str, Enum):
    """Emotional states - no failure state, resting is the worst it gets"""
    THRIVING = "thriving"
    NEUTRAL = "neutral"
    RESTING = "resting"


class AnimalType(str, Enum):
    """Companion species available on the farm"""
    CAT = "cat"
    BUNNY = "bunny"
    BEAR = "bear"
    FOX = "fox"
    DUCK = "duck"
    HAMSTER = "hamster"


class FarmModel(BaseModel):
    """Shared config: camelCase on disk, snake_case in code, immutable snapshots"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class User(FarmModel):
    """The single player of this installation"""
    id: str
    coins: int = Field(default=0, ge=0)
    created_at: datetime
    has_completed_onboarding: bool = False


class Animal(FarmModel):
    """
    A companion bound to exactly one habit.

    level is always derived from experience and state is always derived by
    the classifier or the check-in transition; neither is set independently.
    """
    id: str
    type: AnimalType
    name: str
    habit_id: str
    state: AnimalState = AnimalState.NEUTRAL
    level: int = Field(default=1, ge=1)
    experience: int = Field(default=0, ge=0)
    last_check_in: Optional[datetime] = None
    check_in_streak: int = Field(default=0, ge=0)
    created_at: datetime

    @field_validator("last_check_in", mode="before")
    @classmethod
    def _accept_plain_date(cls, value):
        # Older snapshots stored a bare ISO date; read it as midnight on the farm clock
        if isinstance(value, str) and len(value) == 10:
            value = date.fromisoformat(value)
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.min, tzinfo=get_farm_timezone())
        return value

    @field_validator("last_check_in", "created_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Habit(FarmModel):
    """Free-text habit, paired 1:1 with its animal"""
    id: str
    description: str
    animal_id: str
    created_at: datetime


class DecorationPosition(FarmModel):
    x: float
    y: float


class FarmDecoration(FarmModel):
    """Reserved for a future shop; snapshots always carry an empty list"""
    id: str
    type: str
    position: DecorationPosition


class FarmSnapshot(FarmModel):
    """Everything persisted under the storage slot, loaded and saved as one unit"""
    user: Optional[User] = None
    animals: list[Animal] = Field(default_factory=list)
    habits: list[Habit] = Field(default_factory=list)
    decorations: list[FarmDecoration] = Field(default_factory=list)


class CheckInResult(FarmModel):
    """Reward handed back to the presentation layer after a check-in"""
    coins_earned: int = 0
    xp_earned: int = 0
    leveled_up: bool = False

    @classmethod
    def nothing(cls) -> "CheckInResult":
        """Zero reward for an ineligible or unknown check-in"""
        return cls(coins_earned=0, xp_earned=0, leveled_up=False)


class AnimalInfo(BaseModel):
    """Display info per species"""
    type: AnimalType
    display_name: str
    emoji: str
    description: str


ANIMAL_INFO: dict[AnimalType, AnimalInfo] = {
    AnimalType.CAT: AnimalInfo(
        type=AnimalType.CAT,
        display_name="Kitty",
        emoji="🐱",
        description="A cozy companion who loves naps",
    ),
    AnimalType.BUNNY: AnimalInfo(
        type=AnimalType.BUNNY,
        display_name="Bunny",
        emoji="🐰",
        description="A fluffy friend who hops with joy",
    ),
    AnimalType.BEAR: AnimalInfo(
        type=AnimalType.BEAR,
        display_name="Bear",
        emoji="🐻",
        description="A gentle giant with a warm heart",
    ),
    AnimalType.FOX: AnimalInfo(
        type=AnimalType.FOX,
        display_name="Fox",
        emoji="🦊",
        description="A clever friend who loves adventures",
    ),
    AnimalType.DUCK: AnimalInfo(
        type=AnimalType.DUCK,
        display_name="Duckling",
        emoji="🦆",
        description="A cheerful companion who quacks happily",
    ),
    AnimalType.HAMSTER: AnimalInfo(
        type=AnimalType.HAMSTER,
        display_name="Hamster",
        emoji="🐹",
        description="A tiny friend with big energy",
    ),
}
