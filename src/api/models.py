"""Pydantic models for API request/response validation"""
from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from src.models.farm import Animal, AnimalType, Habit, User


class CreateAnimalRequest(BaseModel):
    """Request to create an animal with its habit"""
    animal_type: AnimalType = Field(..., description="Companion species")
    name: str = Field(..., min_length=1, description="Display name for the animal")
    habit_description: str = Field(..., min_length=1, description="Habit the animal is tied to")


class CoinsRequest(BaseModel):
    """Request to add or spend coins"""
    amount: int = Field(..., ge=0, description="Number of coins")


class CoinsResponse(BaseModel):
    """Balance after a coin operation"""
    success: bool
    coins: int


class CheckInResponse(BaseModel):
    """Reward for a check-in"""
    animal_id: str
    coins_earned: int
    xp_earned: int
    leveled_up: bool
    animal: Animal


class CanCheckInResponse(BaseModel):
    animal_id: str
    can_check_in: bool


class LevelProgress(BaseModel):
    current_level: int
    xp_in_current_level: int
    xp_to_next_level: int
    is_max_level: bool


class FarmAnimalEntry(BaseModel):
    """One animal with its habit and level progress"""
    animal: Animal
    habit: Optional[Habit] = None
    progress: LevelProgress
    can_check_in: bool


class FarmOverviewResponse(BaseModel):
    """Full farm view for rendering"""
    user: Optional[User] = None
    animals: List[FarmAnimalEntry]


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    scheduler: str = Field(..., description="State refresh scheduler status")
    timestamp: datetime = Field(..., description="Check timestamp")
