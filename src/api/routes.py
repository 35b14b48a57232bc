"""API route handlers"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Request, status

from src.api.models import (
    CanCheckInResponse,
    CheckInResponse,
    CoinsRequest,
    CoinsResponse,
    CreateAnimalRequest,
    FarmOverviewResponse,
    HealthCheckResponse,
)
from src.models.farm import Animal, Habit, User
from src.services.farm_service import FarmService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_farm_service(request: Request) -> FarmService:
    """Farm service owned by the running application"""
    return request.app.state.farm_service


def _require_animal(service: FarmService, animal_id: str) -> Animal:
    animal = service.get_animal_by_id(animal_id)
    if animal is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Animal {animal_id} not found"
        )
    return animal


@router.post("/api/v1/user", response_model=User, status_code=status.HTTP_201_CREATED)
def initialize_user_endpoint(service: FarmService = Depends(get_farm_service)):
    """Create the farm's user (idempotent)"""
    return service.initialize_user()


@router.post("/api/v1/user/onboarding", response_model=User)
def complete_onboarding_endpoint(service: FarmService = Depends(get_farm_service)):
    """Mark onboarding as completed"""
    if service.repository.user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not initialized"
        )
    service.complete_onboarding()
    return service.repository.user


@router.get("/api/v1/farm", response_model=FarmOverviewResponse)
def get_farm(service: FarmService = Depends(get_farm_service)):
    """User, animals, habits and level progress in one response"""
    return FarmOverviewResponse(**service.get_farm_overview())


@router.post("/api/v1/animals", response_model=Animal, status_code=status.HTTP_201_CREATED)
def create_animal_endpoint(
    request: CreateAnimalRequest,
    service: FarmService = Depends(get_farm_service)
):
    """Create an animal together with its habit"""
    return service.create_animal_and_habit(
        request.animal_type,
        request.name,
        request.habit_description
    )


@router.get("/api/v1/animals/{animal_id}", response_model=Animal)
def get_animal(animal_id: str, service: FarmService = Depends(get_farm_service)):
    """Get one animal"""
    return _require_animal(service, animal_id)


@router.get("/api/v1/animals/{animal_id}/habit", response_model=Habit)
def get_animal_habit(animal_id: str, service: FarmService = Depends(get_farm_service)):
    """Get the habit paired with an animal"""
    habit = service.get_habit_by_animal_id(animal_id)
    if habit is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Habit for animal {animal_id} not found"
        )
    return habit


@router.get("/api/v1/animals/{animal_id}/can-check-in", response_model=CanCheckInResponse)
def can_check_in_endpoint(animal_id: str, service: FarmService = Depends(get_farm_service)):
    """Whether the animal can still check in today"""
    _require_animal(service, animal_id)
    return CanCheckInResponse(animal_id=animal_id, can_check_in=service.can_check_in(animal_id))


@router.post("/api/v1/animals/{animal_id}/check-in", response_model=CheckInResponse)
def check_in_endpoint(animal_id: str, service: FarmService = Depends(get_farm_service)):
    """Check in today's habit; a repeat on the same day earns nothing"""
    _require_animal(service, animal_id)
    result = service.check_in(animal_id)

    return CheckInResponse(
        animal_id=animal_id,
        coins_earned=result.coins_earned,
        xp_earned=result.xp_earned,
        leveled_up=result.leveled_up,
        animal=service.get_animal_by_id(animal_id)
    )


@router.post("/api/v1/coins/add", response_model=CoinsResponse)
def add_coins_endpoint(request: CoinsRequest, service: FarmService = Depends(get_farm_service)):
    """Credit coins"""
    service.add_coins(request.amount)
    user = service.repository.user
    return CoinsResponse(success=user is not None, coins=user.coins if user else 0)


@router.post("/api/v1/coins/spend", response_model=CoinsResponse)
def spend_coins_endpoint(request: CoinsRequest, service: FarmService = Depends(get_farm_service)):
    """Spend coins; refused without change if the balance is too low"""
    success = service.spend_coins(request.amount)
    user = service.repository.user
    return CoinsResponse(success=success, coins=user.coins if user else 0)


@router.get("/api/health", response_model=HealthCheckResponse)
async def health_check(request: Request):
    """Health check endpoint"""
    scheduler = getattr(request.app.state, "state_refresh_scheduler", None)
    scheduler_status = "running" if scheduler is not None and scheduler.running else "stopped"

    return HealthCheckResponse(
        status="healthy" if scheduler_status == "running" else "degraded",
        scheduler=scheduler_status,
        timestamp=datetime.now(timezone.utc)
    )
