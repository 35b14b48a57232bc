"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.api.routes import router
from src.api.middleware import setup_cors
from src.config import STATE_REFRESH_INTERVAL_SECONDS
from src.db.repository import FarmRepository
from src.db.snapshot_store import SnapshotStore
from src.exceptions import HabitFarmError, IntegrityError, ValidationError
from src.scheduler.state_refresh import StateRefreshScheduler
from src.services.farm_service import FarmService

logger = logging.getLogger(__name__)


def create_farm_service(store: Optional[SnapshotStore] = None) -> FarmService:
    """
    Load the persisted farm and wire save-on-commit

    Raises:
        IntegrityError: The stored snapshot pairs animals and habits inconsistently
    """
    store = store or SnapshotStore()
    repository = FarmRepository(store.load())
    repository.subscribe(store.save)
    return FarmService(repository)


def create_api_application(
    service: Optional[FarmService] = None,
    store: Optional[SnapshotStore] = None,
    refresh_interval: float = STATE_REFRESH_INTERVAL_SECONDS,
) -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for FastAPI application"""
        # Startup
        logger.info("Starting farm API server...")
        app.state.farm_service = service or create_farm_service(store)
        app.state.farm_service.initialize_user()

        scheduler = StateRefreshScheduler(app.state.farm_service, interval=refresh_interval)
        app.state.state_refresh_scheduler = scheduler
        await scheduler.start()

        yield

        # Shutdown
        logger.info("Shutting down farm API server...")
        await scheduler.stop()

    app = FastAPI(
        title="Cozy Habit Farm API",
        description="Progression engine for habit companions",
        version="1.0.0",
        lifespan=lifespan
    )

    setup_cors(app)
    app.include_router(router)

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content=exc.to_dict())

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError):
        return JSONResponse(status_code=500, content=exc.to_dict())

    @app.exception_handler(HabitFarmError)
    async def farm_exception_handler(request: Request, exc: HabitFarmError):
        return JSONResponse(status_code=500, content=exc.to_dict())

    logger.info("FastAPI application created")

    return app
