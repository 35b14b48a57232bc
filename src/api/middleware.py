"""API middleware for CORS"""
import logging
from fastapi.middleware.cors import CORSMiddleware

from src.config import CORS_ORIGINS

logger = logging.getLogger(__name__)


def setup_cors(app):
    """Configure CORS middleware so a local UI can talk to the farm"""
    cors_origins = [origin.strip() for origin in CORS_ORIGINS.split(",") if origin.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info(f"CORS configured for origins: {cors_origins}")
