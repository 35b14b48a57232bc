"""Configuration management"""
import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from dotenv import load_dotenv

load_dotenv()

# Storage
# The whole farm snapshot lives in a single namespaced slot: <DATA_PATH>/<STORAGE_KEY>.json
DATA_PATH: Path = Path(os.getenv("DATA_PATH", "./data"))
STORAGE_KEY: str = os.getenv("STORAGE_KEY", "cozy-habit-farm-storage")

# Progression
STATE_REFRESH_INTERVAL_SECONDS: int = int(os.getenv("STATE_REFRESH_INTERVAL_SECONDS", "60"))

# Calendar days are truncated in this zone (the original app used UTC day strings)
FARM_TIMEZONE: str = os.getenv("FARM_TIMEZONE", "UTC")

# API
API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
API_PORT: int = int(os.getenv("API_PORT", "8080"))
CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


def snapshot_path(data_path: Path = DATA_PATH, storage_key: str = STORAGE_KEY) -> Path:
    """Location of the persisted farm snapshot"""
    return data_path / f"{storage_key}.json"


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if not STORAGE_KEY:
        raise ValueError("STORAGE_KEY is required")
    if STATE_REFRESH_INTERVAL_SECONDS <= 0:
        raise ValueError("STATE_REFRESH_INTERVAL_SECONDS must be positive")
    try:
        ZoneInfo(FARM_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"FARM_TIMEZONE '{FARM_TIMEZONE}' is not a valid IANA timezone") from e
