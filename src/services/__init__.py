"""
Service Layer Package

Business logic between the presentation layer (HTTP routes, UI) and the
entity repository.

Core Services:
- FarmService: user lifecycle, animal/habit creation, check-ins, state refresh, coins
"""

from src.services.farm_service import FarmService, KeyedLocks

__all__ = [
    "FarmService",
    "KeyedLocks",
]
