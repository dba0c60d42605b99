# src/core/__init__.py
"""
Доменный слой (Core Domain).
Чистая бизнес-логика, независимая от инфраструктуры.
"""

from src.core.pricing import PricingEngine
from src.core.registry import RideRegistry
from src.core.rides.service import DispatchCoordinator
from src.core.billing import SettlementEngine
from src.core.ratings import RatingService
from src.core.users.service import UserService

__all__ = [
    "PricingEngine",
    "RideRegistry",
    "DispatchCoordinator",
    "SettlementEngine",
    "RatingService",
    "UserService",
]
