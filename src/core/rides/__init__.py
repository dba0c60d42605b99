# src/core/rides/__init__.py
"""
Домен поездок.
Модели и машина состояний. Координатор: src.core.rides.service.
"""

from src.core.rides.models import ChatMessage, Location, Ride
from src.core.rides.state_machine import RideStateMachine

__all__ = [
    "ChatMessage",
    "Location",
    "Ride",
    "RideStateMachine",
]
