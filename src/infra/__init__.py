# src/infra/__init__.py
"""
Инфраструктурный слой.
Шина доменных событий внутри процесса.
"""

from src.infra.event_bus import DomainEvent, EventBus, EventTypes

__all__ = [
    "DomainEvent",
    "EventBus",
    "EventTypes",
]
