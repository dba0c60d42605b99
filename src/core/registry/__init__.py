# src/core/registry/__init__.py
"""
Реестр поездок, пользователей и платёжных настроек.
"""

from src.core.registry.repository import RideRegistry

__all__ = [
    "RideRegistry",
]
