# src/services/ride_api/__init__.py
"""
HTTP API ядра поездок.
"""

from src.services.ride_api.app import create_app

__all__ = [
    "create_app",
]
