# src/core/users/__init__.py
"""
Домен пользователей.
Модели администратора, водителя и пассажира. Сервис: src.core.users.service.
"""

from src.core.users.models import Administrator, Driver, Rider, User, parse_user

__all__ = [
    "Administrator",
    "Driver",
    "Rider",
    "User",
    "parse_user",
]
