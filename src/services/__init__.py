# src/services/__init__.py
"""
HTTP сервисы приложения.

Сервисы:
- ride_api: поездки, пользователи, администрирование поверх ядра (FastAPI)
"""

__all__: list[str] = []
