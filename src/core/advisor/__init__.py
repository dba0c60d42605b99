# src/core/advisor/__init__.py
"""
Советник: тексты от внешней языковой модели.
"""

from src.core.advisor.service import AdvisorService

__all__ = [
    "AdvisorService",
]
