# src/core/ratings/__init__.py
"""
Домен оценок.
"""

from src.core.ratings.service import RatingService

__all__ = [
    "RatingService",
]
