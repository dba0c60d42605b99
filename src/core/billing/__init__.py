# src/core/billing/__init__.py
"""
Домен биллинга.
Расчёт по завершённым поездкам и отчёты о заработке.
"""

from src.core.billing.service import EarningsReport, SettlementEngine, SettlementResult

__all__ = [
    "EarningsReport",
    "SettlementEngine",
    "SettlementResult",
]
