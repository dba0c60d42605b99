# src/core/pricing/__init__.py
"""
Домен тарифов.
Региональные правила и расчёт стоимости поездки.
"""

from src.core.pricing.models import FALLBACK_RULE, FareQuoteDTO, PaymentSettings, PricingRule
from src.core.pricing.service import PricingEngine

__all__ = [
    "FALLBACK_RULE",
    "FareQuoteDTO",
    "PaymentSettings",
    "PricingRule",
    "PricingEngine",
]
