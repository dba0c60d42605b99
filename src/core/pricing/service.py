# src/core/pricing/service.py
"""
Сервис расчёта стоимости поездки по региональным тарифам.
"""

from __future__ import annotations

from typing import Callable, Sequence

from src.common.constants import ServiceTier, VehicleType
from src.core.pricing.models import (
    DEFAULT_RULE_ID,
    FALLBACK_RULE,
    FareQuoteDTO,
    PricingRule,
)


SERVICE_MULTIPLIERS: dict[ServiceTier, float] = {
    ServiceTier.ECONOMY: 1.0,
    ServiceTier.COMFORT: 1.3,
    ServiceTier.PREMIUM: 1.8,
}

VEHICLE_MULTIPLIERS: dict[VehicleType, float] = {
    VehicleType.MOTORCYCLE: 0.65,
    VehicleType.CAR: 1.0,
}


class PricingEngine:
    """
    Калькулятор стоимости.

    Правило выбирается линейно: первое активное правило, название региона
    которого входит в адрес назначения (без учёта регистра), иначе правило
    с ID "default", иначе встроенный FALLBACK_RULE (5.0 + 2.0/км).
    Уровень обслуживания или категория вне таблиц множителей дают множитель 1.0.
    """

    def __init__(self, rules_source: Callable[[], Sequence[PricingRule]]) -> None:
        """
        Args:
            rules_source: Возвращает актуальный упорядоченный список правил
        """
        self._rules_source = rules_source

    def resolve_rule(self, destination: str) -> PricingRule:
        """
        Находит тарифное правило для адреса назначения.

        Args:
            destination: Адрес назначения в свободной форме

        Returns:
            Применимое правило
        """
        rules = list(self._rules_source())
        destination_lower = destination.lower()

        for rule in rules:
            if rule.active and rule.region_name.lower() in destination_lower:
                return rule

        for rule in rules:
            if rule.id == DEFAULT_RULE_ID:
                return rule

        return FALLBACK_RULE

    @staticmethod
    def calculate(
        rule: PricingRule,
        vehicle_type: VehicleType,
        service_tier: ServiceTier,
        distance_km: float,
    ) -> float:
        """(base + per_km * distance) * множитель уровня * множитель категории."""
        if distance_km < 0:
            raise ValueError(f"Расстояние не может быть отрицательным: {distance_km}")

        service_multiplier = SERVICE_MULTIPLIERS.get(service_tier, 1.0)
        vehicle_multiplier = VEHICLE_MULTIPLIERS.get(vehicle_type, 1.0)

        return (rule.base_price + rule.price_per_km * distance_km) * service_multiplier * vehicle_multiplier

    def quote(
        self,
        destination: str,
        vehicle_type: VehicleType,
        service_tier: ServiceTier,
        distance_km: float,
    ) -> float:
        """
        Рассчитывает стоимость поездки.

        Args:
            destination: Адрес назначения
            vehicle_type: Категория транспорта
            service_tier: Уровень обслуживания
            distance_km: Расстояние в км (задаётся снаружи)

        Returns:
            Стоимость поездки
        """
        rule = self.resolve_rule(destination)
        return self.calculate(rule, vehicle_type, service_tier, distance_km)

    def quote_all_tiers(
        self,
        destination: str,
        vehicle_type: VehicleType,
        distance_km: float,
    ) -> FareQuoteDTO:
        """Тарифная сетка по всем уровням обслуживания для одного правила."""
        rule = self.resolve_rule(destination)
        return FareQuoteDTO(
            rule_id=rule.id,
            rule_name=rule.region_name,
            distance_km=distance_km,
            prices={
                tier: self.calculate(rule, vehicle_type, tier, distance_km)
                for tier in ServiceTier
            },
        )
