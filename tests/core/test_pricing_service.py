# tests/core/test_pricing_service.py
"""
Тесты для калькулятора стоимости.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.common.constants import ServiceTier, VehicleType
from src.core.pricing.models import FALLBACK_RULE, PaymentSettings, PricingRule
from src.core.pricing.service import SERVICE_MULTIPLIERS, VEHICLE_MULTIPLIERS, PricingEngine


def _engine(rules: list[PricingRule]) -> PricingEngine:
    return PricingEngine(lambda: rules)


class TestResolveRule:
    """Тесты выбора тарифного правила."""

    def test_region_match_wins_over_default(self, pricing_rules: list[PricingRule]) -> None:
        """Совпадение региона важнее правила default."""
        rule = _engine(pricing_rules).resolve_rule("Praça da Sé, Centro Histórico")
        assert rule.id == "center"

    def test_match_is_case_insensitive(self, pricing_rules: list[PricingRule]) -> None:
        """Поиск региона без учёта регистра."""
        rule = _engine(pricing_rules).resolve_rule("rua direita, CENTRO HISTÓRICO")
        assert rule.id == "center"

    def test_unknown_destination_uses_default(self, pricing_rules: list[PricingRule]) -> None:
        """Без совпадения используется правило default."""
        rule = _engine(pricing_rules).resolve_rule("Unknown Place")
        assert rule.id == "default"

    def test_first_match_in_configured_order(self) -> None:
        """Из нескольких совпадений побеждает первое по порядку."""
        rules = [
            PricingRule(id="a", region_name="Centro", base_price=1.0, price_per_km=1.0),
            PricingRule(id="b", region_name="Centro Histórico", base_price=2.0, price_per_km=2.0),
        ]
        assert _engine(rules).resolve_rule("Centro Histórico").id == "a"

    def test_inactive_rule_is_skipped(self) -> None:
        """Неактивное правило не участвует в поиске по региону."""
        rules = [
            PricingRule(id="default", region_name="Geral", base_price=5.0, price_per_km=2.5),
            PricingRule(id="center", region_name="Centro", base_price=8.0, price_per_km=3.5, active=False),
        ]
        assert _engine(rules).resolve_rule("Centro").id == "default"

    def test_fallback_when_no_default(self) -> None:
        """Без default используется встроенное правило 5.0 + 2.0/км."""
        rules = [PricingRule(id="center", region_name="Centro", base_price=8.0, price_per_km=3.5)]
        rule = _engine(rules).resolve_rule("Somewhere else")

        assert rule is FALLBACK_RULE
        assert rule.base_price == 5.0
        assert rule.price_per_km == 2.0

    def test_fallback_on_empty_rules(self) -> None:
        """Пустой список правил даёт встроенное правило."""
        assert _engine([]).resolve_rule("Anywhere") is FALLBACK_RULE

    def test_rules_are_read_on_every_call(self) -> None:
        """Изменения списка правил видны без пересоздания движка."""
        rules: list[PricingRule] = []
        engine = _engine(rules)
        assert engine.resolve_rule("Centro") is FALLBACK_RULE

        rules.append(PricingRule(id="center", region_name="Centro", base_price=8.0, price_per_km=3.5))
        assert engine.resolve_rule("Centro").id == "center"


class TestQuote:
    """Тесты расчёта стоимости."""

    def test_center_car_economy(self, pricing_rules: list[PricingRule]) -> None:
        """8.00 + 3.50 * 4.8 = 24.80."""
        price = _engine(pricing_rules).quote("Centro Histórico", VehicleType.CAR, ServiceTier.ECONOMY, 4.8)
        assert price == pytest.approx(24.80)

    def test_unknown_place_motorcycle(self, pricing_rules: list[PricingRule]) -> None:
        """(5.00 + 2.50 * 4.8) * 1.0 * 0.65."""
        price = _engine(pricing_rules).quote("Unknown Place", VehicleType.MOTORCYCLE, ServiceTier.ECONOMY, 4.8)
        assert price == pytest.approx((5.00 + 2.50 * 4.8) * 0.65)
        assert price == pytest.approx(11.05)

    @pytest.mark.parametrize("tier,multiplier", [
        (ServiceTier.ECONOMY, 1.0),
        (ServiceTier.COMFORT, 1.3),
        (ServiceTier.PREMIUM, 1.8),
    ])
    def test_service_multipliers(
        self,
        pricing_rules: list[PricingRule],
        tier: ServiceTier,
        multiplier: float,
    ) -> None:
        """Множитель уровня обслуживания применяется к базовой стоимости."""
        price = _engine(pricing_rules).quote("Unknown Place", VehicleType.CAR, tier, 2.0)
        assert price == pytest.approx((5.0 + 2.5 * 2.0) * multiplier)

    def test_zero_distance_is_base_price(self, pricing_rules: list[PricingRule]) -> None:
        price = _engine(pricing_rules).quote("Centro Histórico", VehicleType.CAR, ServiceTier.ECONOMY, 0.0)
        assert price == pytest.approx(8.0)

    def test_negative_distance_rejected(self, pricing_rules: list[PricingRule]) -> None:
        with pytest.raises(ValueError):
            _engine(pricing_rules).quote("Centro", VehicleType.CAR, ServiceTier.ECONOMY, -1.0)

    def test_multiplier_tables(self) -> None:
        """Таблицы множителей покрывают все значения перечислений."""
        assert set(SERVICE_MULTIPLIERS) == set(ServiceTier)
        assert set(VEHICLE_MULTIPLIERS) == set(VehicleType)


class TestQuoteAllTiers:
    """Тесты тарифной сетки."""

    def test_prices_for_every_tier(self, pricing_rules: list[PricingRule]) -> None:
        quote = _engine(pricing_rules).quote_all_tiers("Centro Histórico", VehicleType.CAR, 4.8)

        assert quote.rule_id == "center"
        assert quote.rule_name == "Centro Histórico"
        assert quote.distance_km == 4.8
        assert quote.prices[ServiceTier.ECONOMY] == pytest.approx(24.80)
        assert quote.prices[ServiceTier.COMFORT] == pytest.approx(24.80 * 1.3)
        assert quote.prices[ServiceTier.PREMIUM] == pytest.approx(24.80 * 1.8)


class TestPaymentSettings:
    """Тесты модели платёжных настроек."""

    def test_defaults(self) -> None:
        settings = PaymentSettings()

        assert settings.platform_commission == 15.0
        assert settings.is_provider_configured is False
        assert settings.commission_rate == pytest.approx(0.15)

    def test_provider_configured_with_key(self) -> None:
        settings = PaymentSettings(api_key="sk_live_1")
        assert settings.is_provider_configured is True

    def test_api_key_is_not_exposed(self) -> None:
        settings = PaymentSettings(api_key="sk_live_1")
        assert "sk_live_1" not in repr(settings)

    @pytest.mark.parametrize("percent", [-1.0, 100.5])
    def test_commission_out_of_range(self, percent: float) -> None:
        with pytest.raises(ValidationError):
            PaymentSettings(platform_commission=percent)

    def test_duplicate_rule_ids_rejected(self) -> None:
        rule = PricingRule(id="x", region_name="X", base_price=1.0, price_per_km=1.0)
        with pytest.raises(ValidationError):
            PaymentSettings(pricing_rules=[rule, rule])
