# src/core/pricing/models.py
"""
Модели тарифов и платёжных настроек.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr, field_validator

from src.common.constants import PaymentProvider, ServiceTier


DEFAULT_RULE_ID = "default"


class PricingRule(BaseModel):
    """Тарифное правило региона."""

    id: str = Field(..., min_length=1, description="Уникальный ID правила")
    region_name: str = Field(..., min_length=1, description="Название региона")
    base_price: float = Field(..., ge=0.0, description="Стоимость посадки")
    price_per_km: float = Field(..., ge=0.0, description="Стоимость километра")
    active: bool = Field(True, description="Участвует ли правило в поиске по региону")

    class Config:
        from_attributes = True


# Используется, если нет ни регионального, ни default правила
FALLBACK_RULE = PricingRule(
    id="fallback",
    region_name="Padrão",
    base_price=5.0,
    price_per_km=2.0,
)


class PaymentSettings(BaseModel):
    """
    Платёжные настройки процесса.
    Создаются при старте, меняются только администратором.
    """

    provider: PaymentProvider = Field(PaymentProvider.STRIPE, description="Платёжный провайдер")
    api_key: SecretStr = Field(SecretStr(""), description="Ключ провайдера")
    platform_commission: float = Field(15.0, ge=0.0, le=100.0, description="Комиссия платформы, %")
    pricing_rules: list[PricingRule] = Field(default_factory=list, description="Правила в порядке приоритета")

    class Config:
        validate_assignment = True

    @field_validator("pricing_rules")
    @classmethod
    def check_unique_ids(cls, rules: list[PricingRule]) -> list[PricingRule]:
        """Проверяет уникальность ID правил."""
        ids = [rule.id for rule in rules]
        duplicates = {rule_id for rule_id in ids if ids.count(rule_id) > 1}
        if duplicates:
            raise ValueError(f"Повторяющиеся ID тарифных правил: {sorted(duplicates)}")
        return rules

    @property
    def is_provider_configured(self) -> bool:
        """Задан ли ключ платёжного провайдера."""
        return bool(self.api_key.get_secret_value())

    @property
    def commission_rate(self) -> float:
        """Комиссия в долях единицы."""
        return self.platform_commission / 100


class FareQuoteDTO(BaseModel):
    """Тарифная сетка для пассажира: цена по каждому уровню обслуживания."""

    rule_id: str
    rule_name: str
    distance_km: float
    prices: dict[ServiceTier, float]
