# src/core/admin/service.py
"""
Сервис администратора.
Платёжные настройки, тарифные правила и финансовая сводка.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4

from pydantic import SecretStr

from src.common.constants import PaymentProvider, RideStatus, TypeMsg, UserRole
from src.common.exceptions import DuplicateRuleError, NotFoundError
from src.common.logger import log_info
from src.core.advisor.service import BRIEFING_ERROR_FALLBACK, AdvisorService
from src.core.pricing.models import PaymentSettings, PricingRule
from src.core.registry.repository import RideRegistry


@dataclass
class DriverFinanceRow:
    """Строка финансовой сводки по водителю."""
    driver_id: str
    name: str
    phone: str
    total_rides: int
    gross: float
    commission: float
    net: float


@dataclass
class FinanceOverview:
    """Финансовая сводка платформы по завершённым поездкам."""
    total_revenue: float
    platform_earnings: float
    driver_payouts: float
    commission_percent: float
    completed_rides: int
    active_rides: int
    riders: int
    drivers: int
    total_users: int
    driver_rows: list[DriverFinanceRow] = field(default_factory=list)


class AdminService:
    """Административные операции над настройками процесса."""

    def __init__(self, registry: RideRegistry, advisor: Optional[AdvisorService] = None) -> None:
        """
        Args:
            registry: Реестр поездок и пользователей
            advisor: Советник для операционной сводки (опционально)
        """
        self._registry = registry
        self._advisor = advisor

    def get_payment_settings(self) -> PaymentSettings:
        return self._registry.get_payment_settings()

    # =========================================================================
    # ПЛАТЁЖНЫЕ НАСТРОЙКИ
    # =========================================================================

    async def set_commission(self, percent: float) -> PaymentSettings:
        """
        Меняет комиссию платформы. Уже проведённые расчёты не пересчитываются.

        Raises:
            pydantic.ValidationError: Значение вне диапазона 0..100
        """

        def _set(current: PaymentSettings) -> None:
            current.platform_commission = percent

        updated = await self._registry.update_payment_settings(_set)
        await log_info(f"Комиссия платформы: {updated.platform_commission}%", type_msg=TypeMsg.INFO)
        return updated

    async def configure_payment_provider(self, provider: PaymentProvider, api_key: str) -> PaymentSettings:
        """
        Сохраняет провайдера и ключ. Пустой ключ выключает оплату кошельком.
        """

        def _configure(current: PaymentSettings) -> None:
            current.provider = PaymentProvider(provider)
            current.api_key = SecretStr(api_key)

        updated = await self._registry.update_payment_settings(_configure)
        state = "настроен" if updated.is_provider_configured else "не настроен"
        await log_info(f"Платёжный провайдер {updated.provider}: {state}", type_msg=TypeMsg.INFO)
        return updated

    # =========================================================================
    # ТАРИФЫ
    # =========================================================================

    async def add_pricing_rule(
        self,
        region_name: str,
        base_price: float,
        price_per_km: float,
        active: bool = True,
        rule_id: Optional[str] = None,
    ) -> PricingRule:
        """
        Добавляет правило в конец списка (самый низкий приоритет).

        Raises:
            ValueError: Пустое название или неположительные тарифы
            DuplicateRuleError: Правило с таким ID уже есть
        """
        if not region_name.strip() or base_price <= 0 or price_per_km <= 0:
            raise ValueError("Название региона и положительные тарифы обязательны")

        rule = PricingRule(
            id=rule_id or f"rule-{uuid4().hex[:8]}",
            region_name=region_name.strip(),
            base_price=base_price,
            price_per_km=price_per_km,
            active=active,
        )

        def _add(current: PaymentSettings) -> None:
            if any(existing.id == rule.id for existing in current.pricing_rules):
                raise DuplicateRuleError(rule.id)
            current.pricing_rules = [*current.pricing_rules, rule]

        await self._registry.update_payment_settings(_add)
        await log_info(
            f"Тарифное правило добавлено: {rule.id} ({rule.region_name} {rule.base_price}/{rule.price_per_km})",
            type_msg=TypeMsg.INFO,
        )
        return rule

    async def remove_pricing_rule(self, rule_id: str) -> None:
        """
        Удаляет правило. Уже заказанные поездки сохраняют свою цену.

        Raises:
            NotFoundError: Правило не найдено
        """

        def _remove(current: PaymentSettings) -> None:
            remaining = [rule for rule in current.pricing_rules if rule.id != rule_id]
            if len(remaining) == len(current.pricing_rules):
                raise NotFoundError("pricing_rule", rule_id)
            current.pricing_rules = remaining

        await self._registry.update_payment_settings(_remove)
        await log_info(f"Тарифное правило удалено: {rule_id}", type_msg=TypeMsg.INFO)

    # =========================================================================
    # ФИНАНСЫ
    # =========================================================================

    def finance_overview(self) -> FinanceOverview:
        """Выручка, доход платформы и выплаты водителям по текущей комиссии."""
        rides = self._registry.list_rides()
        users = self._registry.list_users()
        percent = self._registry.get_payment_settings().platform_commission
        rate = percent / 100

        completed = [ride for ride in rides if ride.status == RideStatus.COMPLETED]
        total_revenue = sum(ride.price for ride in completed)
        platform_earnings = total_revenue * rate

        rows = []
        for user in users:
            if user.role != UserRole.DRIVER:
                continue
            driver_rides = [ride for ride in completed if ride.driver_id == user.id]
            gross = sum(ride.price for ride in driver_rides)
            commission = gross * rate
            rows.append(DriverFinanceRow(
                driver_id=user.id,
                name=user.name,
                phone=user.phone,
                total_rides=len(driver_rides),
                gross=gross,
                commission=commission,
                net=gross - commission,
            ))

        return FinanceOverview(
            total_revenue=total_revenue,
            platform_earnings=platform_earnings,
            driver_payouts=total_revenue - platform_earnings,
            commission_percent=percent,
            completed_rides=len(completed),
            active_rides=sum(1 for ride in rides if ride.is_active),
            riders=sum(1 for user in users if user.role == UserRole.RIDER),
            drivers=len(rows),
            total_users=len(users),
            driver_rows=rows,
        )

    async def briefing(self) -> str:
        """Операционная сводка от советника. Без советника возвращает статический текст."""
        overview = self.finance_overview()
        if self._advisor is None:
            return BRIEFING_ERROR_FALLBACK
        return await self._advisor.admin_briefing(overview.active_rides, overview.total_revenue)
