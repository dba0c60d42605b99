# src/core/billing/service.py
"""
Сервис биллинга.
Расчёт по завершённой поездке: комиссия платформы, заработок водителя,
списание с предоплаченного кошелька.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from src.common.constants import PaymentMethod, RideStatus, TypeMsg
from src.common.exceptions import InvalidTransitionError, NotFoundError
from src.common.logger import log_error, log_info, log_warning
from src.core.registry.repository import RideRegistry, UserModel
from src.core.rides.models import Ride
from src.core.users.models import Driver, Rider
from src.infra.event_bus import DomainEvent, EventBus, EventTypes


@dataclass
class SettlementResult:
    """Результат расчёта по поездке."""
    ride_id: str
    applied: bool
    price: float = 0.0
    commission: float = 0.0
    driver_share: float = 0.0
    driver_credited: bool = False
    wallet_debited: bool = False


@dataclass
class EarningsReport:
    """Сводка заработка водителя по завершённым поездкам."""
    driver_id: str
    completed_rides: int
    gross: float
    commission: float
    net: float
    rides_today: int
    rides_week: int
    rides_month: int


class SettlementEngine:
    """
    Движок расчётов.

    settle вызывается переходом IN_PROGRESS -> COMPLETED. Поле settled_at
    поездки захватывается под блокировкой поездки, поэтому повторный вызов
    ничего не начисляет.
    """

    def __init__(self, registry: RideRegistry, event_bus: EventBus | None = None) -> None:
        """
        Args:
            registry: Реестр поездок и пользователей
            event_bus: Шина событий (опционально)
        """
        self._registry = registry
        self._event_bus = event_bus

    async def settle(self, ride: Ride) -> SettlementResult:
        """
        Проводит расчёт по завершённой поездке.

        Args:
            ride: Поездка в статусе COMPLETED

        Returns:
            Результат расчёта (applied=False при повторном вызове)
        """
        claimed = False
        settled_at = datetime.now(timezone.utc)

        def _claim(current: Ride) -> None:
            nonlocal claimed
            if current.status != RideStatus.COMPLETED:
                raise InvalidTransitionError(
                    current.id, current.status, RideStatus.COMPLETED, "расчёт только для завершённой поездки"
                )
            if current.settled_at is None:
                current.settled_at = settled_at
                claimed = True

        ride = await self._registry.update_ride(ride.id, _claim)

        if not claimed:
            await log_warning(f"Поездка {ride.id}: расчёт уже проведён, повторный вызов пропущен")
            return SettlementResult(ride_id=ride.id, applied=False, price=ride.price)

        commission_rate = self._registry.get_payment_settings().commission_rate
        commission = ride.price * commission_rate
        driver_share = ride.price * (1 - commission_rate)

        driver_credited = await self._credit_driver(ride, driver_share)
        wallet_debited = False
        if ride.payment_method == PaymentMethod.PREPAID_WALLET:
            wallet_debited = await self._debit_wallet(ride)

        result = SettlementResult(
            ride_id=ride.id,
            applied=True,
            price=ride.price,
            commission=commission,
            driver_share=driver_share,
            driver_credited=driver_credited,
            wallet_debited=wallet_debited,
        )

        await log_info(
            f"Расчёт по поездке {ride.id}: сумма {ride.price:.2f}, водителю {driver_share:.2f}, "
            f"комиссия {commission:.2f}",
            type_msg=TypeMsg.INFO,
        )

        if self._event_bus is not None:
            try:
                await self._event_bus.publish(DomainEvent(
                    event_type=EventTypes.PAYMENT_SETTLED,
                    payload={
                        "ride_id": ride.id,
                        "driver_id": ride.driver_id,
                        "rider_id": ride.rider_id,
                        "price": ride.price,
                        "commission": commission,
                        "driver_share": driver_share,
                        "payment_method": ride.payment_method.value,
                        "wallet_debited": wallet_debited,
                    },
                ))
            except Exception as pub_error:
                await log_error(f"Не удалось опубликовать PAYMENT_SETTLED: {pub_error}")

        return result

    async def _credit_driver(self, ride: Ride, amount: float) -> bool:
        """Начисляет долю водителю."""
        if ride.driver_id is None:
            await log_warning(f"Поездка {ride.id} завершена без водителя, начисление пропущено")
            return False

        def _credit(user: UserModel) -> None:
            if not isinstance(user, Driver):
                raise NotFoundError("driver", user.id)
            user.earnings = user.earnings + amount

        try:
            await self._registry.update_user(ride.driver_id, _credit)
        except NotFoundError:
            await log_error(f"Поездка {ride.id}: водитель {ride.driver_id} не найден, начисление пропущено")
            return False
        return True

    async def _debit_wallet(self, ride: Ride) -> bool:
        """Списывает полную стоимость с кошелька без повторной проверки баланса."""

        def _debit(user: UserModel) -> None:
            if not isinstance(user, Rider):
                raise NotFoundError("rider", user.id)
            user.wallet_balance = user.wallet_balance - ride.price

        try:
            await self._registry.update_user(ride.rider_id, _debit)
        except NotFoundError:
            await log_error(f"Поездка {ride.id}: пассажир {ride.rider_id} не найден, списание пропущено")
            return False
        return True

    # =========================================================================
    # ОТЧЁТЫ
    # =========================================================================

    def driver_earnings_report(self, driver_id: str, now: Optional[datetime] = None) -> EarningsReport:
        """
        Сводка заработка водителя по текущей комиссии.
        Неделя начинается с воскресенья.

        Raises:
            NotFoundError: Водитель не найден
        """
        driver = self._registry.get_user(driver_id)
        if not isinstance(driver, Driver):
            raise NotFoundError("driver", driver_id)

        now = now or datetime.now(timezone.utc)
        commission_rate = self._registry.get_payment_settings().commission_rate

        completed = [
            ride for ride in self._registry.list_by_driver(driver_id)
            if ride.status == RideStatus.COMPLETED
        ]

        gross = sum(ride.price for ride in completed)
        net = sum(ride.price * (1 - commission_rate) for ride in completed)

        today = now.date()
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)
        month_start = today.replace(day=1)
        dates = [ride.created_at.astimezone(now.tzinfo or timezone.utc).date() for ride in completed]

        return EarningsReport(
            driver_id=driver_id,
            completed_rides=len(completed),
            gross=gross,
            commission=gross - net,
            net=net,
            rides_today=sum(1 for d in dates if d == today),
            rides_week=sum(1 for d in dates if d >= week_start),
            rides_month=sum(1 for d in dates if d >= month_start),
        )
