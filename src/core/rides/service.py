# src/core/rides/service.py
"""
Координатор поездок.
Приём заказа, назначение водителя, переходы статусов, отмена и чат.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

from src.common.constants import (
    PaymentMethod,
    RideStatus,
    ServiceTier,
    TypeMsg,
    UserRole,
    VehicleType,
)
from src.common.exceptions import (
    CategoryMismatchError,
    DuplicateAcceptanceError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NotFoundError,
    PaymentProviderNotConfiguredError,
)
from src.common.logger import log_error, log_info
from src.core.billing.service import SettlementEngine
from src.core.pricing.models import FareQuoteDTO
from src.core.pricing.service import PricingEngine
from src.core.registry.repository import RideRegistry
from src.core.rides.models import ChatMessage, Location, Ride
from src.core.rides.state_machine import RideStateMachine
from src.core.users.models import Driver, Rider
from src.infra.event_bus import DomainEvent, EventBus, EventTypes


class DispatchCoordinator:
    """
    Координатор жизненного цикла поездки.

    Статусы: REQUESTED -> ACCEPTED -> IN_PROGRESS -> COMPLETED,
    отмена возможна только из REQUESTED и ACCEPTED.
    """

    def __init__(
        self,
        registry: RideRegistry,
        pricing: PricingEngine,
        settlement: SettlementEngine,
        event_bus: EventBus | None = None,
        default_distance_km: float = 4.8,
    ) -> None:
        """
        Args:
            registry: Реестр поездок и пользователей
            pricing: Калькулятор стоимости
            settlement: Движок расчётов
            event_bus: Шина событий (опционально)
            default_distance_km: Расстояние, если вызывающий его не передал
        """
        self._registry = registry
        self._pricing = pricing
        self._settlement = settlement
        self._event_bus = event_bus
        self._default_distance_km = default_distance_km

    async def _publish(self, event_type: str, payload: dict[str, Any]) -> None:
        if self._event_bus is None:
            return
        try:
            await self._event_bus.publish(DomainEvent(event_type=event_type, payload=payload))
        except Exception as pub_error:
            await log_error(f"Не удалось опубликовать {event_type}: {pub_error}")

    def _get_rider(self, rider_id: str) -> Rider:
        user = self._registry.get_user(rider_id)
        if not isinstance(user, Rider):
            raise NotFoundError("rider", rider_id)
        return user

    def _get_driver(self, driver_id: str) -> Driver:
        user = self._registry.get_user(driver_id)
        if not isinstance(user, Driver):
            raise NotFoundError("driver", driver_id)
        return user

    # =========================================================================
    # ЖИЗНЕННЫЙ ЦИКЛ
    # =========================================================================

    async def request_ride(
        self,
        rider_id: str,
        origin: Location,
        destination: Location,
        payment_method: PaymentMethod,
        vehicle_type: VehicleType,
        service_tier: ServiceTier,
        distance_km: Optional[float] = None,
    ) -> Ride:
        """
        Создаёт заказ поездки по цене, рассчитанной в момент запроса.

        Args:
            rider_id: ID пассажира
            origin: Точка подачи
            destination: Точка назначения
            payment_method: Способ оплаты
            vehicle_type: Категория транспорта
            service_tier: Уровень обслуживания
            distance_km: Расстояние маршрута (по умолчанию из конфига)

        Returns:
            Созданная поездка в статусе REQUESTED

        Raises:
            NotFoundError: Пассажир не найден
            PaymentProviderNotConfiguredError: Кошелёк недоступен без провайдера
            InsufficientBalanceError: Баланс кошелька меньше стоимости
        """
        rider = self._get_rider(rider_id)
        distance = self._default_distance_km if distance_km is None else distance_km

        price = self._pricing.quote(destination.address, vehicle_type, service_tier, distance)

        if payment_method == PaymentMethod.PREPAID_WALLET:
            if not self._registry.get_payment_settings().is_provider_configured:
                raise PaymentProviderNotConfiguredError(
                    "Оплата кошельком недоступна: платёжный провайдер не настроен"
                )
            if rider.wallet_balance < price:
                raise InsufficientBalanceError(rider_id, rider.wallet_balance, price)

        ride = await self._registry.insert_ride(Ride(
            rider_id=rider_id,
            origin=origin,
            destination=destination,
            status=RideStatus.REQUESTED,
            price=price,
            payment_method=payment_method,
            vehicle_type=vehicle_type,
            service_tier=service_tier,
            distance_km=distance,
        ))

        await log_info(
            f"Поездка {ride.id} заказана пассажиром {rider_id}: {ride.price:.2f}",
            type_msg=TypeMsg.INFO,
        )
        await self._publish(EventTypes.RIDE_REQUESTED, {
            "ride_id": ride.id,
            "rider_id": rider_id,
            "vehicle_type": vehicle_type.value,
            "price": ride.price,
        })
        return ride

    async def accept_ride(self, ride_id: str, driver_id: str) -> Ride:
        """
        Водитель принимает заказ. Побеждает первая успешная запись.

        Raises:
            NotFoundError: Поездка или водитель не найдены
            DuplicateAcceptanceError: Водитель уже назначен
            InvalidTransitionError: Поездка не в статусе REQUESTED
            CategoryMismatchError: Категория транспорта не совпадает
        """
        driver = self._get_driver(driver_id)
        accepted_at = datetime.now(timezone.utc)

        def _assign(ride: Ride) -> None:
            if ride.driver_id is not None:
                raise DuplicateAcceptanceError(ride.id, ride.driver_id)
            RideStateMachine.ensure_transition(ride.id, ride.status, RideStatus.ACCEPTED)
            if ride.vehicle_type != driver.vehicle_type:
                raise CategoryMismatchError(ride.id, ride.vehicle_type, driver.vehicle_type)
            ride.driver_id = driver_id
            ride.status = RideStatus.ACCEPTED
            ride.accepted_at = accepted_at

        ride = await self._registry.update_ride(ride_id, _assign)

        await log_info(f"Поездка {ride_id} принята водителем {driver_id}", type_msg=TypeMsg.INFO)
        await self._publish(EventTypes.RIDE_ACCEPTED, {
            "ride_id": ride_id,
            "driver_id": driver_id,
            "rider_id": ride.rider_id,
        })
        return ride

    async def advance(self, ride_id: str, target_status: RideStatus, acting_driver_id: str) -> Ride:
        """
        Продвигает поездку вперёд: ACCEPTED -> IN_PROGRESS -> COMPLETED.
        Переход в COMPLETED проводит расчёт до возврата.

        Raises:
            NotFoundError: Поездка не найдена
            InvalidTransitionError: Переход не разрешён или водитель не назначен на поездку
        """
        target = RideStatus(target_status)
        changed_at = datetime.now(timezone.utc)
        previous: dict[str, RideStatus] = {}

        def _advance(ride: Ride) -> None:
            if target not in RideStateMachine.DRIVER_TARGETS:
                raise InvalidTransitionError(ride.id, ride.status, target)
            if ride.driver_id != acting_driver_id:
                raise InvalidTransitionError(
                    ride.id, ride.status, target, f"водитель {acting_driver_id} не назначен на поездку"
                )
            RideStateMachine.ensure_transition(ride.id, ride.status, target)
            previous["status"] = ride.status
            ride.status = target
            if target == RideStatus.IN_PROGRESS:
                ride.started_at = changed_at
            else:
                ride.completed_at = changed_at

        ride = await self._registry.update_ride(ride_id, _advance)

        if target == RideStatus.COMPLETED:
            # Расчёт идёт до публикации событий и не прерывается отменой вызывающего
            await asyncio.shield(self._settlement.settle(ride))
            ride = self._registry.get_ride(ride_id)

        await log_info(
            f"Поездка {ride_id}: {previous['status'].value} -> {target.value}",
            type_msg=TypeMsg.INFO,
        )
        await self._publish(EventTypes.RIDE_STATUS_CHANGED, {
            "ride_id": ride_id,
            "old_status": previous["status"].value,
            "new_status": target.value,
            "driver_id": acting_driver_id,
        })

        if target == RideStatus.COMPLETED:
            await self._publish(EventTypes.RIDE_COMPLETED, {
                "ride_id": ride_id,
                "driver_id": ride.driver_id,
                "rider_id": ride.rider_id,
                "price": ride.price,
            })

        return ride

    async def cancel(self, ride_id: str, cancelled_by: UserRole = UserRole.RIDER) -> Ride:
        """
        Отменяет поездку до начала движения.

        Raises:
            NotFoundError: Поездка не найдена
            InvalidTransitionError: Поездка уже в пути или завершена
        """
        cancelled_at = datetime.now(timezone.utc)

        def _cancel(ride: Ride) -> None:
            RideStateMachine.ensure_transition(ride.id, ride.status, RideStatus.CANCELLED)
            ride.status = RideStatus.CANCELLED
            ride.cancelled_at = cancelled_at

        ride = await self._registry.update_ride(ride_id, _cancel)

        await log_info(f"Поездка {ride_id} отменена ({cancelled_by})", type_msg=TypeMsg.INFO)
        await self._publish(EventTypes.RIDE_CANCELLED, {
            "ride_id": ride_id,
            "driver_id": ride.driver_id,
            "rider_id": ride.rider_id,
            "cancelled_by": str(cancelled_by),
        })
        return ride

    # =========================================================================
    # ЧАТ
    # =========================================================================

    async def append_message(self, ride_id: str, sender_id: str, text: str) -> ChatMessage:
        """
        Дописывает сообщение в чат поездки. Текст не интерпретируется.

        Raises:
            NotFoundError: Поездка не найдена
        """
        message = ChatMessage(sender_id=sender_id, text=text)

        def _append(ride: Ride) -> None:
            ride.messages = [*ride.messages, message]

        ride = await self._registry.update_ride(ride_id, _append)

        await self._publish(EventTypes.RIDE_MESSAGE_APPENDED, {
            "ride_id": ride_id,
            "message_id": message.id,
            "sender_id": sender_id,
            "recipients": [uid for uid in (ride.rider_id, ride.driver_id) if uid and uid != sender_id],
        })
        return message

    # =========================================================================
    # ЗАПРОСЫ
    # =========================================================================

    def get_ride(self, ride_id: str) -> Ride:
        return self._registry.get_ride(ride_id)

    def quote_fares(
        self,
        destination: str,
        vehicle_type: VehicleType,
        distance_km: Optional[float] = None,
    ) -> FareQuoteDTO:
        """Цены по всем уровням обслуживания до заказа."""
        distance = self._default_distance_km if distance_km is None else distance_km
        return self._pricing.quote_all_tiers(destination, vehicle_type, distance)

    def rides_visible_to_driver(self, driver_id: str) -> list[Ride]:
        """Ожидающие заказы категории водителя и его собственные активные поездки."""
        driver = self._get_driver(driver_id)
        pending = self._registry.list_pending(driver.vehicle_type)
        own = [ride for ride in self._registry.list_by_driver(driver_id) if ride.is_active]
        return pending + own

    def rides_for_rider(self, rider_id: str) -> list[Ride]:
        """Все поездки пассажира, новые первыми."""
        return self._registry.list_by_rider(rider_id)

    def active_ride_for_rider(self, rider_id: str) -> Optional[Ride]:
        return next((ride for ride in self.rides_for_rider(rider_id) if ride.is_active), None)
