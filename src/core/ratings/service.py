# src/core/ratings/service.py
"""
Сервис оценок после поездки.
"""

from __future__ import annotations

from src.common.constants import TypeMsg, UserRole
from src.common.logger import log_error, log_info
from src.core.registry.repository import RideRegistry
from src.core.rides.models import Ride
from src.infra.event_bus import DomainEvent, EventBus, EventTypes


class RatingService:
    """
    Оценки принимаются при любом статусе поездки.
    Повторная оценка той же стороной перезаписывает предыдущую.
    """

    def __init__(self, registry: RideRegistry, event_bus: EventBus | None = None) -> None:
        self._registry = registry
        self._event_bus = event_bus

    async def rate(self, ride_id: str, value: float, rater_role: UserRole) -> Ride:
        """
        Сохраняет оценку.

        Args:
            ride_id: ID поездки
            value: Оценка от 1 до 5
            rater_role: Кто оценивает. Пассажир оценивает водителя, иначе оценка пассажиру.

        Returns:
            Обновлённая поездка

        Raises:
            NotFoundError: Поездка не найдена
            pydantic.ValidationError: Оценка вне диапазона 1..5
        """
        to_driver = UserRole(rater_role) == UserRole.RIDER

        def _rate(ride: Ride) -> None:
            if to_driver:
                ride.rating_to_driver = value
            else:
                ride.rating_to_rider = value

        ride = await self._registry.update_ride(ride_id, _rate)

        target = "водителю" if to_driver else "пассажиру"
        await log_info(f"Поездка {ride_id}: оценка {value} {target}", type_msg=TypeMsg.DEBUG)

        if self._event_bus is not None:
            try:
                await self._event_bus.publish(DomainEvent(
                    event_type=EventTypes.RIDE_RATED,
                    payload={
                        "ride_id": ride_id,
                        "rater_role": str(rater_role),
                        "value": value,
                    },
                ))
            except Exception as pub_error:
                await log_error(f"Не удалось опубликовать RIDE_RATED: {pub_error}")

        return ride
