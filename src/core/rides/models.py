# src/core/rides/models.py
"""
Модели данных поездок.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from src.common.constants import PaymentMethod, RideStatus, ServiceTier, VehicleType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Location(BaseModel):
    """Точка маршрута."""

    lat: float = Field(0.0, ge=-90, le=90)
    lng: float = Field(0.0, ge=-180, le=180)
    address: str = Field(..., description="Адрес в свободной форме")

    class Config:
        from_attributes = True


class ChatMessage(BaseModel):
    """Сообщение чата поездки. Содержимое ядро не интерпретирует."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    sender_id: str
    text: str
    timestamp: datetime = Field(default_factory=_utcnow)


class Ride(BaseModel):
    """Модель поездки."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="UUID поездки")
    rider_id: str = Field(..., description="ID пассажира")
    driver_id: Optional[str] = Field(None, description="ID водителя")

    origin: Location
    destination: Location

    status: RideStatus = Field(RideStatus.REQUESTED, description="Статус поездки")
    price: float = Field(..., ge=0.0, description="Стоимость, фиксируется при заказе")
    payment_method: PaymentMethod = Field(PaymentMethod.CARD, description="Способ оплаты")
    vehicle_type: VehicleType = Field(VehicleType.CAR, description="Запрошенная категория")
    service_tier: ServiceTier = Field(ServiceTier.ECONOMY, description="Уровень обслуживания")
    distance_km: float = Field(0.0, ge=0.0, description="Расстояние в км")

    # Временные метки
    created_at: datetime = Field(default_factory=_utcnow, description="Время создания")
    accepted_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    settled_at: Optional[datetime] = Field(None, description="Время проведения расчёта")

    # Оценки после поездки
    rating_to_driver: Optional[float] = Field(None, ge=1.0, le=5.0, description="Оценка водителю")
    rating_to_rider: Optional[float] = Field(None, ge=1.0, le=5.0, description="Оценка пассажиру")

    messages: list[ChatMessage] = Field(default_factory=list, description="Чат, только дописывается")

    class Config:
        from_attributes = True
        validate_assignment = True

    @property
    def is_terminal(self) -> bool:
        """Завершена или отменена."""
        return self.status in (RideStatus.COMPLETED, RideStatus.CANCELLED)

    @property
    def is_active(self) -> bool:
        """Поездка ещё не завершена."""
        return not self.is_terminal

    @property
    def is_settled(self) -> bool:
        return self.settled_at is not None
