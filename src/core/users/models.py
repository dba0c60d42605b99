# src/core/users/models.py
"""
Модели данных пользователей.
Роль задаёт класс: у каждого варианта только свои поля.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field, TypeAdapter

from src.common.constants import UserRole, VehicleType


class BaseUser(BaseModel):
    """Общие поля пользователя."""

    id: str = Field(default_factory=lambda: f"u-{uuid4().hex[:12]}", description="ID пользователя")
    name: str = Field(..., min_length=1, description="Имя")
    email: str = Field("", description="Email")
    phone: str = Field("", description="Телефон")
    avatar: Optional[str] = Field(None, description="URL аватара")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        from_attributes = True
        validate_assignment = True

    @property
    def user_role(self) -> UserRole:
        """Роль в виде перечисления."""
        return UserRole(self.role)


class Administrator(BaseUser):
    """Администратор платформы."""

    role: Literal["admin"] = "admin"


class Driver(BaseUser):
    """Водитель."""

    role: Literal["driver"] = "driver"

    vehicle_type: VehicleType = Field(VehicleType.CAR, description="Категория транспорта")
    vehicle_model: str = Field("", description="Модель автомобиля")
    license_plate: str = Field("", description="Госномер")

    earnings: float = Field(0.0, ge=0.0, description="Накопленный заработок")
    is_online: bool = Field(False, description="Готов принимать заказы")
    rating: Optional[float] = Field(None, ge=1.0, le=5.0, description="Рейтинг")


class Rider(BaseUser):
    """Пассажир."""

    role: Literal["rider"] = "rider"

    # Может уйти в минус: списание при расчёте не перепроверяет баланс
    wallet_balance: float = Field(0.0, description="Баланс предоплаченного кошелька")


User = Annotated[Union[Administrator, Driver, Rider], Field(discriminator="role")]

_user_adapter: TypeAdapter[User] = TypeAdapter(User)


def parse_user(data: dict) -> Administrator | Driver | Rider:
    """Создаёт пользователя нужного варианта по полю role."""
    return _user_adapter.validate_python(data)
