# src/core/registry/repository.py
"""
Реестр поездок и пользователей.
Единственный владелец канонических коллекций, всё изменение идёт через update_*.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, TypeVar

from src.common.constants import RideStatus, UserRole, VehicleType
from src.common.exceptions import NotFoundError, RegistryInvariantError
from src.core.pricing.models import PaymentSettings
from src.core.rides.models import Ride
from src.core.users.models import Administrator, Driver, Rider

UserModel = Administrator | Driver | Rider

T = TypeVar("T")

# Мутатор меняет переданную копию на месте или возвращает новую сущность
RideMutator = Callable[[Ride], Optional[Ride]]
UserMutator = Callable[[UserModel], Optional[UserModel]]
SettingsMutator = Callable[[PaymentSettings], Optional[PaymentSettings]]


class RideRegistry:
    """
    Реестр в памяти процесса.

    Изменения сериализуются по ID сущности: каждый update_* берёт
    asyncio.Lock с ключом ride:<id> / user:<id>, применяет мутатор к копии,
    проверяет инварианты и только затем публикует результат.
    Разные ID друг друга не блокируют. Поездки живут до конца процесса,
    блокировка пользователя удаляется вместе с ним: число блокировок
    ограничено числом сущностей.
    """

    def __init__(self, payment_settings: PaymentSettings | None = None) -> None:
        """
        Args:
            payment_settings: Начальные платёжные настройки
        """
        self._rides: dict[str, Ride] = {}
        self._users: dict[str, UserModel] = {}
        self._payment_settings = payment_settings or PaymentSettings()
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    @staticmethod
    def _apply(entity: T, mutator: Callable[[T], Optional[T]]) -> T:
        draft = entity.model_copy(deep=True)
        result = mutator(draft)
        return result if result is not None else draft

    # =========================================================================
    # ПОЕЗДКИ
    # =========================================================================

    async def insert_ride(self, ride: Ride) -> Ride:
        """Добавляет новую поездку."""
        async with self._lock_for(f"ride:{ride.id}"):
            if ride.id in self._rides:
                raise RegistryInvariantError(f"Поездка {ride.id} уже существует")
            self._rides[ride.id] = ride.model_copy(deep=True)
        return ride.model_copy(deep=True)

    def get_ride(self, ride_id: str) -> Ride:
        """
        Возвращает копию поездки.

        Raises:
            NotFoundError: Поездка не найдена
        """
        ride = self._rides.get(ride_id)
        if ride is None:
            raise NotFoundError("ride", ride_id)
        return ride.model_copy(deep=True)

    async def update_ride(self, ride_id: str, mutator: RideMutator) -> Ride:
        """
        Атомарно применяет мутатор к поездке.
        Исключение из мутатора отменяет изменение целиком.

        Returns:
            Копия обновлённой поездки
        """
        async with self._lock_for(f"ride:{ride_id}"):
            current = self._rides.get(ride_id)
            if current is None:
                self._locks.pop(f"ride:{ride_id}", None)
                raise NotFoundError("ride", ride_id)

            updated = self._apply(current, mutator)
            self._check_ride_invariants(current, updated)
            self._rides[ride_id] = updated
            return updated.model_copy(deep=True)

    @staticmethod
    def _check_ride_invariants(current: Ride, updated: Ride) -> None:
        if updated.id != current.id or updated.rider_id != current.rider_id:
            raise RegistryInvariantError(f"Поездка {current.id}: нельзя менять id или пассажира")
        if updated.price != current.price:
            raise RegistryInvariantError(f"Поездка {current.id}: цена фиксируется при заказе")
        if current.driver_id is not None and updated.driver_id != current.driver_id:
            raise RegistryInvariantError(f"Поездка {current.id}: водитель уже назначен")
        if updated.messages[: len(current.messages)] != current.messages:
            raise RegistryInvariantError(f"Поездка {current.id}: история чата только дописывается")
        if current.settled_at is not None and updated.settled_at != current.settled_at:
            raise RegistryInvariantError(f"Поездка {current.id}: расчёт уже проведён")

    def list_rides(self) -> list[Ride]:
        """Все поездки, новые первыми."""
        rides = sorted(self._rides.values(), key=lambda r: r.created_at, reverse=True)
        return [ride.model_copy(deep=True) for ride in rides]

    def list_by_rider(self, rider_id: str) -> list[Ride]:
        return [ride for ride in self.list_rides() if ride.rider_id == rider_id]

    def list_by_driver(self, driver_id: str) -> list[Ride]:
        return [ride for ride in self.list_rides() if ride.driver_id == driver_id]

    def list_pending(self, vehicle_type: VehicleType) -> list[Ride]:
        """Заказы, ожидающие водителя указанной категории."""
        return [
            ride for ride in self.list_rides()
            if ride.status == RideStatus.REQUESTED
            and ride.driver_id is None
            and ride.vehicle_type == vehicle_type
        ]

    # =========================================================================
    # ПОЛЬЗОВАТЕЛИ
    # =========================================================================

    async def insert_user(self, user: UserModel) -> UserModel:
        """Регистрирует пользователя."""
        async with self._lock_for(f"user:{user.id}"):
            if user.id in self._users:
                raise RegistryInvariantError(f"Пользователь {user.id} уже существует")
            self._users[user.id] = user.model_copy(deep=True)
        return user.model_copy(deep=True)

    def get_user(self, user_id: str) -> UserModel:
        """
        Возвращает копию пользователя.

        Raises:
            NotFoundError: Пользователь не найден
        """
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user.model_copy(deep=True)

    async def update_user(self, user_id: str, mutator: UserMutator) -> UserModel:
        """Атомарно применяет мутатор к пользователю. Роль и ID неизменны."""
        async with self._lock_for(f"user:{user_id}"):
            current = self._users.get(user_id)
            if current is None:
                self._locks.pop(f"user:{user_id}", None)
                raise NotFoundError("user", user_id)

            updated = self._apply(current, mutator)
            if updated.id != current.id or type(updated) is not type(current):
                raise RegistryInvariantError(f"Пользователь {user_id}: нельзя менять id или роль")
            self._users[user_id] = updated
            return updated.model_copy(deep=True)

    async def delete_user(self, user_id: str) -> None:
        """Удаляет пользователя (административная операция) вместе с его блокировкой."""
        key = f"user:{user_id}"
        try:
            async with self._lock_for(key):
                if self._users.pop(user_id, None) is None:
                    raise NotFoundError("user", user_id)
        finally:
            # Критические секции без await: ожидающие на старой блокировке не нарушают атомарность
            self._locks.pop(key, None)

    def list_users(self, role: UserRole | None = None) -> list[UserModel]:
        users = [user for user in self._users.values() if role is None or user.role == role]
        return [user.model_copy(deep=True) for user in users]

    # =========================================================================
    # ПЛАТЁЖНЫЕ НАСТРОЙКИ
    # =========================================================================

    def get_payment_settings(self) -> PaymentSettings:
        return self._payment_settings.model_copy(deep=True)

    async def update_payment_settings(self, mutator: SettingsMutator) -> PaymentSettings:
        """Атомарно меняет платёжные настройки."""
        async with self._lock_for("settings"):
            updated = self._apply(self._payment_settings, mutator)
            # Повторная валидация: мутатор мог заменить список правил целиком
            updated = PaymentSettings.model_validate(updated.model_dump())
            self._payment_settings = updated
            return updated.model_copy(deep=True)
