# src/core/users/service.py
"""
Сервис для работы с пользователями.
Регистрация, профиль, доступность водителей и пополнение кошелька.
"""

from __future__ import annotations

from typing import Any, Optional

from src.common.constants import TypeMsg, UserRole, VehicleType
from src.common.exceptions import NotFoundError, PaymentProviderNotConfiguredError
from src.common.logger import log_info, log_warning
from src.core.registry.repository import RideRegistry, UserModel
from src.core.users.models import Administrator, Driver, Rider


# Поля, которые нельзя менять через update_profile
IMMUTABLE_FIELDS = frozenset({"id", "role", "created_at"})


class UserService:
    """
    Сервис пользователей.
    Вся запись идёт через RideRegistry.update_user.
    """

    def __init__(self, registry: RideRegistry) -> None:
        """
        Args:
            registry: Реестр поездок и пользователей
        """
        self._registry = registry

    # =========================================================================
    # РЕГИСТРАЦИЯ
    # =========================================================================

    async def register_rider(
        self,
        name: str,
        email: str = "",
        phone: str = "",
        wallet_balance: float = 0.0,
        user_id: Optional[str] = None,
    ) -> Rider:
        """Регистрирует пассажира."""
        data: dict[str, Any] = {
            "name": name,
            "email": email,
            "phone": phone,
            "wallet_balance": wallet_balance,
        }
        if user_id:
            data["id"] = user_id

        rider = await self._registry.insert_user(Rider(**data))
        await log_info(f"Пассажир зарегистрирован: {rider.id} ({rider.name})", type_msg=TypeMsg.INFO)
        return rider

    async def register_driver(
        self,
        name: str,
        vehicle_type: VehicleType = VehicleType.CAR,
        vehicle_model: str = "",
        license_plate: str = "",
        email: str = "",
        phone: str = "",
        user_id: Optional[str] = None,
    ) -> Driver:
        """Регистрирует водителя. Новый водитель офлайн."""
        data: dict[str, Any] = {
            "name": name,
            "vehicle_type": vehicle_type,
            "vehicle_model": vehicle_model,
            "license_plate": license_plate,
            "email": email,
            "phone": phone,
        }
        if user_id:
            data["id"] = user_id

        driver = await self._registry.insert_user(Driver(**data))
        await log_info(
            f"Водитель зарегистрирован: {driver.id} ({driver.name}, {driver.vehicle_type})",
            type_msg=TypeMsg.INFO,
        )
        return driver

    async def register_admin(self, name: str, email: str = "", user_id: Optional[str] = None) -> Administrator:
        data: dict[str, Any] = {"name": name, "email": email}
        if user_id:
            data["id"] = user_id

        admin = await self._registry.insert_user(Administrator(**data))
        await log_info(f"Администратор зарегистрирован: {admin.id}", type_msg=TypeMsg.INFO)
        return admin

    # =========================================================================
    # ПРОФИЛЬ
    # =========================================================================

    def get_user(self, user_id: str) -> UserModel:
        return self._registry.get_user(user_id)

    def list_users(self, role: Optional[UserRole] = None) -> list[UserModel]:
        return self._registry.list_users(role)

    async def update_profile(self, user_id: str, **changes: Any) -> UserModel:
        """
        Обновляет поля профиля.

        Args:
            user_id: ID пользователя
            **changes: Новые значения полей

        Returns:
            Обновлённый пользователь

        Raises:
            NotFoundError: Пользователь не найден
            ValueError: Попытка изменить id, роль или неизвестное поле
        """
        forbidden = IMMUTABLE_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"Нельзя изменить поля: {', '.join(sorted(forbidden))}")

        def _update(user: UserModel) -> None:
            for field_name, value in changes.items():
                if field_name not in type(user).model_fields:
                    raise ValueError(f"Неизвестное поле профиля: {field_name}")
                setattr(user, field_name, value)

        user = await self._registry.update_user(user_id, _update)
        await log_info(f"Профиль {user_id} обновлён: {', '.join(changes)}", type_msg=TypeMsg.DEBUG)
        return user

    async def set_online(self, driver_id: str, is_online: bool) -> Driver:
        """
        Переключает доступность водителя.

        Raises:
            NotFoundError: Водитель не найден
        """

        def _toggle(user: UserModel) -> None:
            if not isinstance(user, Driver):
                raise NotFoundError("driver", driver_id)
            user.is_online = is_online

        driver = await self._registry.update_user(driver_id, _toggle)
        status = "онлайн" if is_online else "офлайн"
        await log_info(f"Водитель {driver_id} {status}", type_msg=TypeMsg.INFO)
        return driver

    def available_drivers(self, vehicle_type: Optional[VehicleType] = None) -> list[Driver]:
        """Водители онлайн, опционально одной категории."""
        return [
            user for user in self._registry.list_users(UserRole.DRIVER)
            if isinstance(user, Driver)
            and user.is_online
            and (vehicle_type is None or user.vehicle_type == vehicle_type)
        ]

    # =========================================================================
    # КОШЕЛЁК
    # =========================================================================

    async def top_up_wallet(self, rider_id: str, amount: float) -> Rider:
        """
        Пополняет предоплаченный кошелёк пассажира.

        Args:
            rider_id: ID пассажира
            amount: Сумма пополнения (> 0)

        Returns:
            Пассажир с новым балансом

        Raises:
            ValueError: Сумма не положительная
            PaymentProviderNotConfiguredError: Провайдер не настроен
            NotFoundError: Пассажир не найден
        """
        if amount <= 0:
            raise ValueError(f"Сумма пополнения должна быть положительной: {amount}")

        if not self._registry.get_payment_settings().is_provider_configured:
            raise PaymentProviderNotConfiguredError(
                "Пополнение недоступно: платёжный провайдер не настроен"
            )

        def _top_up(user: UserModel) -> None:
            if not isinstance(user, Rider):
                raise NotFoundError("rider", rider_id)
            user.wallet_balance = user.wallet_balance + amount

        rider = await self._registry.update_user(rider_id, _top_up)
        await log_info(
            f"Кошелёк {rider_id} пополнен на {amount:.2f}, баланс {rider.wallet_balance:.2f}",
            type_msg=TypeMsg.INFO,
        )
        return rider

    # =========================================================================
    # АДМИНИСТРИРОВАНИЕ
    # =========================================================================

    async def delete_user(self, user_id: str) -> None:
        """
        Удаляет пользователя. Поездки пользователя остаются в реестре.

        Raises:
            NotFoundError: Пользователь не найден
        """
        await self._registry.delete_user(user_id)
        await log_warning(f"Пользователь {user_id} удалён администратором")

    async def seed_demo_users(self) -> None:
        """Демо-данные: водитель d1 и пассажир r1."""
        await self.register_driver(
            name="Carlos Silva",
            vehicle_type=VehicleType.CAR,
            vehicle_model="Toyota Corolla",
            license_plate="ABC-1234",
            email="carlos@uber.com",
            phone="(11) 98888-7777",
            user_id="d1",
        )

        def _demo_driver(user: UserModel) -> None:
            if isinstance(user, Driver):
                user.earnings = 1250.80
                user.rating = 4.8
                user.is_online = True

        await self._registry.update_user("d1", _demo_driver)

        await self.register_rider(
            name="João Paulo",
            email="joao@user.com",
            phone="(11) 99999-8888",
            wallet_balance=150.00,
            user_id="r1",
        )
        await log_info("Демо-пользователи созданы: d1, r1", type_msg=TypeMsg.INFO)
