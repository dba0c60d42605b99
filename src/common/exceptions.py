# src/common/exceptions.py
"""
Типизированные ошибки доменного слоя.
Сообщаются вызывающему синхронно, ядро их не повторяет.
"""

from __future__ import annotations

from typing import Any


class RideHailingError(Exception):
    """Базовая ошибка домена."""
    pass


class NotFoundError(RideHailingError):
    """Поездка или пользователь не найдены."""

    def __init__(self, entity: str, entity_id: Any) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} не найден")


class InvalidTransitionError(RideHailingError):
    """Запрошенный переход статуса недопустим."""

    def __init__(self, ride_id: str, current: Any, target: Any, reason: str | None = None) -> None:
        self.ride_id = ride_id
        self.current = current
        self.target = target
        message = f"Поездка {ride_id}: переход {current} -> {target} недопустим"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class DuplicateAcceptanceError(RideHailingError):
    """Поездка уже принята другим водителем."""

    def __init__(self, ride_id: str, driver_id: str) -> None:
        self.ride_id = ride_id
        self.driver_id = driver_id
        super().__init__(f"Поездка {ride_id} уже назначена водителю {driver_id}")


class InsufficientBalanceError(RideHailingError):
    """Баланс кошелька меньше стоимости поездки."""

    def __init__(self, rider_id: str, balance: float, required: float) -> None:
        self.rider_id = rider_id
        self.balance = balance
        self.required = required
        super().__init__(
            f"Недостаточно средств у пассажира {rider_id}: {balance:.2f} < {required:.2f}"
        )


class CategoryMismatchError(RideHailingError):
    """Категория транспорта водителя не совпадает с запрошенной."""

    def __init__(self, ride_id: str, requested: Any, offered: Any) -> None:
        self.ride_id = ride_id
        self.requested = requested
        self.offered = offered
        super().__init__(f"Поездка {ride_id} требует {requested}, у водителя {offered}")


class PaymentProviderNotConfiguredError(RideHailingError):
    """Платёжный провайдер не настроен администратором."""
    pass


class DuplicateRuleError(RideHailingError):
    """Тарифное правило с таким ID уже существует."""

    def __init__(self, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"Тарифное правило {rule_id} уже существует")


class RegistryInvariantError(ValueError):
    """Мутатор нарушил инвариант сущности (ошибка программиста)."""
    pass
