# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class UserRole(str, Enum):
    """Роли пользователей."""
    ADMIN = "admin"
    DRIVER = "driver"
    RIDER = "rider"

    def __str__(self) -> str:
        return self.value


class RideStatus(str, Enum):
    """Статусы поездки."""
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    PICKUP = "pickup"  # не используется переходами, сохранён для совместимости данных
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class PaymentMethod(str, Enum):
    """Способы оплаты."""
    CARD = "card"
    INSTANT_TRANSFER = "instant_transfer"
    CASH = "cash"
    PREPAID_WALLET = "prepaid_wallet"

    def __str__(self) -> str:
        return self.value


class VehicleType(str, Enum):
    """Категории транспорта."""
    CAR = "car"
    MOTORCYCLE = "motorcycle"

    def __str__(self) -> str:
        return self.value


class ServiceTier(str, Enum):
    """Уровни обслуживания."""
    ECONOMY = "economy"
    COMFORT = "comfort"
    PREMIUM = "premium"

    def __str__(self) -> str:
        return self.value


class PaymentProvider(str, Enum):
    """Поддерживаемые платёжные провайдеры."""
    STRIPE = "stripe"
    MERCADOPAGO = "mercadopago"
    PAYPAL = "paypal"

    def __str__(self) -> str:
        return self.value
