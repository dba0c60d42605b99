# tests/common/test_constants.py
"""
Тесты для модуля констант.
"""

import pytest

from src.common.constants import (
    PaymentMethod,
    PaymentProvider,
    RideStatus,
    ServiceTier,
    TypeMsg,
    UserRole,
    VehicleType,
)


class TestTypeMsg:
    """Тесты для enum TypeMsg."""

    def test_type_msg_values(self) -> None:
        assert [t.value for t in TypeMsg] == ["debug", "info", "warning", "error", "critical"]

    def test_type_msg_is_str_enum(self) -> None:
        assert isinstance(TypeMsg.DEBUG, str)
        assert TypeMsg.INFO == "info"


class TestUserRole:
    """Тесты для enum UserRole."""

    def test_all_roles_exist(self) -> None:
        assert {r.value for r in UserRole} == {"admin", "driver", "rider"}

    def test_str_is_value(self) -> None:
        """str() даёт значение, а не имя члена."""
        assert str(UserRole.RIDER) == "rider"
        assert f"{UserRole.DRIVER}" == "driver"


class TestRideStatus:
    """Тесты для enum RideStatus."""

    def test_values(self) -> None:
        assert RideStatus.REQUESTED.value == "requested"
        assert RideStatus.ACCEPTED.value == "accepted"
        assert RideStatus.PICKUP.value == "pickup"
        assert RideStatus.IN_PROGRESS.value == "in_progress"
        assert RideStatus.COMPLETED.value == "completed"
        assert RideStatus.CANCELLED.value == "cancelled"

    def test_from_string(self) -> None:
        assert RideStatus("in_progress") is RideStatus.IN_PROGRESS

    def test_unknown_value(self) -> None:
        with pytest.raises(ValueError):
            RideStatus("expired")


class TestPaymentEnums:
    """Тесты перечислений оплаты."""

    def test_payment_methods(self) -> None:
        assert {m.value for m in PaymentMethod} == {"card", "instant_transfer", "cash", "prepaid_wallet"}

    def test_providers(self) -> None:
        assert {p.value for p in PaymentProvider} == {"stripe", "mercadopago", "paypal"}


class TestVehicleAndTier:
    """Тесты категорий транспорта и уровней обслуживания."""

    def test_vehicle_types(self) -> None:
        assert {v.value for v in VehicleType} == {"car", "motorcycle"}

    def test_service_tiers(self) -> None:
        assert [t.value for t in ServiceTier] == ["economy", "comfort", "premium"]

    @pytest.mark.parametrize("enum_cls", [RideStatus, PaymentMethod, VehicleType, ServiceTier, PaymentProvider])
    def test_str_enums(self, enum_cls) -> None:
        member = next(iter(enum_cls))
        assert isinstance(member, str)
        assert str(member) == member.value
