# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("PAYMENT_API_KEY", "")
os.environ.setdefault("GEMINI_API_KEY", "")

from src.common.constants import PaymentProvider, VehicleType
from src.core.billing.service import SettlementEngine
from src.core.pricing.models import PaymentSettings, PricingRule
from src.core.pricing.service import PricingEngine
from src.core.ratings.service import RatingService
from src.core.registry.repository import RideRegistry
from src.core.rides.models import Location
from src.core.rides.service import DispatchCoordinator
from src.core.users.models import Driver, Rider


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "Комментарий, должен быть отброшен",
        "PROJECT_NAME": "ride_hailing_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "ENVIRONMENT": "test",
        "SEED_DEMO_DATA": False,
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "colored",
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "PAYMENT_PROVIDER": "mercadopago",
        "PLATFORM_COMMISSION_PERCENT": 20.0,
        "CURRENCY": "BRL",
        "PRICING_RULES": [
            {"id": "default", "region_name": "Geral (Padrão)", "base_price": 5.0, "price_per_km": 2.5},
            {"id": "center", "region_name": "Centro Histórico", "base_price": 8.0, "price_per_km": 3.5},
        ],
        "ESTIMATED_DISTANCE_KM": 4.8,
        "GEMINI_MODEL": "gemini-test",
        "ADVISOR_TIMEOUT_SECONDS": 1.0,
        "API_HOST": "127.0.0.1",
        "API_PORT": 8181,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Создаёт временный файл конфигурации."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, ensure_ascii=False, indent=2), encoding="utf-8")
    return config_file


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_event_bus() -> AsyncMock:
    """Мок шины событий."""
    event_bus = AsyncMock()
    event_bus.publish = AsyncMock(return_value=None)
    return event_bus


# =============================================================================
# ФИКСТУРЫ ЯДРА
# =============================================================================

@pytest.fixture
def pricing_rules() -> list[PricingRule]:
    """Тарифы по умолчанию: default 5.00/2.50 и center 8.00/3.50."""
    return [
        PricingRule(id="default", region_name="Geral (Padrão)", base_price=5.0, price_per_km=2.5),
        PricingRule(id="center", region_name="Centro Histórico", base_price=8.0, price_per_km=3.5),
    ]


@pytest.fixture
def payment_settings(pricing_rules: list[PricingRule]) -> PaymentSettings:
    """Платёжные настройки с настроенным провайдером и комиссией 15%."""
    return PaymentSettings(
        provider=PaymentProvider.STRIPE,
        api_key="sk_test_123",
        platform_commission=15.0,
        pricing_rules=pricing_rules,
    )


@pytest.fixture
def registry(payment_settings: PaymentSettings) -> RideRegistry:
    """Пустой реестр с платёжными настройками."""
    return RideRegistry(payment_settings)


@pytest.fixture
def pricing(registry: RideRegistry) -> PricingEngine:
    return PricingEngine(lambda: registry.get_payment_settings().pricing_rules)


@pytest.fixture
def settlement(registry: RideRegistry, mock_event_bus: AsyncMock) -> SettlementEngine:
    return SettlementEngine(registry, mock_event_bus)


@pytest.fixture
def dispatch(
    registry: RideRegistry,
    pricing: PricingEngine,
    settlement: SettlementEngine,
    mock_event_bus: AsyncMock,
) -> DispatchCoordinator:
    return DispatchCoordinator(registry, pricing, settlement, mock_event_bus, default_distance_km=4.8)


@pytest.fixture
def ratings(registry: RideRegistry, mock_event_bus: AsyncMock) -> RatingService:
    return RatingService(registry, mock_event_bus)


@pytest.fixture
async def populated_registry(registry: RideRegistry) -> RideRegistry:
    """Реестр с пассажиром r1 (150.00), водителем-автомобилистом d1 и мотоциклистом m1."""
    await registry.insert_user(Rider(id="r1", name="João Paulo", wallet_balance=150.0))
    await registry.insert_user(Rider(id="r2", name="Maria", wallet_balance=10.0))
    await registry.insert_user(Driver(id="d1", name="Carlos Silva", vehicle_type=VehicleType.CAR, is_online=True))
    await registry.insert_user(Driver(id="d2", name="Ana Souza", vehicle_type=VehicleType.CAR, is_online=True))
    await registry.insert_user(Driver(id="m1", name="Pedro", vehicle_type=VehicleType.MOTORCYCLE))
    return registry


@pytest.fixture
def origin() -> Location:
    return Location(lat=-23.55, lng=-46.63, address="Rua Augusta, 100")


@pytest.fixture
def center_destination() -> Location:
    return Location(lat=-23.54, lng=-46.63, address="Praça da Sé, Centro Histórico")


@pytest.fixture
def unknown_destination() -> Location:
    return Location(lat=-23.60, lng=-46.70, address="Unknown Place")
