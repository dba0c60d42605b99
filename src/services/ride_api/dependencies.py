# src/services/ride_api/dependencies.py
"""
Сборка сервисов ядра и их выдача обработчикам через Depends.
"""

from dataclasses import dataclass

from fastapi import Depends, Request

from src.config.loader import Settings
from src.core.admin.service import AdminService
from src.core.advisor.service import AdvisorService
from src.core.billing.service import SettlementEngine
from src.core.pricing.models import PaymentSettings, PricingRule
from src.core.pricing.service import PricingEngine
from src.core.ratings.service import RatingService
from src.core.registry.repository import RideRegistry
from src.core.rides.service import DispatchCoordinator
from src.core.users.service import UserService
from src.infra.event_bus import EventBus


@dataclass
class ServiceContainer:
    registry: RideRegistry
    event_bus: EventBus
    pricing: PricingEngine
    settlement: SettlementEngine
    dispatch: DispatchCoordinator
    ratings: RatingService
    users: UserService
    advisor: AdvisorService
    admin: AdminService

    async def close(self) -> None:
        await self.advisor.close()
        self.event_bus.clear()


def build_payment_settings(config: Settings) -> PaymentSettings:
    """Начальные платёжные настройки из секций payments и pricing."""
    return PaymentSettings(
        provider=config.payments.PAYMENT_PROVIDER,
        api_key=config.payments.PAYMENT_API_KEY,
        platform_commission=config.payments.PLATFORM_COMMISSION_PERCENT,
        pricing_rules=[PricingRule(**rule.model_dump()) for rule in config.pricing.PRICING_RULES],
    )


def build_services(config: Settings, advisor: AdvisorService | None = None) -> ServiceContainer:
    registry = RideRegistry(build_payment_settings(config))
    event_bus = EventBus()
    pricing = PricingEngine(lambda: registry.get_payment_settings().pricing_rules)
    settlement = SettlementEngine(registry, event_bus)
    advisor = advisor or AdvisorService(config.advisor)

    return ServiceContainer(
        registry=registry,
        event_bus=event_bus,
        pricing=pricing,
        settlement=settlement,
        dispatch=DispatchCoordinator(
            registry,
            pricing,
            settlement,
            event_bus,
            default_distance_km=config.pricing.ESTIMATED_DISTANCE_KM,
        ),
        ratings=RatingService(registry, event_bus),
        users=UserService(registry),
        advisor=advisor,
        admin=AdminService(registry, advisor),
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_dispatch(services: ServiceContainer = Depends(get_services)) -> DispatchCoordinator:
    return services.dispatch


def get_user_service(services: ServiceContainer = Depends(get_services)) -> UserService:
    return services.users


def get_admin_service(services: ServiceContainer = Depends(get_services)) -> AdminService:
    return services.admin
