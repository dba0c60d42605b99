# src/services/ride_api/schemas.py
"""
Модели запросов и ответов HTTP API.
"""

from typing import Optional

from pydantic import BaseModel, Field

from src.common.constants import (
    PaymentMethod,
    PaymentProvider,
    RideStatus,
    ServiceTier,
    UserRole,
    VehicleType,
)
from src.core.pricing.models import PaymentSettings, PricingRule
from src.core.rides.models import Location


class QuoteRequest(BaseModel):
    destination: str
    vehicle_type: VehicleType = VehicleType.CAR
    distance_km: Optional[float] = Field(None, ge=0.0)


class RideRequest(BaseModel):
    rider_id: str
    origin: Location
    destination: Location
    payment_method: PaymentMethod = PaymentMethod.CARD
    vehicle_type: VehicleType = VehicleType.CAR
    service_tier: ServiceTier = ServiceTier.ECONOMY
    distance_km: Optional[float] = Field(None, ge=0.0)


class AcceptRequest(BaseModel):
    driver_id: str


class AdvanceRequest(BaseModel):
    status: RideStatus
    driver_id: str


class CancelRequest(BaseModel):
    cancelled_by: UserRole = UserRole.RIDER


class RatingRequest(BaseModel):
    value: float = Field(..., ge=1.0, le=5.0)
    rater_role: UserRole


class MessageRequest(BaseModel):
    sender_id: str
    text: str = Field(..., min_length=1)


class InsightResponse(BaseModel):
    ride_id: str
    insight: str


class CreateRiderRequest(BaseModel):
    name: str
    email: str = ""
    phone: str = ""


class CreateDriverRequest(BaseModel):
    name: str
    vehicle_type: VehicleType = VehicleType.CAR
    vehicle_model: str = ""
    license_plate: str = ""
    email: str = ""
    phone: str = ""


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    vehicle_model: Optional[str] = None
    license_plate: Optional[str] = None


class OnlineRequest(BaseModel):
    is_online: bool


class TopUpRequest(BaseModel):
    amount: float = Field(..., gt=0.0)


class CommissionRequest(BaseModel):
    percent: float = Field(..., ge=0.0, le=100.0)


class PaymentProviderRequest(BaseModel):
    provider: PaymentProvider
    api_key: str = ""


class PricingRuleRequest(BaseModel):
    region_name: str
    base_price: float = Field(..., gt=0.0)
    price_per_km: float = Field(..., gt=0.0)
    active: bool = True
    id: Optional[str] = None


class SettingsResponse(BaseModel):
    """Платёжные настройки без ключа провайдера."""

    provider: PaymentProvider
    is_provider_configured: bool
    platform_commission: float
    pricing_rules: list[PricingRule]

    @classmethod
    def from_settings(cls, payment_settings: PaymentSettings) -> "SettingsResponse":
        return cls(
            provider=payment_settings.provider,
            is_provider_configured=payment_settings.is_provider_configured,
            platform_commission=payment_settings.platform_commission,
            pricing_rules=payment_settings.pricing_rules,
        )
