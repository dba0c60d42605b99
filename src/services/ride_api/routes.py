# src/services/ride_api/routes.py
from typing import Optional

from fastapi import APIRouter, Depends, status

from src.common.constants import UserRole, VehicleType
from src.core.admin.service import AdminService, FinanceOverview
from src.core.billing.service import EarningsReport
from src.core.pricing.models import FareQuoteDTO, PricingRule
from src.core.rides.models import ChatMessage, Ride
from src.core.rides.service import DispatchCoordinator
from src.core.users.service import UserService
from src.services.ride_api.dependencies import (
    ServiceContainer,
    get_admin_service,
    get_dispatch,
    get_services,
    get_user_service,
)
from src.services.ride_api.schemas import (
    AcceptRequest,
    AdvanceRequest,
    CancelRequest,
    CommissionRequest,
    CreateDriverRequest,
    CreateRiderRequest,
    InsightResponse,
    MessageRequest,
    OnlineRequest,
    PaymentProviderRequest,
    PricingRuleRequest,
    QuoteRequest,
    RatingRequest,
    RideRequest,
    SettingsResponse,
    TopUpRequest,
    UpdateProfileRequest,
)

rides_router = APIRouter(prefix="/rides", tags=["rides"])
users_router = APIRouter(tags=["users"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


# =============================================================================
# ПОЕЗДКИ
# =============================================================================

@rides_router.post("/quote", response_model=FareQuoteDTO)
async def quote(
    request: QuoteRequest,
    dispatch: DispatchCoordinator = Depends(get_dispatch),
):
    return dispatch.quote_fares(request.destination, request.vehicle_type, request.distance_km)


@rides_router.post("", response_model=Ride, status_code=status.HTTP_201_CREATED)
async def request_ride(
    request: RideRequest,
    dispatch: DispatchCoordinator = Depends(get_dispatch),
):
    return await dispatch.request_ride(
        rider_id=request.rider_id,
        origin=request.origin,
        destination=request.destination,
        payment_method=request.payment_method,
        vehicle_type=request.vehicle_type,
        service_tier=request.service_tier,
        distance_km=request.distance_km,
    )


@rides_router.get("/{ride_id}", response_model=Ride)
async def get_ride(ride_id: str, dispatch: DispatchCoordinator = Depends(get_dispatch)):
    return dispatch.get_ride(ride_id)


@rides_router.post("/{ride_id}/accept", response_model=Ride)
async def accept_ride(
    ride_id: str,
    request: AcceptRequest,
    dispatch: DispatchCoordinator = Depends(get_dispatch),
):
    return await dispatch.accept_ride(ride_id, request.driver_id)


@rides_router.post("/{ride_id}/advance", response_model=Ride)
async def advance_ride(
    ride_id: str,
    request: AdvanceRequest,
    dispatch: DispatchCoordinator = Depends(get_dispatch),
):
    return await dispatch.advance(ride_id, request.status, request.driver_id)


@rides_router.post("/{ride_id}/cancel", response_model=Ride)
async def cancel_ride(
    ride_id: str,
    request: CancelRequest,
    dispatch: DispatchCoordinator = Depends(get_dispatch),
):
    return await dispatch.cancel(ride_id, request.cancelled_by)


@rides_router.post("/{ride_id}/rating", response_model=Ride)
async def rate_ride(
    ride_id: str,
    request: RatingRequest,
    services: ServiceContainer = Depends(get_services),
):
    return await services.ratings.rate(ride_id, request.value, request.rater_role)


@rides_router.post("/{ride_id}/messages", response_model=ChatMessage, status_code=status.HTTP_201_CREATED)
async def append_message(
    ride_id: str,
    request: MessageRequest,
    dispatch: DispatchCoordinator = Depends(get_dispatch),
):
    return await dispatch.append_message(ride_id, request.sender_id, request.text)


@rides_router.get("/{ride_id}/insight", response_model=InsightResponse)
async def ride_insight(ride_id: str, services: ServiceContainer = Depends(get_services)):
    ride = services.dispatch.get_ride(ride_id)
    text = await services.advisor.ride_insight(ride.origin.address, ride.destination.address, ride.price)
    return InsightResponse(ride_id=ride_id, insight=text)


# =============================================================================
# ПОЛЬЗОВАТЕЛИ
# =============================================================================

@users_router.post("/users/riders", status_code=status.HTTP_201_CREATED)
async def register_rider(request: CreateRiderRequest, service: UserService = Depends(get_user_service)):
    return await service.register_rider(name=request.name, email=request.email, phone=request.phone)


@users_router.post("/users/drivers", status_code=status.HTTP_201_CREATED)
async def register_driver(request: CreateDriverRequest, service: UserService = Depends(get_user_service)):
    return await service.register_driver(**request.model_dump())


@users_router.get("/users")
async def list_users(role: Optional[UserRole] = None, service: UserService = Depends(get_user_service)):
    return service.list_users(role)


@users_router.get("/users/{user_id}")
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return service.get_user(user_id)


@users_router.patch("/users/{user_id}")
async def update_profile(
    user_id: str,
    request: UpdateProfileRequest,
    service: UserService = Depends(get_user_service),
):
    return await service.update_profile(user_id, **request.model_dump(exclude_unset=True))


@users_router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)):
    await service.delete_user(user_id)


@users_router.get("/drivers/available")
async def available_drivers(
    vehicle_type: Optional[VehicleType] = None,
    service: UserService = Depends(get_user_service),
):
    return service.available_drivers(vehicle_type)


@users_router.put("/drivers/{driver_id}/online")
async def set_online(
    driver_id: str,
    request: OnlineRequest,
    service: UserService = Depends(get_user_service),
):
    return await service.set_online(driver_id, request.is_online)


@users_router.get("/drivers/{driver_id}/rides", response_model=list[Ride])
async def driver_rides(driver_id: str, dispatch: DispatchCoordinator = Depends(get_dispatch)):
    return dispatch.rides_visible_to_driver(driver_id)


@users_router.get("/drivers/{driver_id}/earnings", response_model=EarningsReport)
async def driver_earnings(driver_id: str, services: ServiceContainer = Depends(get_services)):
    return services.settlement.driver_earnings_report(driver_id)


@users_router.get("/riders/{rider_id}/rides", response_model=list[Ride])
async def rider_rides(rider_id: str, dispatch: DispatchCoordinator = Depends(get_dispatch)):
    return dispatch.rides_for_rider(rider_id)


@users_router.get("/riders/{rider_id}/active-ride", response_model=Optional[Ride])
async def rider_active_ride(rider_id: str, dispatch: DispatchCoordinator = Depends(get_dispatch)):
    return dispatch.active_ride_for_rider(rider_id)


@users_router.post("/riders/{rider_id}/wallet/top-up")
async def top_up_wallet(
    rider_id: str,
    request: TopUpRequest,
    service: UserService = Depends(get_user_service),
):
    return await service.top_up_wallet(rider_id, request.amount)


# =============================================================================
# АДМИНИСТРИРОВАНИЕ
# =============================================================================

@admin_router.get("/settings", response_model=SettingsResponse)
async def get_settings(service: AdminService = Depends(get_admin_service)):
    return SettingsResponse.from_settings(service.get_payment_settings())


@admin_router.put("/commission", response_model=SettingsResponse)
async def set_commission(request: CommissionRequest, service: AdminService = Depends(get_admin_service)):
    return SettingsResponse.from_settings(await service.set_commission(request.percent))


@admin_router.put("/payment-provider", response_model=SettingsResponse)
async def configure_payment_provider(
    request: PaymentProviderRequest,
    service: AdminService = Depends(get_admin_service),
):
    updated = await service.configure_payment_provider(request.provider, request.api_key)
    return SettingsResponse.from_settings(updated)


@admin_router.post("/pricing-rules", response_model=PricingRule, status_code=status.HTTP_201_CREATED)
async def add_pricing_rule(request: PricingRuleRequest, service: AdminService = Depends(get_admin_service)):
    return await service.add_pricing_rule(
        region_name=request.region_name,
        base_price=request.base_price,
        price_per_km=request.price_per_km,
        active=request.active,
        rule_id=request.id,
    )


@admin_router.delete("/pricing-rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_pricing_rule(rule_id: str, service: AdminService = Depends(get_admin_service)):
    await service.remove_pricing_rule(rule_id)


@admin_router.get("/finance", response_model=FinanceOverview)
async def finance_overview(service: AdminService = Depends(get_admin_service)):
    return service.finance_overview()


@admin_router.get("/briefing")
async def briefing(service: AdminService = Depends(get_admin_service)):
    return {"briefing": await service.briefing()}
