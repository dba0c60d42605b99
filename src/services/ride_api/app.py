from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.common.exceptions import (
    CategoryMismatchError,
    DuplicateAcceptanceError,
    DuplicateRuleError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NotFoundError,
    PaymentProviderNotConfiguredError,
    RegistryInvariantError,
)
from src.common.logger import log_error, log_info, TypeMsg
from src.config import settings
from src.config.loader import Settings
from src.core.advisor.service import AdvisorService
from src.services.ride_api.dependencies import build_services
from src.services.ride_api.routes import admin_router, rides_router, users_router


ERROR_STATUS: dict[type[Exception], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    DuplicateAcceptanceError: status.HTTP_409_CONFLICT,
    CategoryMismatchError: status.HTTP_409_CONFLICT,
    DuplicateRuleError: status.HTTP_409_CONFLICT,
    InsufficientBalanceError: status.HTTP_402_PAYMENT_REQUIRED,
    PaymentProviderNotConfiguredError: status.HTTP_402_PAYMENT_REQUIRED,
    ValueError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    await log_info(f"{request.method} {request.url.path} -> {status_code}: {exc}", type_msg=TypeMsg.DEBUG)
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


async def invariant_error_handler(request: Request, exc: RegistryInvariantError) -> JSONResponse:
    await log_error(f"Нарушен инвариант реестра: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


def create_app(config: Optional[Settings] = None, advisor: Optional[AdvisorService] = None) -> FastAPI:
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        await log_info("Starting Ride API...", type_msg=TypeMsg.INFO)
        services = build_services(config, advisor)
        if config.system.SEED_DEMO_DATA:
            await services.users.seed_demo_users()
        app.state.services = services

        yield

        # Shutdown
        await log_info("Shutting down Ride API...", type_msg=TypeMsg.INFO)
        await services.close()

    app = FastAPI(
        title="Ride API",
        description="Ride lifecycle, pricing, settlement and administration",
        version=config.system.VERSION,
        lifespan=lifespan,
    )

    app.include_router(rides_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    for error_type in ERROR_STATUS:
        app.add_exception_handler(error_type, domain_error_handler)
    app.add_exception_handler(RegistryInvariantError, invariant_error_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "ride_api"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "src.services.ride_api.app:app",
        host=settings.api.API_HOST,
        port=settings.api.API_PORT,
        reload=True
    )
