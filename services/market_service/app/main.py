"""FastAPI application for the FarmDirect Market Service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.errors import register_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter
from services.market_service.routers import (
    addresses_router,
    auth_router,
    cart_router,
    farmer_orders_router,
    farmers_router,
    orders_router,
    products_router,
    subscriptions_router,
    uploads_router,
    users_router,
)


def create_app() -> FastAPI:
    """Create and configure the Market Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="FarmDirect Market Service",
        version="0.1.0",
        description="Farm-to-consumer catalog, cart, orders and after-sale service.",
    )

    # Rate limiter state is read by the slowapi decorators
    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Structured logging + request tracing
    add_observability_middleware(app)

    # {success: false, message, code} for every error
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "market"}

    # Customer-facing routes
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(products_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(addresses_router)
    app.include_router(subscriptions_router)
    app.include_router(farmers_router)

    # Farmer / admin routes
    app.include_router(farmer_orders_router)
    app.include_router(uploads_router)

    return app


app = create_app()
