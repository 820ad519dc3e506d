"""Market service routers."""

from services.market_service.routers.addresses import router as addresses_router
from services.market_service.routers.auth import router as auth_router
from services.market_service.routers.cart import router as cart_router
from services.market_service.routers.farmer_orders import router as farmer_orders_router
from services.market_service.routers.farmers import router as farmers_router
from services.market_service.routers.orders import router as orders_router
from services.market_service.routers.products import router as products_router
from services.market_service.routers.subscriptions import router as subscriptions_router
from services.market_service.routers.uploads import router as uploads_router
from services.market_service.routers.users import router as users_router

__all__ = [
    "addresses_router",
    "auth_router",
    "cart_router",
    "farmer_orders_router",
    "farmers_router",
    "orders_router",
    "products_router",
    "subscriptions_router",
    "uploads_router",
    "users_router",
]
