"""Market Service models package.

Re-exports all models and enums so that:
  - ``from services.market_service.models import Order`` works
  - Alembic env.py sees every table through one import
  - SQLAlchemy's mapper registry sees every model class on import

IMPORTANT: Every model class AND enum must be listed here.
"""

from services.market_service.models.address import Address  # noqa: F401
from services.market_service.models.cart import CartItem  # noqa: F401
from services.market_service.models.catalog import (  # noqa: F401
    FALLBACK_THUMBNAIL,
    Product,
)
from services.market_service.models.enums import (  # noqa: F401
    AfterSaleStatus,
    AfterSaleType,
    CheckpointKind,
    OrderStatus,
    PaymentMethod,
    ProductStatus,
    RefundMethod,
    SubscriptionCycle,
    SubscriptionStatus,
    UserRole,
)
from services.market_service.models.order import (  # noqa: F401
    LogisticsCheckpoint,
    Order,
    OrderAfterSale,
    OrderItem,
    OrderLogistics,
    OrderStatusHistory,
)
from services.market_service.models.subscription import (  # noqa: F401
    SubscriptionPlan,
    UserSubscription,
)
from services.market_service.models.user import (  # noqa: F401
    FarmerProfile,
    FarmerStory,
    User,
)

__all__ = [
    # Enums
    "AfterSaleStatus",
    "AfterSaleType",
    "CheckpointKind",
    "OrderStatus",
    "PaymentMethod",
    "ProductStatus",
    "RefundMethod",
    "SubscriptionCycle",
    "SubscriptionStatus",
    "UserRole",
    # Identity
    "User",
    "FarmerProfile",
    "FarmerStory",
    # Catalog & cart
    "FALLBACK_THUMBNAIL",
    "Product",
    "CartItem",
    # Orders
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    "OrderLogistics",
    "LogisticsCheckpoint",
    "OrderAfterSale",
    # Customer data
    "Address",
    "SubscriptionPlan",
    "UserSubscription",
]
