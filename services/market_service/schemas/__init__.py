"""Market Service schemas package.

Re-exports all schemas so that:
  - ``from services.market_service.schemas import OrderResponse`` works
  - Router files import every request/response model from one place

IMPORTANT: Every schema class must be listed here.
When adding a new schema, add its import and __all__ entry.
"""

from services.market_service.schemas.address import (  # noqa: F401
    AddressPayload,
    AddressResponse,
)
from services.market_service.schemas.auth import (  # noqa: F401
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    UserResponse,
)
from services.market_service.schemas.cart import (  # noqa: F401
    CartAddRequest,
    CartItemResponse,
    CartResponse,
    CartSelectAllRequest,
    CartSummaryResponse,
    CartUpdateRequest,
    SummaryLine,
)
from services.market_service.schemas.catalog import (  # noqa: F401
    ProductCreate,
    ProductListItem,
    ProductListParams,
    ProductListResponse,
    ProductResponse,
    ProductStatusUpdate,
    ProductUpdate,
    StockAdjustRequest,
)
from services.market_service.schemas.common import CamelModel, Page  # noqa: F401
from services.market_service.schemas.farmer import (  # noqa: F401
    Certification,
    FarmerStoryResponse,
    GalleryItem,
    StoryEntryCreate,
    StoryEntryResponse,
    StoryMedia,
    StoryOverviewResponse,
    StoryOverviewUpdate,
)
from services.market_service.schemas.order import (  # noqa: F401
    AfterSaleResponse,
    ApplyAfterSaleRequest,
    CancellationResponse,
    CancelOrderRequest,
    CheckpointRequest,
    CheckpointResponse,
    CreateOrderRequest,
    LogisticsResponse,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    RefundRequest,
    RefundResponse,
    SetLogisticsRequest,
    StatusHistoryResponse,
    UpdateAfterSaleRequest,
    UpdateOrderStatusRequest,
)
from services.market_service.schemas.subscription import (  # noqa: F401
    PlanCreate,
    PlanItem,
    PlanResponse,
    PlanUpdate,
    SubscriptionCreate,
    SubscriptionStatusUpdate,
    UserSubscriptionResponse,
)
from services.market_service.schemas.upload import (  # noqa: F401
    Base64UploadRequest,
    PresignRequest,
    PresignResponse,
    UploadResponse,
)

__all__ = [
    # Shared
    "CamelModel",
    "Page",
    # Auth & users
    "AuthResponse",
    "LoginRequest",
    "ProfileResponse",
    "RegisterRequest",
    "UserResponse",
    # Catalog
    "ProductCreate",
    "ProductListItem",
    "ProductListParams",
    "ProductListResponse",
    "ProductResponse",
    "ProductStatusUpdate",
    "ProductUpdate",
    "StockAdjustRequest",
    # Cart
    "CartAddRequest",
    "CartItemResponse",
    "CartResponse",
    "CartSelectAllRequest",
    "CartSummaryResponse",
    "CartUpdateRequest",
    "SummaryLine",
    # Orders
    "AfterSaleResponse",
    "ApplyAfterSaleRequest",
    "CancellationResponse",
    "CancelOrderRequest",
    "CheckpointRequest",
    "CheckpointResponse",
    "CreateOrderRequest",
    "LogisticsResponse",
    "OrderItemResponse",
    "OrderListResponse",
    "OrderResponse",
    "RefundRequest",
    "RefundResponse",
    "SetLogisticsRequest",
    "StatusHistoryResponse",
    "UpdateAfterSaleRequest",
    "UpdateOrderStatusRequest",
    # Addresses
    "AddressPayload",
    "AddressResponse",
    # Farmers
    "Certification",
    "FarmerStoryResponse",
    "GalleryItem",
    "StoryEntryCreate",
    "StoryEntryResponse",
    "StoryMedia",
    "StoryOverviewResponse",
    "StoryOverviewUpdate",
    # Subscriptions
    "PlanCreate",
    "PlanItem",
    "PlanResponse",
    "PlanUpdate",
    "SubscriptionCreate",
    "SubscriptionStatusUpdate",
    "UserSubscriptionResponse",
    # Uploads
    "Base64UploadRequest",
    "PresignRequest",
    "PresignResponse",
    "UploadResponse",
]
