"""Product catalog: public browsing and farmer-owned product management."""

import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_farmer_or_admin
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.market_service.schemas import (
    ProductCreate,
    ProductListItem,
    ProductListParams,
    ProductListResponse,
    ProductResponse,
    ProductStatusUpdate,
    ProductUpdate,
    StockAdjustRequest,
)
from services.market_service.services import catalog_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/v1/products", tags=["products"])


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("", response_model=ApiResponse[ProductListResponse])
async def list_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    keyword: Optional[str] = Query(None),
    sort_by: Optional[Literal["price", "name", "stock"]] = Query(None, alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    product_status: Literal["draft", "active", "inactive", "all"] = Query(
        "active", alias="status"
    ),
    farmer_id: Optional[uuid.UUID] = Query(None, alias="farmerId"),
    db: AsyncSession = Depends(get_async_db),
):
    """Paginated, filterable product listing (newest first by default)."""
    params = ProductListParams(
        page=page,
        page_size=page_size,
        category_id=category_id,
        keyword=keyword,
        sort_by=sort_by,
        sort_order=sort_order,
        status=product_status,
        farmer_id=farmer_id,
    )
    products, total = await catalog_ops.list_products(db, params)
    return ok(
        ProductListResponse(
            items=[ProductListItem.from_product(p) for p in products],
            total=total,
            page=page,
            page_size=page_size,
        )
    )


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
async def get_product(product_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    product = await catalog_ops.get_product(db, product_id)
    return ok(ProductResponse.from_product(product))


# ============================================================================
# FARMER / ADMIN
# ============================================================================


@router.post(
    "",
    response_model=ApiResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    payload: ProductCreate,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await catalog_ops.create_product(db, actor=current_user, payload=payload)
    return ok(ProductResponse.from_product(product))


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Partial update; ``images`` replaces the whole list when given."""
    product = await catalog_ops.update_product(
        db, actor=current_user, product_id=product_id, payload=payload
    )
    return ok(ProductResponse.from_product(product))


@router.patch("/{product_id}/status", response_model=ApiResponse[ProductResponse])
async def update_product_status(
    product_id: uuid.UUID,
    payload: ProductStatusUpdate,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await catalog_ops.update_product_status(
        db, actor=current_user, product_id=product_id, status=payload.status
    )
    return ok(ProductResponse.from_product(product))


@router.post("/{product_id}/stock", response_model=ApiResponse[ProductResponse])
async def adjust_product_stock(
    product_id: uuid.UUID,
    payload: StockAdjustRequest,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Restock (positive delta) or write off (negative delta) a product."""
    await catalog_ops.get_product_for_editor(db, current_user, product_id)
    product = await catalog_ops.adjust_stock(db, product_id, payload.delta)
    return ok(ProductResponse.from_product(product))
