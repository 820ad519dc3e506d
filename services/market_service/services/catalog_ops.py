"""Catalog operations: listing, farmer-owned product edits and stock."""

import uuid
from typing import Optional

from libs.auth.models import AuthUser
from libs.common.currency import yuan_to_fen
from libs.common.errors import (
    INSUFFICIENT_STOCK,
    PRODUCT_NOT_FOUND,
    bad_request,
    not_found,
)
from libs.common.logging import get_logger
from services.market_service.models import Product, ProductStatus
from services.market_service.schemas.catalog import (
    ProductCreate,
    ProductListParams,
    ProductUpdate,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

_SORT_COLUMNS = {
    "price": Product.price_fen,
    "name": Product.name,
    "stock": Product.stock,
}

# Money fields on the write schemas that map to *_fen columns.
_MONEY_FIELDS = {"price": "price_fen", "original_price": "original_price_fen"}


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def list_products(
    db: AsyncSession, params: ProductListParams
) -> tuple[list[Product], int]:
    query = select(Product)
    count_query = select(func.count()).select_from(Product)

    filters = []
    if params.status != "all":
        filters.append(Product.status == ProductStatus(params.status))
    if params.category_id:
        filters.append(Product.category_id == params.category_id)
    if params.farmer_id:
        filters.append(Product.farmer_id == params.farmer_id)
    if params.keyword and params.keyword.strip():
        filters.append(Product.name.ilike(f"%{params.keyword.strip()}%"))
    if filters:
        query = query.where(*filters)
        count_query = count_query.where(*filters)

    if params.sort_by:
        column = _SORT_COLUMNS[params.sort_by]
        query = query.order_by(
            column.desc() if params.sort_order == "desc" else column.asc(),
            Product.id,
        )
    else:
        query = query.order_by(Product.created_at.desc(), Product.id)

    query = query.offset((params.page - 1) * params.page_size).limit(params.page_size)

    total = (await db.execute(count_query)).scalar_one()
    products = list((await db.execute(query)).scalars().all())
    return products, total


async def find_product(db: AsyncSession, product_id: uuid.UUID) -> Optional[Product]:
    return await db.get(Product, product_id)


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await find_product(db, product_id)
    if product is None:
        raise not_found("商品不存在")
    return product


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def _owning_farmer_id(actor: AuthUser, requested: Optional[uuid.UUID]) -> uuid.UUID:
    if actor.is_admin and requested is not None:
        return requested
    if actor.farmer_profile_id is None:
        raise bad_request("当前账号未绑定农户信息")
    return uuid.UUID(actor.farmer_profile_id)


async def get_product_for_editor(
    db: AsyncSession, actor: AuthUser, product_id: uuid.UUID
) -> Product:
    """Fetch a product the actor may edit; farmers only see their own."""
    product = await find_product(db, product_id)
    if product is None:
        raise not_found("商品不存在")
    if not actor.is_admin and str(product.farmer_id) != actor.farmer_profile_id:
        raise not_found("商品不存在")
    return product


async def create_product(
    db: AsyncSession, *, actor: AuthUser, payload: ProductCreate
) -> Product:
    data = payload.model_dump(exclude={"farmer_id", "price", "original_price"})
    product = Product(
        **data,
        farmer_id=_owning_farmer_id(actor, payload.farmer_id),
        price_fen=yuan_to_fen(payload.price),
        original_price_fen=(
            yuan_to_fen(payload.original_price)
            if payload.original_price is not None
            else None
        ),
    )
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info("Created product %s for farmer %s", product.id, product.farmer_id)
    return product


async def update_product(
    db: AsyncSession,
    *,
    actor: AuthUser,
    product_id: uuid.UUID,
    payload: ProductUpdate,
) -> Product:
    product = await get_product_for_editor(db, actor, product_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if field in _MONEY_FIELDS:
            value = yuan_to_fen(value) if value is not None else None
            field = _MONEY_FIELDS[field]
        setattr(product, field, value)

    await db.commit()
    await db.refresh(product)
    logger.info("Updated product %s", product.id)
    return product


async def update_product_status(
    db: AsyncSession,
    *,
    actor: AuthUser,
    product_id: uuid.UUID,
    status: ProductStatus,
) -> Product:
    product = await get_product_for_editor(db, actor, product_id)
    product.status = status
    await db.commit()
    await db.refresh(product)
    logger.info("Product %s status set to %s", product.id, status.value)
    return product


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------


def apply_stock_delta(product: Product, delta: int) -> int:
    """Change stock by ``delta`` in memory; stock never goes negative."""
    new_stock = product.stock + delta
    if new_stock < 0:
        raise bad_request(
            f"商品「{product.name}」库存不足，当前仅剩 {product.stock} 件",
            INSUFFICIENT_STOCK,
        )
    product.stock = new_stock
    return new_stock


async def adjust_stock(db: AsyncSession, product_id: uuid.UUID, delta: int) -> Product:
    """Row-locked read-check-write of a product's stock."""
    result = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise not_found("商品不存在", PRODUCT_NOT_FOUND)

    try:
        before = product.stock
        apply_stock_delta(product, delta)
    except Exception:
        await db.rollback()
        raise

    await db.commit()
    logger.info(
        "Adjusted stock for product %s: %d -> %d", product.id, before, product.stock
    )
    return product
