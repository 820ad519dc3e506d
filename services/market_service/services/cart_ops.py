"""Cart operations. The cart is persisted per user; totals come from pricing."""

import uuid
from typing import Optional

from libs.common.errors import INSUFFICIENT_STOCK, bad_request, not_found
from libs.common.logging import get_logger
from services.market_service.models import CartItem, Product, ProductStatus
from services.market_service.services import pricing
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_cart_items(db: AsyncSession, user_id: uuid.UUID) -> list[CartItem]:
    """Cart lines with their product loaded, oldest first."""
    result = await db.execute(
        select(CartItem)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at, CartItem.id)
        .execution_options(populate_existing=True)
    )
    return [item for item in result.scalars().all() if item.product is not None]


def summarize_cart(items: list[CartItem]) -> pricing.CheckoutSummary:
    return pricing.summarize(
        (item.product.price_fen, item.quantity) for item in items if item.selected
    )


def _check_stock(product: Product, quantity: int) -> None:
    if quantity > product.stock:
        raise bad_request(
            f"库存不足，当前仅剩 {product.stock} 件", INSUFFICIENT_STOCK
        )


async def _get_item(
    db: AsyncSession, user_id: uuid.UUID, item_id: uuid.UUID
) -> CartItem:
    result = await db.execute(
        select(CartItem).where(CartItem.id == item_id, CartItem.user_id == user_id)
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise not_found("购物车商品不存在")
    return item


async def add_item(
    db: AsyncSession, *, user_id: uuid.UUID, product_id: uuid.UUID, quantity: int
) -> CartItem:
    """Add a product, merging with an existing line (which is re-selected)."""
    product = await db.get(Product, product_id)
    if product is None or product.status is not ProductStatus.ACTIVE:
        raise not_found("商品不存在")
    if product.stock <= 0:
        raise bad_request("商品库存不足", INSUFFICIENT_STOCK)

    quantity = max(1, quantity)
    result = await db.execute(
        select(CartItem).where(
            CartItem.user_id == user_id, CartItem.product_id == product_id
        )
    )
    item = result.scalar_one_or_none()
    _check_stock(product, (item.quantity if item else 0) + quantity)

    if item is None:
        item = CartItem(
            user_id=user_id, product_id=product_id, quantity=quantity, selected=True
        )
        db.add(item)
    else:
        item.quantity += quantity
        item.selected = True

    await db.commit()
    await db.refresh(item)
    logger.info(
        "Cart of user %s: product %s quantity now %d", user_id, product_id, item.quantity
    )
    return item


async def update_item(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    item_id: uuid.UUID,
    quantity: Optional[int] = None,
    selected: Optional[bool] = None,
) -> CartItem:
    item = await _get_item(db, user_id, item_id)

    if quantity is not None:
        quantity = max(1, quantity)
        product = await db.get(Product, item.product_id)
        if product is None:
            raise not_found("商品不存在或已下架")
        _check_stock(product, quantity)
        item.quantity = quantity
    if selected is not None:
        item.selected = selected

    await db.commit()
    await db.refresh(item)
    return item


async def remove_item(
    db: AsyncSession, *, user_id: uuid.UUID, item_id: uuid.UUID
) -> None:
    item = await _get_item(db, user_id, item_id)
    await db.delete(item)
    await db.commit()


async def select_all(db: AsyncSession, *, user_id: uuid.UUID, selected: bool) -> None:
    await db.execute(
        update(CartItem)
        .where(CartItem.user_id == user_id)
        .values(selected=selected)
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()
