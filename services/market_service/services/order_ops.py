"""Order operations: checkout from cart and every mutation of an order.

Each mutation loads the order aggregate under ``SELECT ... FOR UPDATE``,
hands it to ``order_lifecycle`` and commits once, so two requests against
the same order can never interleave a legality check with a write.
Checkout locks the product rows it consumes (ordered by id) and commits
stock, order and cart changes as a single unit.
"""

import uuid
from typing import Callable, Optional

from libs.auth.models import AuthUser
from libs.common.currency import yuan_to_fen
from libs.common.datetime_utils import utc_now
from libs.common.errors import (
    EMPTY_CART,
    MULTI_FARMER_CART,
    NO_SELECTION,
    PRODUCT_NOT_FOUND,
    bad_request,
    not_found,
)
from libs.common.logging import get_logger
from services.market_service.models import (
    AfterSaleStatus,
    AfterSaleType,
    CartItem,
    CheckpointKind,
    Order,
    OrderItem,
    OrderLogistics,
    OrderStatus,
    PaymentMethod,
    Product,
    ProductStatus,
)
from services.market_service.schemas.order import RefundRequest
from services.market_service.services import order_lifecycle, pricing
from services.market_service.services.catalog_ops import apply_stock_delta
from services.market_service.services.order_lifecycle import OrderAction, RefundInfo
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

ORDER_LOAD_OPTIONS = (
    selectinload(Order.items),
    selectinload(Order.status_history),
    selectinload(Order.logistics).selectinload(OrderLogistics.checkpoints),
    selectinload(Order.after_sale),
)


def generate_order_number() -> str:
    return f"FD-{utc_now():%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


async def load_order(
    db: AsyncSession, order_id: uuid.UUID, *, lock: bool = False
) -> Optional[Order]:
    query = (
        select(Order)
        .where(Order.id == order_id)
        .options(*ORDER_LOAD_OPTIONS)
        .execution_options(populate_existing=True)
    )
    if lock:
        query = query.with_for_update(of=Order)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_order_for_actor(
    db: AsyncSession,
    actor: AuthUser,
    order_id: uuid.UUID,
    action: OrderAction = OrderAction.VIEW,
    *,
    lock: bool = False,
) -> Order:
    """Load an order the actor may act on. Denials look like absence."""
    order = await load_order(db, order_id, lock=lock)
    if order is None or not order_lifecycle.can(actor, action, order):
        raise not_found("订单不存在")
    return order


async def _mutate(
    db: AsyncSession,
    actor: AuthUser,
    order_id: uuid.UUID,
    action: OrderAction,
    mutate: Callable[[Order], object],
) -> Order:
    order = await get_order_for_actor(db, actor, order_id, action, lock=True)
    try:
        mutate(order)
    except Exception:
        await db.rollback()
        raise
    # Also ends the transaction (and releases the row lock) for no-op requests.
    await db.commit()
    return await load_order(db, order_id)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


async def create_order_from_cart(
    db: AsyncSession,
    *,
    customer_id: uuid.UUID,
    contact_name: str,
    contact_phone: str,
    address: str,
    payment_method: PaymentMethod,
    note: Optional[str] = None,
) -> Order:
    """Turn the selected cart lines into a pending order.

    Validation happens against row-locked products before anything is
    written; any failure rolls back the whole unit so stock and cart are
    left exactly as they were.
    """
    result = await db.execute(
        select(CartItem)
        .where(CartItem.user_id == customer_id)
        .order_by(CartItem.created_at, CartItem.id)
    )
    cart_items = list(result.scalars().all())
    if not cart_items:
        raise bad_request("购物车为空", EMPTY_CART)
    selected = [item for item in cart_items if item.selected]
    if not selected:
        raise bad_request("请先选择要结算的商品", NO_SELECTION)

    try:
        result = await db.execute(
            select(Product)
            .where(Product.id.in_([item.product_id for item in selected]))
            .order_by(Product.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        products = {product.id: product for product in result.scalars().all()}

        for item in selected:
            product = products.get(item.product_id)
            if product is None or product.status is not ProductStatus.ACTIVE:
                raise not_found("购物车中存在已下架商品", PRODUCT_NOT_FOUND)
            # Raises INSUFFICIENT_STOCK; nothing is flushed until commit.
            apply_stock_delta(product, -item.quantity)

        farmer_ids = {products[item.product_id].farmer_id for item in selected}
        if len(farmer_ids) > 1:
            raise bad_request(
                "当前订单包含多个农户的商品，请分单结算", MULTI_FARMER_CART
            )

        summary = pricing.summarize(
            (products[item.product_id].price_fen, item.quantity) for item in selected
        )
        now = utc_now()
        order = Order(
            order_number=generate_order_number(),
            customer_id=customer_id,
            farmer_id=farmer_ids.pop(),
            subtotal_fen=summary.subtotal_fen,
            discount_fen=summary.discount_fen,
            delivery_fee_fen=summary.delivery_fee_fen,
            total_fen=summary.total_fen,
            contact_name=contact_name,
            contact_phone=contact_phone,
            address=address,
            payment_method=payment_method,
            note=(note or "").strip() or None,
            version=1,
            created_at=now,
            updated_at=now,
        )
        for position, item in enumerate(selected):
            product = products[item.product_id]
            order.items.append(
                OrderItem(
                    position=position,
                    product_id=product.id,
                    product_name=product.name,
                    thumbnail=product.thumbnail,
                    unit=product.unit,
                    unit_price_fen=product.price_fen,
                    quantity=item.quantity,
                    subtotal_fen=product.price_fen * item.quantity,
                )
            )
        order_lifecycle.seed_history(order, now)
        db.add(order)

        for item in selected:
            await db.delete(item)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Created order %s for customer %s (farmer=%s, items=%d, total_fen=%d)",
        order.order_number,
        customer_id,
        order.farmer_id,
        len(selected),
        order.total_fen,
    )
    return await load_order(db, order.id)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


async def _list_orders(
    db: AsyncSession,
    filters: list,
    *,
    page: int,
    page_size: int,
    status: Optional[OrderStatus],
) -> tuple[list[Order], int]:
    if status is not None:
        filters = [*filters, Order.status == status]

    count_query = select(func.count()).select_from(Order).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    query = (
        select(Order)
        .where(*filters)
        .options(*ORDER_LOAD_OPTIONS)
        .order_by(Order.created_at.desc(), Order.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .execution_options(populate_existing=True)
    )
    orders = list((await db.execute(query)).scalars().all())
    return orders, total


async def list_orders_for_customer(
    db: AsyncSession,
    customer_id: uuid.UUID,
    *,
    page: int = 1,
    page_size: int = 10,
    status: Optional[OrderStatus] = None,
) -> tuple[list[Order], int]:
    return await _list_orders(
        db,
        [Order.customer_id == customer_id],
        page=page,
        page_size=page_size,
        status=status,
    )


async def list_orders_for_farmer(
    db: AsyncSession,
    farmer_id: Optional[uuid.UUID],
    *,
    page: int = 1,
    page_size: int = 10,
    status: Optional[OrderStatus] = None,
) -> tuple[list[Order], int]:
    """Orders of one farmer; ``farmer_id=None`` lists all (admin view)."""
    filters = [Order.farmer_id == farmer_id] if farmer_id is not None else []
    return await _list_orders(
        db, filters, page=page, page_size=page_size, status=status
    )


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def update_order_status(
    db: AsyncSession,
    *,
    actor: AuthUser,
    order_id: uuid.UUID,
    status: OrderStatus,
    note: Optional[str] = None,
) -> Order:
    return await _mutate(
        db,
        actor,
        order_id,
        OrderAction.UPDATE_STATUS,
        lambda order: order_lifecycle.transition(order, status, note),
    )


async def cancel_order(
    db: AsyncSession,
    *,
    actor: AuthUser,
    order_id: uuid.UUID,
    reason: Optional[str] = None,
) -> Order:
    return await _mutate(
        db,
        actor,
        order_id,
        OrderAction.CANCEL,
        lambda order: order_lifecycle.cancel(order, reason),
    )


async def set_order_logistics(
    db: AsyncSession,
    *,
    actor: AuthUser,
    order_id: uuid.UUID,
    carrier: str,
    tracking_number: str,
    contact_phone: Optional[str] = None,
) -> Order:
    return await _mutate(
        db,
        actor,
        order_id,
        OrderAction.SET_LOGISTICS,
        lambda order: order_lifecycle.set_logistics(
            order,
            carrier=carrier,
            tracking_number=tracking_number,
            contact_phone=contact_phone,
        ),
    )


async def append_logistics_checkpoint(
    db: AsyncSession,
    *,
    actor: AuthUser,
    order_id: uuid.UUID,
    status: str,
    kind: Optional[CheckpointKind] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
) -> Order:
    return await _mutate(
        db,
        actor,
        order_id,
        OrderAction.APPEND_CHECKPOINT,
        lambda order: order_lifecycle.append_checkpoint(
            order,
            status=status,
            kind=kind,
            description=description,
            location=location,
        ),
    )


async def apply_order_after_sale(
    db: AsyncSession,
    *,
    actor: AuthUser,
    order_id: uuid.UUID,
    after_sale_type: AfterSaleType,
    reason: str,
    description: Optional[str] = None,
    attachments: Optional[list[str]] = None,
) -> Order:
    return await _mutate(
        db,
        actor,
        order_id,
        OrderAction.APPLY_AFTER_SALE,
        lambda order: order_lifecycle.apply_after_sale(
            order,
            after_sale_type=after_sale_type,
            reason=reason,
            description=description,
            attachments=attachments,
        ),
    )


async def update_order_after_sale(
    db: AsyncSession,
    *,
    actor: AuthUser,
    order_id: uuid.UUID,
    status: AfterSaleStatus,
    resolution_note: Optional[str] = None,
    refund: Optional[RefundRequest] = None,
) -> Order:
    refund_info = None
    if refund is not None:
        refund_info = RefundInfo(
            amount_fen=yuan_to_fen(refund.amount),
            method=refund.method,
            reference_id=refund.reference_id,
            completed_at=refund.completed_at,
        )
    return await _mutate(
        db,
        actor,
        order_id,
        OrderAction.UPDATE_AFTER_SALE,
        lambda order: order_lifecycle.update_after_sale(
            order,
            status=status,
            resolution_note=resolution_note,
            refund=refund_info,
        ),
    )
