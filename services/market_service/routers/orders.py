"""Customer order endpoints: checkout, tracking, cancellation and after-sale."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.market_service.models import OrderStatus
from services.market_service.schemas import (
    ApplyAfterSaleRequest,
    CancelOrderRequest,
    CheckpointRequest,
    CreateOrderRequest,
    OrderListResponse,
    OrderResponse,
    SetLogisticsRequest,
    UpdateAfterSaleRequest,
    UpdateOrderStatusRequest,
)
from services.market_service.services import order_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/v1/orders", tags=["orders"])


# ============================================================================
# CHECKOUT & READS
# ============================================================================


@router.get("", response_model=ApiResponse[OrderListResponse])
async def list_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50, alias="pageSize"),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """The caller's orders, newest first."""
    orders, total = await order_ops.list_orders_for_customer(
        db, current_user.id, page=page, page_size=page_size, status=order_status
    )
    return ok(
        OrderListResponse(
            items=[OrderResponse.from_order(o) for o in orders],
            total=total,
            page=page,
            page_size=page_size,
        )
    )


@router.post(
    "",
    response_model=ApiResponse[OrderResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    payload: CreateOrderRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Check out the selected cart lines as one pending order."""
    order = await order_ops.create_order_from_cart(
        db,
        customer_id=current_user.id,
        contact_name=payload.contact_name,
        contact_phone=payload.contact_phone,
        address=payload.address,
        payment_method=payload.payment_method,
        note=payload.note,
    )
    return ok(OrderResponse.from_order(order))


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_ops.get_order_for_actor(db, current_user, order_id)
    return ok(OrderResponse.from_order(order))


# ============================================================================
# LIFECYCLE
# ============================================================================


@router.patch("/{order_id}/status", response_model=ApiResponse[OrderResponse])
async def update_order_status(
    order_id: uuid.UUID,
    payload: UpdateOrderStatusRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_ops.update_order_status(
        db,
        actor=current_user,
        order_id=order_id,
        status=payload.status,
        note=payload.note,
    )
    return ok(OrderResponse.from_order(order))


@router.post("/{order_id}/cancel", response_model=ApiResponse[OrderResponse])
async def cancel_order(
    order_id: uuid.UUID,
    payload: Optional[CancelOrderRequest] = None,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Cancel a pending or processing order."""
    order = await order_ops.cancel_order(
        db,
        actor=current_user,
        order_id=order_id,
        reason=payload.reason if payload else None,
    )
    return ok(OrderResponse.from_order(order))


@router.put("/{order_id}/logistics", response_model=ApiResponse[OrderResponse])
async def set_logistics(
    order_id: uuid.UUID,
    payload: SetLogisticsRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_ops.set_order_logistics(
        db,
        actor=current_user,
        order_id=order_id,
        carrier=payload.carrier,
        tracking_number=payload.tracking_number,
        contact_phone=payload.contact_phone,
    )
    return ok(OrderResponse.from_order(order))


@router.post(
    "/{order_id}/logistics/checkpoints", response_model=ApiResponse[OrderResponse]
)
async def append_checkpoint(
    order_id: uuid.UUID,
    payload: CheckpointRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Record a tracking event; a delivered event completes a shipped order."""
    order = await order_ops.append_logistics_checkpoint(
        db,
        actor=current_user,
        order_id=order_id,
        status=payload.status,
        kind=payload.kind,
        description=payload.description,
        location=payload.location,
    )
    return ok(OrderResponse.from_order(order))


# ============================================================================
# AFTER-SALE
# ============================================================================


@router.post("/{order_id}/after-sale", response_model=ApiResponse[OrderResponse])
async def apply_after_sale(
    order_id: uuid.UUID,
    payload: ApplyAfterSaleRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_ops.apply_order_after_sale(
        db,
        actor=current_user,
        order_id=order_id,
        after_sale_type=payload.type,
        reason=payload.reason,
        description=payload.description,
        attachments=[str(url) for url in payload.attachments],
    )
    return ok(OrderResponse.from_order(order))


@router.patch("/{order_id}/after-sale", response_model=ApiResponse[OrderResponse])
async def update_after_sale(
    order_id: uuid.UUID,
    payload: UpdateAfterSaleRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_ops.update_order_after_sale(
        db,
        actor=current_user,
        order_id=order_id,
        status=payload.status,
        resolution_note=payload.resolution_note,
        refund=payload.refund,
    )
    return ok(OrderResponse.from_order(order))
