"""Farmer-side order management.

Farmers see and act on orders for their own farm; admins see every order
and may narrow the list with ``farmerId``.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_farmer_or_admin
from libs.auth.models import AuthUser
from libs.common.errors import bad_request
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.market_service.models import OrderStatus
from services.market_service.schemas import (
    CheckpointRequest,
    OrderListResponse,
    OrderResponse,
    SetLogisticsRequest,
    UpdateAfterSaleRequest,
    UpdateOrderStatusRequest,
)
from services.market_service.services import order_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/v1/farmer/orders", tags=["farmer-orders"])


def _farmer_scope(
    current_user: AuthUser, requested: Optional[uuid.UUID]
) -> Optional[uuid.UUID]:
    if current_user.is_admin:
        return requested
    if current_user.farmer_profile_id is None:
        raise bad_request("当前账号未绑定农户信息")
    return uuid.UUID(current_user.farmer_profile_id)


@router.get("", response_model=ApiResponse[OrderListResponse])
async def list_farmer_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50, alias="pageSize"),
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    farmer_id: Optional[uuid.UUID] = Query(None, alias="farmerId"),
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
    orders, total = await order_ops.list_orders_for_farmer(
        db,
        _farmer_scope(current_user, farmer_id),
        page=page,
        page_size=page_size,
        status=order_status,
    )
    return ok(
        OrderListResponse(
            items=[OrderResponse.from_order(o) for o in orders],
            total=total,
            page=page,
            page_size=page_size,
        )
    )


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
async def get_farmer_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
    order = await order_ops.get_order_for_actor(db, current_user, order_id)
    return ok(OrderResponse.from_order(order))


@router.patch("/{order_id}/status", response_model=ApiResponse[OrderResponse])
async def update_farmer_order_status(
    order_id: uuid.UUID,
    payload: UpdateOrderStatusRequest,
    current_user: AuthUser = Depends(require_farmer_or_admin),
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


@router.put("/{order_id}/logistics", response_model=ApiResponse[OrderResponse])
async def set_farmer_order_logistics(
    order_id: uuid.UUID,
    payload: SetLogisticsRequest,
    current_user: AuthUser = Depends(require_farmer_or_admin),
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
async def append_farmer_order_checkpoint(
    order_id: uuid.UUID,
    payload: CheckpointRequest,
    current_user: AuthUser = Depends(require_farmer_or_admin),
    db: AsyncSession = Depends(get_async_db),
):
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


@router.patch("/{order_id}/after-sale", response_model=ApiResponse[OrderResponse])
async def update_farmer_order_after_sale(
    order_id: uuid.UUID,
    payload: UpdateAfterSaleRequest,
    current_user: AuthUser = Depends(require_farmer_or_admin),
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
