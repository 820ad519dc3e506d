"""Shopping cart of the signed-in user."""

import uuid

from fastapi import APIRouter, Depends, Response, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.market_service.schemas import (
    CartAddRequest,
    CartItemResponse,
    CartResponse,
    CartSelectAllRequest,
    CartSummaryResponse,
    CartUpdateRequest,
)
from services.market_service.services import cart_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


async def _cart_response(db: AsyncSession, user_id: uuid.UUID) -> CartResponse:
    items = await cart_ops.get_cart_items(db, user_id)
    return CartResponse(
        items=[CartItemResponse.from_item(item) for item in items],
        summary=CartSummaryResponse.from_summary(cart_ops.summarize_cart(items)),
    )


@router.get("", response_model=ApiResponse[CartResponse])
async def get_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Cart lines plus the price summary of the selected lines."""
    return ok(await _cart_response(db, current_user.id))


@router.post(
    "",
    response_model=ApiResponse[CartItemResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_to_cart(
    payload: CartAddRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    item = await cart_ops.add_item(
        db,
        user_id=current_user.id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )
    return ok(CartItemResponse.from_item(item))


@router.post("/select-all", response_model=ApiResponse[CartResponse])
async def select_all(
    payload: CartSelectAllRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await cart_ops.select_all(db, user_id=current_user.id, selected=payload.selected)
    return ok(await _cart_response(db, current_user.id))


@router.patch("/{item_id}", response_model=ApiResponse[CartItemResponse])
async def update_cart_item(
    item_id: uuid.UUID,
    payload: CartUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    item = await cart_ops.update_item(
        db,
        user_id=current_user.id,
        item_id=item_id,
        quantity=payload.quantity,
        selected=payload.selected,
    )
    return ok(CartItemResponse.from_item(item))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_cart_item(
    item_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await cart_ops.remove_item(db, user_id=current_user.id, item_id=item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
