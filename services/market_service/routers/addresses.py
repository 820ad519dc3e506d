"""Shipping address book."""

import uuid

from fastapi import APIRouter, Depends, Response, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.market_service.schemas import AddressPayload, AddressResponse
from services.market_service.services import address_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/api/v1/addresses", tags=["addresses"])


@router.get("", response_model=ApiResponse[list[AddressResponse]])
async def list_addresses(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Default address first, then most recently updated."""
    addresses = await address_ops.list_addresses(db, current_user.id)
    return ok([AddressResponse.model_validate(a) for a in addresses])


@router.post(
    "",
    response_model=ApiResponse[AddressResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_address(
    payload: AddressPayload,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    address = await address_ops.create_address(
        db, user_id=current_user.id, payload=payload
    )
    return ok(AddressResponse.model_validate(address))


@router.put("/{address_id}", response_model=ApiResponse[AddressResponse])
async def update_address(
    address_id: uuid.UUID,
    payload: AddressPayload,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    address = await address_ops.update_address(
        db, user_id=current_user.id, address_id=address_id, payload=payload
    )
    return ok(AddressResponse.model_validate(address))


@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(
    address_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await address_ops.delete_address(db, user_id=current_user.id, address_id=address_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
