"""Shipping address book. At most one address per user carries the default flag."""

import uuid

from libs.common.errors import not_found
from services.market_service.models import Address
from services.market_service.schemas.address import AddressPayload
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession


async def list_addresses(db: AsyncSession, user_id: uuid.UUID) -> list[Address]:
    result = await db.execute(
        select(Address)
        .where(Address.user_id == user_id)
        .order_by(Address.is_default.desc(), Address.updated_at.desc())
    )
    return list(result.scalars().all())


async def _get_owned(
    db: AsyncSession, user_id: uuid.UUID, address_id: uuid.UUID
) -> Address:
    result = await db.execute(
        select(Address).where(Address.id == address_id, Address.user_id == user_id)
    )
    address = result.scalar_one_or_none()
    if address is None:
        raise not_found("收货地址不存在")
    return address


async def _clear_default(db: AsyncSession, user_id: uuid.UUID) -> None:
    await db.execute(
        update(Address)
        .where(Address.user_id == user_id, Address.is_default.is_(True))
        .values(is_default=False)
        .execution_options(synchronize_session="fetch")
    )


async def create_address(
    db: AsyncSession, *, user_id: uuid.UUID, payload: AddressPayload
) -> Address:
    if payload.is_default:
        await _clear_default(db, user_id)
    address = Address(user_id=user_id, **payload.model_dump())
    db.add(address)
    await db.commit()
    await db.refresh(address)
    return address


async def update_address(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    address_id: uuid.UUID,
    payload: AddressPayload,
) -> Address:
    address = await _get_owned(db, user_id, address_id)
    if payload.is_default:
        await _clear_default(db, user_id)
    for field, value in payload.model_dump().items():
        setattr(address, field, value)
    await db.commit()
    await db.refresh(address)
    return address


async def delete_address(
    db: AsyncSession, *, user_id: uuid.UUID, address_id: uuid.UUID
) -> None:
    address = await _get_owned(db, user_id, address_id)
    await db.delete(address)
    await db.commit()
