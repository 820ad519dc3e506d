"""Registration, login and profile lookups."""

import uuid
from typing import Optional

from libs.auth.passwords import hash_password, verify_password
from libs.auth.tokens import create_access_token
from libs.common.errors import conflict, not_found, unauthorized
from libs.common.logging import get_logger
from services.market_service.models import Address, User, UserRole
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

_BAD_CREDENTIALS = "手机号或密码错误"


def issue_token(user: User) -> str:
    return create_access_token(
        user_id=str(user.id),
        role=user.role.value,
        phone=user.phone,
        name=user.name,
        farmer_profile_id=str(user.farmer_profile.id) if user.farmer_profile else None,
    )


async def _find_by_phone(db: AsyncSession, phone: str):
    result = await db.execute(select(User).where(User.phone == phone))
    return result.scalar_one_or_none()


async def register_user(
    db: AsyncSession, *, phone: str, password: str, name: Optional[str] = None
) -> tuple[User, str]:
    if await _find_by_phone(db, phone) is not None:
        raise conflict("手机号已注册")

    user = User(
        phone=phone,
        password_hash=hash_password(password),
        name=name,
        role=UserRole.CUSTOMER,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same phone.
        await db.rollback()
        raise conflict("手机号已注册")
    await db.refresh(user)

    logger.info("Registered user %s", user.id)
    return user, issue_token(user)


async def login(db: AsyncSession, *, phone: str, password: str) -> tuple[User, str]:
    user = await _find_by_phone(db, phone)
    if user is None or not verify_password(user.password_hash, password):
        logger.warning("Failed login attempt for phone ending %s", phone[-4:])
        raise unauthorized(_BAD_CREDENTIALS)
    return user, issue_token(user)


async def get_profile(db: AsyncSession, user_id: uuid.UUID) -> tuple[User, int]:
    """Return the user and how many addresses they have saved."""
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise not_found("用户不存在")
    address_count = (
        await db.execute(
            select(func.count()).select_from(Address).where(Address.user_id == user_id)
        )
    ).scalar_one()
    return user, address_count
